"""Per-call request context."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class RequestContext:
    """One outbound API call.

    ``retried`` marks a resend after a token refresh and bounds the retry to
    a single attempt. ``sent_token`` is the access token that was attached
    when the request last went out.
    """

    method: str
    path: str
    params: Optional[Dict[str, Any]] = None
    json: Any = None
    data: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    retried: bool = False
    sent_token: Optional[str] = None

    def __post_init__(self):
        self.method = self.method.upper()
        if self.params:
            # Unset query values are dropped rather than sent as "None"
            self.params = {k: v for k, v in self.params.items() if v is not None}
