"""Durable key/value store for session credentials and settings."""

import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from cryptography.fernet import Fernet, InvalidToken

from ..utils.logging_config import get_logger
from ..utils.exceptions import StorageError

logger = get_logger()


class StorageKeys:
    """Stable keys of the persisted state."""

    BASE_URL = "auth.baseUrl"
    ACCESS_TOKEN = "auth.accessToken"
    REFRESH_TOKEN = "auth.refreshToken"
    COMPANY_ID = "auth.companyId"
    CLIENT_ID = "auth.clientId"
    CLIENT_SECRET = "auth.clientSecret"
    USE_OAUTH = "auth.useOAuth"

    ALL = (BASE_URL, ACCESS_TOKEN, REFRESH_TOKEN, COMPANY_ID, CLIENT_ID, CLIENT_SECRET, USE_OAUTH)


class LocalStore:
    """Persists string values under stable keys, optionally Fernet-encrypted."""

    def __init__(self, state_file: Path, encryption_key: Optional[str] = None):
        """
        Initialize the store and load any saved state.

        Args:
            state_file: Path of the state file
            encryption_key: Fernet encryption key (optional)
        """
        self.state_file = state_file
        self.encryption_key = encryption_key
        self._fernet = None
        self._lock = threading.RLock()

        if encryption_key:
            try:
                self._fernet = Fernet(encryption_key.encode())
            except Exception as e:
                logger.warning(f"Invalid encryption key, state will be stored unencrypted: {e}")

        self._values: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.state_file.exists():
            logger.debug("No saved state found")
            return {}

        try:
            data = self.state_file.read_bytes()

            if self._fernet:
                data = self._fernet.decrypt(data)

            state = json.loads(data.decode())
            values = state.get("values", {})
            if not isinstance(values, dict):
                raise ValueError("values is not an object")

            logger.debug(f"Loaded {len(values)} stored settings from {self.state_file}")
            return {str(k): str(v) for k, v in values.items() if v is not None}

        except (InvalidToken, ValueError, OSError) as e:
            logger.error(f"Failed to load saved state, starting empty: {e}")
            return {}

    def _save(self) -> None:
        payload = {
            "values": self._values,
            "saved_at": datetime.utcnow().isoformat(),
        }
        data = json.dumps(payload).encode()

        if self._fernet:
            data = self._fernet.encrypt(data)

        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_file = self.state_file.with_name(self.state_file.name + ".tmp")
            tmp_file.write_bytes(data)
            tmp_file.replace(self.state_file)
        except OSError as e:
            logger.error(f"Failed to save state: {e}")
            raise StorageError(f"State save failed: {e}")

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return the stored value for key, or default."""
        with self._lock:
            return self._values.get(key, default)

    def set(self, key: str, value: Optional[str]) -> None:
        """
        Store a value. Empty values remove the key.

        Args:
            key: Storage key
            value: Value to store, or None/"" to clear
        """
        with self._lock:
            if value is None or value == "":
                if key not in self._values:
                    return
                del self._values[key]
            else:
                if self._values.get(key) == value:
                    return
                self._values[key] = value
            self._save()

    def update(self, values: Dict[str, Optional[str]]) -> None:
        """Set several keys in one write."""
        with self._lock:
            for key, value in values.items():
                if value is None or value == "":
                    self._values.pop(key, None)
                else:
                    self._values[key] = value
            self._save()

    def remove(self, key: str) -> None:
        """Clear one key."""
        self.set(key, None)

    def clear(self) -> None:
        """Delete all stored state."""
        with self._lock:
            self._values = {}
            if self.state_file.exists():
                self.state_file.unlink()
            logger.info("Cleared local state")

    def as_dict(self) -> Dict[str, str]:
        """Snapshot of all stored values."""
        with self._lock:
            return dict(self._values)
