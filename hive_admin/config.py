"""Configuration management for the Hive admin client."""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base paths
HOME_DIR = Path(os.getenv("HIVE_ADMIN_HOME", Path.home() / ".hive_admin"))


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ApiConfig:
    """Backend API configuration."""

    base_url: str = os.getenv("HIVE_API_URL", "https://apihiveclient.bigbee.su")
    timeout: float = float(os.getenv("HIVE_API_TIMEOUT", "30"))
    login_path: str = "/login"
    oauth_token_path: str = "/oauth/token"
    refresh_path: str = "/refresh/token"
    logout_path: str = "/auth/logout"
    me_path: str = "/users/me"


@dataclass
class AuthConfig:
    """Authentication defaults used until the operator stores their own."""

    use_oauth: bool = _env_flag("HIVE_USE_OAUTH", "1")
    client_id: Optional[str] = os.getenv("HIVE_CLIENT_ID") or None
    client_secret: Optional[str] = os.getenv("HIVE_CLIENT_SECRET") or None


@dataclass
class StorageConfig:
    """Local state storage configuration."""

    state_file: Path = Path(os.getenv("HIVE_ADMIN_STATE_FILE", HOME_DIR / "state"))
    encryption_key: str = os.getenv("HIVE_ADMIN_ENCRYPTION_KEY", "")


@dataclass
class AdminConfig:
    """Main admin client configuration."""

    api: ApiConfig = field(default_factory=ApiConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "WARNING")
    log_file: Optional[Path] = (
        Path(os.environ["HIVE_ADMIN_LOG_FILE"]) if os.getenv("HIVE_ADMIN_LOG_FILE") else None
    )

    def ensure_directories(self):
        """Create the directory holding local state."""
        self.storage.state_file.parent.mkdir(parents=True, exist_ok=True)


# Global config instance
config = AdminConfig()
