"""Local persistence for credentials and settings."""

from .local_store import LocalStore, StorageKeys

__all__ = ["LocalStore", "StorageKeys"]
