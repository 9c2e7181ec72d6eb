"""Administrative client for the Hive identity service."""

__version__ = "1.0.0"
