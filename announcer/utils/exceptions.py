"""
Exception taxonomy for the announcer.

UpstreamError and StorageError keep their parts as attributes so the poll
loop can log where a cycle stopped.
"""

class AnnouncerError(Exception):
    """Base exception for announcer errors."""

class UpstreamError(AnnouncerError):
    """Raised when the CTFd API is unreachable or returns an unusable response."""
    def __init__(self, endpoint: str, details: str = None):
        super().__init__(f"CTFd request to {endpoint} failed: {details}")
        self.endpoint = endpoint
        self.details = details

class StorageError(AnnouncerError):
    """Raised when the database is unreachable or a write failed."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(f"Database error during {operation}: {details}")
        self.operation = operation
        self.details = details

class NotifyError(AnnouncerError):
    """Raised when a webhook message could not be delivered."""
    def __init__(self, details: str = None):
        super().__init__(f"Webhook delivery failed: {details}")

class ConfigError(AnnouncerError):
    """Raised when a required setting is missing or invalid."""
    def __init__(self, setting: str, reason: str):
        super().__init__(f"Invalid configuration for {setting}: {reason}")
        self.setting = setting
