"""Custom exception hierarchy for feed engine errors."""
from typing import Any, Optional


class FeedEngineError(Exception):
    """Base exception for all feed engine errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        """Initialize error with message and optional structured context."""
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ScheduleFormatError(FeedEngineError):
    """Raised when a schedule time is not a valid HH:MM value."""
    pass


class ConfigurationError(FeedEngineError):
    """Raised when engine configuration is invalid."""
    pass


class SnapshotError(FeedEngineError):
    """Raised when a merchant snapshot cannot be read."""
    pass
