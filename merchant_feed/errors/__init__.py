"""Error handling module."""
from merchant_feed.errors.exceptions import (
    FeedEngineError,
    ScheduleFormatError,
    ConfigurationError,
    SnapshotError,
)

__all__ = [
    "FeedEngineError",
    "ScheduleFormatError",
    "ConfigurationError",
    "SnapshotError",
]
