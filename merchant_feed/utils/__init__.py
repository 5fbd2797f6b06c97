"""Shared utilities."""
from merchant_feed.utils.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
