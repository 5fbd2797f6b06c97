"""Pytest configuration and fixtures for test suite.

Provides:
- Python path setup (so the package imports without installation)
- Environment variable defaults for FeedSettings
- A merchant record factory and schedule builder
"""
import os
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

# This file is at: tests/conftest.py, project root is one level up
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from merchant_feed.config import FeedSettings, get_settings  # noqa: E402
from merchant_feed.models import MerchantRecord  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up basic test environment variables before any tests run."""
    os.environ.setdefault("FEED_LOG_LEVEL", "INFO")
    os.environ.setdefault("FEED_ENVIRONMENT", "development")
    os.environ.setdefault("FEED_TIMEZONE", "America/Fortaleza")

    yield


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop the cached settings so env changes in one test never leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> FeedSettings:
    """Settings with defaults, independent of the cached instance."""
    return FeedSettings()


@pytest.fixture
def make_record() -> Callable[..., MerchantRecord]:
    """Factory building MerchantRecord from document-style keyword overrides."""
    counter = {"n": 0}

    def _make(**fields: Any) -> MerchantRecord:
        counter["n"] += 1
        doc = {"id": f"m{counter['n']}", "name": f"Loja {counter['n']}"}
        doc.update(fields)
        return MerchantRecord.model_validate(doc)

    return _make


@pytest.fixture
def weekday_schedule() -> Callable[..., dict]:
    """Schedule document with the same window on the given day keys."""

    def _schedule(open_: str, close: str, days=("Dom", "Seg", "Ter", "Qua", "Qui", "Sex", "Sáb")) -> dict:
        return {day: {"isOpen": True, "open": open_, "close": close} for day in days}

    return _schedule
