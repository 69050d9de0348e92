"""
Shared pytest fixtures and configuration for pledge tests.

This module provides:
- Settings isolation (no PLEDGE_* leakage between tests)
- Logging configured once at DEBUG so ``capture_logs`` sees every event
- Task doubles for driving deferred completion by hand
"""

import os

import pytest

from pledge.core.logging import clear_context, configure_logging
from pledge.core.settings import reset_settings
from tests._support import ManualTask


@pytest.fixture(scope="session", autouse=True)
def _configure_logging():
    """Render library logs as JSON at DEBUG for the whole session."""
    configure_logging(level="DEBUG", json_format=True, service="pledge-tests")


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Drop cached settings and PLEDGE_* variables around every test."""
    for key in list(os.environ):
        if key.startswith("PLEDGE_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    clear_context()
    yield
    reset_settings()
    clear_context()


@pytest.fixture
def manual_task() -> ManualTask:
    """A task that completes only when the test calls ``complete()``."""
    return ManualTask()
