"""Shared test fixtures and configuration."""

import logging

import pytest

from autocommitter.config import Settings
from autocommitter.llm.provider import ProviderId
from autocommitter.notifications import LoggingNotifier


@pytest.fixture(autouse=True)
def quiet_logging(caplog):
    """Capture autocommitter logs at DEBUG for assertions."""
    caplog.set_level(logging.DEBUG, logger="autocommitter")
    yield


@pytest.fixture
def notifier() -> LoggingNotifier:
    return LoggingNotifier()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with Gemini primary and OpenRouter backup, no timers."""
    return Settings(
        repo_path=str(tmp_path),
        enabled=False,
        primary_provider=ProviderId.GEMINI,
        backup_providers=[ProviderId.OPENROUTER],
        auto_push=True,
        serialize_runs=True,
    )
