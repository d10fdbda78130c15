"""Shared pytest fixtures."""

import pytest

import hostenv.core.services.observability as obs
from hostenv.core.services.output_formatter import _reset_schema_cache


@pytest.fixture(autouse=True)
def quiet_logs(monkeypatch):
    """Keep stderr free of event logs unless a test opts back in."""
    monkeypatch.setenv("HOSTENV_LOG_SILENT", "1")
    monkeypatch.delenv("HOSTENV_DEBUG", raising=False)
    monkeypatch.delenv("HOSTENV_LOG_FORMAT", raising=False)
    monkeypatch.delenv("HOSTENV_CONFIG", raising=False)
    monkeypatch.setattr(obs, "_current_run_id", None, raising=False)
    yield


@pytest.fixture(autouse=True)
def reset_schema_validator_cache():
    """Ensure schema validator cache is reset before each test."""
    _reset_schema_cache()
    yield
    _reset_schema_cache()
