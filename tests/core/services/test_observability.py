import json
import re

import pytest

from hostenv.core.services.observability import (
    get_current_run_id,
    get_log_format,
    get_run_id,
    log_debug,
    log_event,
    log_operation,
)
from hostenv.core.services.error_codes import HostenvError, ErrorCode


@pytest.fixture
def audible(monkeypatch):
    monkeypatch.delenv("HOSTENV_LOG_SILENT", raising=False)


class TestObservability:
    def test_get_run_id_generates_unique(self, monkeypatch):
        monkeypatch.delenv("HOSTENV_RUN_ID", raising=False)
        id1 = get_run_id()
        id2 = get_run_id()
        assert id1 != id2
        assert len(id1) == 36  # Full UUIDv4

    def test_get_run_id_uses_env(self, monkeypatch):
        monkeypatch.setenv("HOSTENV_RUN_ID", "00000000-0000-4000-8000-000000000000")
        assert get_run_id() == "00000000-0000-4000-8000-000000000000"

    def test_get_run_id_invalid_env_falls_back(self, monkeypatch):
        monkeypatch.setenv("HOSTENV_RUN_ID", "not-a-uuid")
        run_id = get_run_id()
        assert run_id != "not-a-uuid"
        assert re.fullmatch(
            r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
            run_id,
        )

    def test_get_log_format_default(self, monkeypatch):
        monkeypatch.delenv("HOSTENV_LOG_FORMAT", raising=False)
        assert get_log_format() == "text"

    def test_get_log_format_json(self, monkeypatch):
        monkeypatch.setenv("HOSTENV_LOG_FORMAT", "json")
        assert get_log_format() == "json"

    def test_get_current_run_id_returns_same_id(self, monkeypatch):
        monkeypatch.delenv("HOSTENV_RUN_ID", raising=False)
        assert get_current_run_id() == get_current_run_id()

    def test_log_event_json_format(self, monkeypatch, capsys, audible):
        monkeypatch.setenv("HOSTENV_LOG_FORMAT", "json")
        log_event("test_event", True, details={"key": "value"})
        captured = capsys.readouterr()
        entry = json.loads(captured.err.strip())
        assert entry["operation"] == "test_event"
        assert entry["details"]["key"] == "value"
        assert "timestamp" in entry
        assert "run_id" in entry
        assert captured.out == ""

    def test_log_event_text_format(self, capsys, audible):
        log_event("test_event", True, details={"key": "value"})
        captured = capsys.readouterr()
        assert "test_event" in captured.err
        assert "OK" in captured.err
        assert re.search(r'"key"\s*:\s*"value"', captured.err)

    def test_log_event_without_details(self, monkeypatch, capsys, audible):
        monkeypatch.setenv("HOSTENV_LOG_FORMAT", "json")
        log_event("simple_event", True)
        entry = json.loads(capsys.readouterr().err.strip())
        assert entry["operation"] == "simple_event"
        assert "details" not in entry

    def test_log_event_silenced(self, monkeypatch, capsys):
        monkeypatch.setenv("HOSTENV_LOG_SILENT", "1")
        log_event("quiet_event", True)
        assert capsys.readouterr().err == ""

    def test_log_debug_requires_flag(self, monkeypatch, capsys):
        log_debug("trace_event", details={"a": 1})
        assert capsys.readouterr().err == ""

        monkeypatch.setenv("HOSTENV_DEBUG", "1")
        log_debug("trace_event", details={"a": 1})
        err = capsys.readouterr().err
        assert "trace_event" in err

    def test_log_debug_bypasses_silence_in_json(self, monkeypatch, capsys):
        monkeypatch.setenv("HOSTENV_LOG_SILENT", "1")
        monkeypatch.setenv("HOSTENV_DEBUG", "1")
        monkeypatch.setenv("HOSTENV_LOG_FORMAT", "json")
        log_event("regular_event", True)
        log_debug("trace_event", details={"a": 1})
        lines = capsys.readouterr().err.strip().splitlines()
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["operation"] == "trace_event"
        assert entry["details"] == {"a": 1}
        assert "level" not in entry


    def test_log_operation_includes_duration_on_failure(self, capsys, audible):
        with pytest.raises(HostenvError):
            with log_operation("test_op"):
                raise HostenvError(code=ErrorCode.HOME_NOT_FOUND, message="Test error")

        captured = capsys.readouterr()
        assert "test_op" in captured.err
        assert "FAILED" in captured.err
        assert "HOME_NOT_FOUND" in captured.err
        assert re.search(r"\(\d+\.\d+ms\)", captured.err)

    def test_log_operation_unknown_error_code(self, capsys, audible):
        with pytest.raises(ValueError):
            with log_operation("test_op"):
                raise ValueError("boom")
        assert "UNKNOWN_ERROR" in capsys.readouterr().err

    def test_log_operation_collects_details(self, monkeypatch, capsys, audible):
        monkeypatch.setenv("HOSTENV_LOG_FORMAT", "json")
        with log_operation("test_op", details={"a": 1}) as ctx:
            ctx["details"]["b"] = 2
        entry = json.loads(capsys.readouterr().err.strip())
        assert entry["success"] is True
        assert entry["details"] == {"a": 1, "b": 2}
        assert "duration_ms" in entry
