from __future__ import annotations

import json
from pathlib import Path

from utils.probe_logger import log_probe


def test_probe_trace_writes_jsonl(tmp_path, monkeypatch):
    log_file = tmp_path / "probe_calls.jsonl"
    monkeypatch.setenv("PROBE_TRACE", "true")
    monkeypatch.setenv("PROBE_LOG_PATH", str(log_file))
    monkeypatch.setenv("RUN_ID", "test-run-123")

    log_probe(
        caller="unit.test",
        url="https://www.linkedin.com/in/ada",
        status_code=200,
        duration_ms=42,
        status="ok",
        extras={"professional_id": 7},
    )

    assert log_file.exists()
    lines = log_file.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) >= 1
    rec = json.loads(lines[-1])
    assert rec["caller"] == "unit.test"
    assert rec["method"] == "HEAD"
    assert rec["status_code"] == 200
    assert rec["run_id"] == "test-run-123"
    assert rec.get("extras", {}).get("professional_id") == 7


def test_probe_trace_disabled_writes_nothing(tmp_path, monkeypatch):
    log_file = tmp_path / "probe_calls.jsonl"
    monkeypatch.setenv("PROBE_TRACE", "false")
    monkeypatch.setenv("PROBE_LOG_PATH", str(log_file))

    log_probe(caller="unit.test", url="https://example.com", status="error", error="timeout")

    assert not Path(log_file).exists()
