import json
import logging
from datetime import datetime, timezone

import pytest

from agent_settings.adapters.telemetry.jsonl import JsonlTelemetry
from agent_settings.adapters.telemetry.logger import LoggingTelemetry
from agent_settings.models import REDACTED


def _read_records(path):
    content = path.read_text(encoding="utf-8").strip()
    assert content, "expected telemetry sink to contain at least one record"
    return [json.loads(line) for line in content.splitlines()]


def _fixed_clock():
    return datetime(2025, 1, 2, tzinfo=timezone.utc)


def test_jsonl_record_shape(tmp_path):
    sink = tmp_path / "events" / "settings.jsonl"
    telemetry = JsonlTelemetry(run_id="run_2", sink_path=sink, clock=_fixed_clock)

    telemetry.log("settings_resolved", config_keys_total=3)
    (record,) = _read_records(sink)
    assert record["event"] == "settings_resolved"
    assert record["run_id"] == "run_2"
    assert record["ts_utc"] == "2025-01-02T00:00:00+00:00"
    assert record["config_keys_total"] == 3
    assert "redacted_fields" not in record


def test_records_append(tmp_path):
    sink = tmp_path / "settings.jsonl"
    telemetry = JsonlTelemetry(run_id="r", sink_path=sink, clock=_fixed_clock)

    telemetry.log("settings_layer_read", layer="file")
    telemetry.log("settings_layer_read", layer="environment")
    assert [r["layer"] for r in _read_records(sink)] == ["file", "environment"]


def test_secret_fields_redacted(tmp_path):
    sink = tmp_path / "settings.jsonl"
    telemetry = JsonlTelemetry(run_id="r", sink_path=sink, clock=_fixed_clock)

    telemetry.log("settings_resolved", license_key="abc123", config_hash="deadbeef")
    (record,) = _read_records(sink)
    assert record["license_key"] == REDACTED
    assert record["config_hash"] == "deadbeef"
    assert record["redacted_fields"] == ["license_key"]


def test_non_json_values_are_stringified(tmp_path):
    sink = tmp_path / "settings.jsonl"
    JsonlTelemetry(run_id="r", sink_path=sink, clock=_fixed_clock).log("x", origin=tmp_path)
    (record,) = _read_records(sink)
    assert record["origin"] == str(tmp_path)


def test_log_rejects_blank_event(tmp_path):
    telemetry = JsonlTelemetry(run_id="r", sink_path=tmp_path / "e.jsonl", clock=_fixed_clock)
    with pytest.raises(ValueError):
        telemetry.log("")


def test_logging_telemetry_levels(caplog):
    telemetry = LoggingTelemetry()
    with caplog.at_level(logging.DEBUG, logger="agent_settings.telemetry"):
        telemetry.log("settings_resolved", config_keys_total=1)
        telemetry.log("settings_key_dropped", raw_key="NEW_RELIC_X")
        telemetry.log("settings_resolution_failed", reason="bad")

    levels = {r.getMessage(): r.levelno for r in caplog.records}
    assert levels == {
        "settings_resolved": logging.DEBUG,
        "settings_key_dropped": logging.WARNING,
        "settings_resolution_failed": logging.ERROR,
    }
    assert caplog.records[1].fields == {"raw_key": "NEW_RELIC_X"}
