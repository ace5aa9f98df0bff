"""JSON Lines Telemetry adapter.

Provides a deterministic implementation of the Telemetry port by writing
structured JSON objects (one per line) to disk.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional

import orjson

from agent_settings.models import REDACTED, SECRET_KEYS


class JsonlTelemetry:
    _DEFAULT_SECRET_KEYS = frozenset(
        {
            *SECRET_KEYS,
            "password",
            "token",
        }
    )

    def __init__(
        self,
        run_id: str,
        sink_path: Path,
        secret_keys: Iterable[str] = _DEFAULT_SECRET_KEYS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._run_id = str(run_id)
        self._sink_path = sink_path if isinstance(sink_path, Path) else Path(sink_path)
        self._secret_keys = frozenset(secret_keys)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def log(self, event: str, **fields: Any) -> None:
        if not event:
            raise ValueError("Telemetry event name must be non-empty")

        sanitized_fields, redacted = self._sanitize_fields(fields)

        record: dict[str, Any] = {
            "event": event,
            "ts_utc": self._clock().isoformat(),
            "run_id": self._run_id,
            **sanitized_fields,
        }
        if redacted:
            record["redacted_fields"] = sorted(redacted)

        self._write_record(record)

    def _sanitize_fields(self, fields: Mapping[str, Any]) -> tuple[dict[str, Any], set[str]]:
        sanitized: dict[str, Any] = {}
        redacted: set[str] = set()
        for key, value in fields.items():
            if key in self._secret_keys:
                sanitized[key] = REDACTED
                redacted.add(key)
            else:
                sanitized[key] = value

        return sanitized, redacted

    def _write_record(self, record: Mapping[str, Any]) -> None:
        payload = orjson.dumps(record, option=orjson.OPT_SORT_KEYS, default=str)
        self._sink_path.parent.mkdir(parents=True, exist_ok=True)
        with self._sink_path.open("ab") as handle:
            handle.write(payload + b"\n")
