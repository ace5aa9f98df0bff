"""
System-property layer.

Python has no JVM-style system property table, so ``PropertyTable`` provides
one: a process-wide string table the host (or the CLI's ``-D`` flags) fills in
before the resolver loads.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Mapping, Optional

from agent_settings.errors import InvalidKeyError
from agent_settings.keys import KeyNormalizer
from agent_settings.types import LayerReading, SettingKey, SettingValue, SourceLayer

_LOGGER = logging.getLogger(__name__)


class PropertyTable:
    """Thread-safe ``name -> string value`` table."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._lock = threading.Lock()
        self._props: dict[str, str] = {str(k): str(v) for k, v in (initial or {}).items()}

    def set(self, name: str, value: str) -> None:
        if not name:
            raise ValueError("Property name must be a non-empty string")
        with self._lock:
            self._props[name] = str(value)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._props.get(name, default)

    def remove(self, name: str) -> None:
        with self._lock:
            self._props.pop(name, None)

    def clear(self) -> None:
        with self._lock:
            self._props.clear()

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._props)

    def update_from_args(self, args: Iterable[str]) -> None:
        """Load ``-Dname=value`` (or bare ``name=value``) tokens."""
        for arg in args:
            token = arg[2:] if arg.startswith("-D") else arg
            name, sep, value = token.partition("=")
            if sep == "" or not name.strip():
                raise ValueError(f"Property requires NAME=VALUE format (got {arg!r})")
            self.set(name.strip(), value)


SYSTEM_PROPERTIES = PropertyTable()


class SystemPropertyReader:
    layer = SourceLayer.SYSTEM_PROPERTY

    def __init__(
        self,
        table: Optional[PropertyTable] = None,
        *,
        normalizer: Optional[KeyNormalizer] = None,
    ) -> None:
        self._table = table if table is not None else SYSTEM_PROPERTIES
        self._normalizer = normalizer or KeyNormalizer()

    def read(self) -> LayerReading:
        values: dict[SettingKey, SettingValue] = {}
        dropped: list[str] = []
        for name, raw in sorted(self._table.snapshot().items()):
            try:
                key = self._normalizer.from_property(name)
            except InvalidKeyError as exc:
                dropped.append(name)
                _LOGGER.warning(
                    "settings_key_dropped",
                    extra={
                        "event": "settings_key_dropped",
                        "layer": self.layer.label,
                        "raw_key": name,
                        "reason": str(exc),
                    },
                )
                continue
            if key is None:
                continue
            if key in values:
                dropped.append(name)
                _LOGGER.warning(
                    "settings_key_dropped",
                    extra={
                        "event": "settings_key_dropped",
                        "layer": self.layer.label,
                        "raw_key": name,
                        "reason": f"duplicate of {key}",
                    },
                )
                continue
            values[key] = SettingValue.from_raw(raw, self.layer, origin="system_properties")

        _LOGGER.debug(
            "settings_layer_read",
            extra={"event": "settings_layer_read", "layer": self.layer.label, "keys": len(values)},
        )
        return LayerReading(
            layer=self.layer, values=values, dropped=tuple(dropped), origin="system_properties"
        )
