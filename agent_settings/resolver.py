"""
Purpose:
    - Read the four settings layers (defaults, file, system properties, environment)
    - Merge them into one EffectiveConfig with provenance
    - Publish the result atomically; reload rebuilds and swaps it

A failed build never replaces the published snapshot: running on a partially
loaded configuration is worse than failing fast, so the error is reported and
re-raised while readers keep the previous snapshot.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from agent_settings.accessor import TypedAccessor
from agent_settings.adapters.telemetry.logger import LoggingTelemetry
from agent_settings.effective import EffectiveConfig, KeyLike
from agent_settings.errors import SettingsError, SettingsNotLoadedError
from agent_settings.keys import KeyNormalizer, KeyRegistry
from agent_settings.merge import PrecedenceMerger
from agent_settings.models import SECRET_KEYS
from agent_settings.ports.settings_source import SettingsSource
from agent_settings.ports.telemetry import Telemetry
from agent_settings.sources.defaults import DefaultReader
from agent_settings.sources.environment import EnvironmentReader
from agent_settings.sources.file import FileReader
from agent_settings.sources.properties import PropertyTable, SystemPropertyReader
from agent_settings.types import LayerReading, SettingValue, SourceLayer


@dataclass(frozen=True)
class ResolvedSettings:
    effective: EffectiveConfig
    readings: tuple[LayerReading, ...]
    redacted_config: Mapping[str, Any]
    redacted_count: int
    config_hash: str
    config_keys_total: int
    dropped_keys: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def reading(self, layer: SourceLayer) -> Optional[LayerReading]:
        for reading in self.readings:
            if reading.layer is layer:
                return reading
        return None


class SettingsResolver:
    def __init__(
        self,
        defaults: Optional[SettingsSource] = None,
        file: Optional[SettingsSource] = None,
        properties: Optional[SettingsSource] = None,
        environment: Optional[SettingsSource] = None,
        *,
        merger: Optional[PrecedenceMerger] = None,
        telemetry: Optional[Telemetry] = None,
        secret_keys: Iterable[str] = SECRET_KEYS,
    ) -> None:
        self._sources: tuple[SettingsSource, ...] = (
            defaults if defaults is not None else DefaultReader(),
            file if file is not None else FileReader(),
            properties if properties is not None else SystemPropertyReader(),
            environment if environment is not None else EnvironmentReader(),
        )
        self._merger = merger or PrecedenceMerger()
        self.telemetry: Telemetry = telemetry if telemetry is not None else LoggingTelemetry()
        self._secret_keys = tuple(secret_keys)
        self._current: Optional[ResolvedSettings] = None
        # serializes writers only; readers take the published reference as-is
        self._reload_lock = threading.Lock()

    @classmethod
    def from_process(
        cls,
        config_path: Union[str, Path, None] = None,
        *,
        environment: Optional[str] = None,
        dotenv_path: Union[str, Path, None] = None,
        properties: Optional[PropertyTable] = None,
        registry: Optional[KeyRegistry] = None,
        telemetry: Optional[Telemetry] = None,
    ) -> "SettingsResolver":
        """Wire the standard readers around one shared key normalizer."""
        normalizer = KeyNormalizer(registry)
        return cls(
            DefaultReader(),
            FileReader(config_path, environment=environment, normalizer=normalizer),
            SystemPropertyReader(properties, normalizer=normalizer),
            EnvironmentReader(normalizer=normalizer, dotenv_path=dotenv_path),
            telemetry=telemetry,
        )

    # --- lifecycle ------------------------------------------

    def load(self) -> ResolvedSettings:
        """
        1. Read every source in turn
        2. Merge readings by precedence
        3. Render hash, redacted view and counts
        4. Publish by swapping a single reference
        """
        with self._reload_lock:
            try:
                resolved = self._build()
            except SettingsError as exc:
                self.telemetry.log(
                    "settings_resolution_failed",
                    error_type=type(exc).__name__,
                    reason=str(exc),
                    details=exc.details,
                    kept_previous=self._current is not None,
                )
                raise
            self._current = resolved
        return resolved

    def reload(self) -> ResolvedSettings:
        return self.load()

    def _build(self) -> ResolvedSettings:
        readings: list[LayerReading] = []
        for source in self._sources:
            reading = source.read()
            self.telemetry.log(
                "settings_layer_read",
                layer=reading.layer.label,
                origin=reading.origin,
                keys_total=len(reading),
                dropped_total=len(reading.dropped),
            )
            for raw_key in reading.dropped:
                self.telemetry.log(
                    "settings_key_dropped", layer=reading.layer.label, raw_key=raw_key
                )
            readings.append(reading)

        effective = self._merger.merge(readings)
        redacted_config, redacted_count = effective.redacted(self._secret_keys)
        config_hash = effective.fingerprint()
        dropped = {r.layer.label: r.dropped for r in readings if r.dropped}

        self.telemetry.log(
            "settings_resolved",
            config_hash=config_hash,
            config_keys_total=len(effective),
            redacted_count=redacted_count,
            layer_counts=effective.layer_counts(),
            dropped_keys_total=sum(len(names) for names in dropped.values()),
        )

        return ResolvedSettings(
            effective=effective,
            readings=tuple(sorted(readings, key=lambda r: r.layer)),
            redacted_config=redacted_config,
            redacted_count=redacted_count,
            config_hash=config_hash,
            config_keys_total=len(effective),
            dropped_keys=dropped,
        )

    # --- read side ------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._current is not None

    @property
    def current(self) -> ResolvedSettings:
        current = self._current
        if current is None:
            raise SettingsNotLoadedError(
                "Settings have not been loaded; call load() first",
                component="settings_resolver",
            )
        return current

    @property
    def config(self) -> EffectiveConfig:
        return self.current.effective

    @property
    def accessor(self) -> TypedAccessor:
        return TypedAccessor(self.current.effective)

    def get(self, key: KeyLike, expected_type: type, default: Any = None) -> Any:
        return self.accessor.get(key, expected_type, default)

    def explain(self, key: KeyLike) -> Sequence[SettingValue]:
        """Every layer's value for ``key``, the effective one first."""
        return self._merger.candidates(self.current.readings, key)
