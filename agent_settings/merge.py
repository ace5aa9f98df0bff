"""
Precedence merge of layer readings.

Purpose:
    - Fold the four layer readings into one EffectiveConfig
    - Record which layer supplied each winning value

Policy:
    - Environment > SystemProperty > File > Default, total order, no ties
    - A value is taken whole from one layer; lists are never merged element-wise
    - Output does not depend on the order readings are passed in
"""

from __future__ import annotations

from typing import Iterable, Sequence

from agent_settings.effective import EffectiveConfig, KeyLike
from agent_settings.errors import SettingsError
from agent_settings.types import LayerReading, SettingKey, SettingValue, SourceLayer


class PrecedenceMerger:
    def _ordered(self, readings: Iterable[LayerReading]) -> list[LayerReading]:
        """Readings sorted highest priority first; a layer may appear once."""
        ordered = sorted(readings, key=lambda reading: reading.layer, reverse=True)
        seen: set[SourceLayer] = set()
        for reading in ordered:
            if reading.layer in seen:
                raise SettingsError(
                    f"Layer {reading.layer.label} supplied more than once",
                    component="precedence_merger",
                )
            seen.add(reading.layer)
        return ordered

    def merge(self, readings: Iterable[LayerReading]) -> EffectiveConfig:
        ordered = self._ordered(readings)
        union: set[SettingKey] = set()
        for reading in ordered:
            union.update(reading.values)

        effective: dict[SettingKey, SettingValue] = {}
        for key in sorted(union):
            for reading in ordered:
                if key in reading.values:
                    effective[key] = reading.values[key]
                    break
        return EffectiveConfig(effective)

    def candidates(
        self, readings: Iterable[LayerReading], key: KeyLike
    ) -> Sequence[SettingValue]:
        """Every layer's value for ``key``, winner first."""
        canonical = SettingKey.of(key)
        return [
            reading.values[canonical]
            for reading in self._ordered(readings)
            if canonical in reading.values
        ]
