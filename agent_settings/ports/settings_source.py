"""SettingsSource Port Interface.

Contract: Produce one layer of raw settings keyed by canonical SettingKey. Reading is
idempotent so the resolver can call it again on reload.
"""

from __future__ import annotations

from typing import Protocol

from agent_settings.types import LayerReading, SourceLayer


class SettingsSource(Protocol):
    layer: SourceLayer

    def read(self) -> LayerReading: ...
