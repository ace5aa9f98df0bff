from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel

from agent_settings.models import AgentSettings
from agent_settings.types import LayerReading, SettingKey, SettingValue, SourceLayer
from agent_settings.utility import iter_leaves

_LOGGER = logging.getLogger(__name__)


class DefaultReader:
    """Built-in agent defaults: the fallback floor beneath every other layer."""

    layer = SourceLayer.DEFAULT

    def __init__(self, settings: Optional[BaseModel] = None) -> None:
        self._settings = settings if settings is not None else AgentSettings()

    def read(self) -> LayerReading:
        values: dict[SettingKey, SettingValue] = {}
        for path, raw in iter_leaves(self._settings.model_dump(mode="python")):
            # registered names without a built-in value stay absent
            if raw is None:
                continue
            key = SettingKey.from_segments(path)
            values[key] = SettingValue.from_raw(raw, self.layer, origin="builtin")

        _LOGGER.debug(
            "settings_layer_read",
            extra={"event": "settings_layer_read", "layer": self.layer.label, "keys": len(values)},
        )
        return LayerReading(layer=self.layer, values=values, origin="builtin")
