from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import dotenv_values

from agent_settings.errors import InvalidKeyError
from agent_settings.keys import KeyNormalizer
from agent_settings.types import LayerReading, SettingKey, SettingValue, SourceLayer

_LOGGER = logging.getLogger(__name__)


class EnvironmentReader:
    layer = SourceLayer.ENVIRONMENT

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        *,
        normalizer: Optional[KeyNormalizer] = None,
        dotenv_path: Union[str, Path, None] = None,
    ) -> None:
        """
        Configure environment-backed settings lookup.

        ``environ`` defaults to ``os.environ`` read at each ``read()``. Values from
        ``dotenv_path`` sit beneath the real environment and never modify it.
        """
        self._environ = environ
        self._normalizer = normalizer or KeyNormalizer()
        self._dotenv_path = Path(dotenv_path) if dotenv_path is not None else None

    def _variables(self) -> dict[str, str]:
        variables: dict[str, str] = {}
        if self._dotenv_path is not None and self._dotenv_path.is_file():
            variables.update(
                {k: v for k, v in dotenv_values(self._dotenv_path).items() if v is not None}
            )
        variables.update(self._environ if self._environ is not None else os.environ)
        return variables

    def read(self) -> LayerReading:
        values: dict[SettingKey, SettingValue] = {}
        dropped: list[str] = []
        for name, raw in sorted(self._variables().items()):
            try:
                key = self._normalizer.from_environment(name)
            except InvalidKeyError as exc:
                # one bad variable must not block the others
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
                # two spellings folding to the same key, first in sorted order wins
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
            values[key] = SettingValue.from_raw(raw, self.layer, origin="os.environ")

        _LOGGER.debug(
            "settings_layer_read",
            extra={"event": "settings_layer_read", "layer": self.layer.label, "keys": len(values)},
        )
        return LayerReading(
            layer=self.layer, values=values, dropped=tuple(dropped), origin="os.environ"
        )
