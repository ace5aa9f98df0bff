"""
YAML file layer.

The file follows the agent's ``newrelic.yml`` layout: either a plain tree of
settings, or a ``common`` section holding shared settings plus one section per
deployment environment (``production``, ``staging``, ...) overriding it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

import yaml

from agent_settings.errors import InvalidKeyError, ParseError, SettingsFileNotFoundError
from agent_settings.keys import KeyNormalizer
from agent_settings.models import DEFAULT_CONFIG_FILE
from agent_settings.types import LayerReading, SettingKey, SettingValue, SourceLayer
from agent_settings.utility import deep_merge, iter_leaves

_LOGGER = logging.getLogger(__name__)

COMMON_SECTION = "common"


class FileReader:
    layer = SourceLayer.FILE

    def __init__(
        self,
        path: Union[str, Path, None] = None,
        *,
        environment: Optional[str] = None,
        normalizer: Optional[KeyNormalizer] = None,
        search_paths: Sequence[Union[str, Path]] = (DEFAULT_CONFIG_FILE,),
    ) -> None:
        """
        Args:
            path: Explicit settings file. A missing explicit file is an error.
            environment: Section overlaid on ``common`` when the file has one.
            normalizer: Shared key normalizer.
            search_paths: Candidates tried in order when ``path`` is not given;
                none existing yields an empty layer.
        """
        self._path = Path(path) if path is not None else None
        self._environment = environment
        self._normalizer = normalizer or KeyNormalizer()
        self._search_paths = tuple(Path(p) for p in search_paths)

    def locate(self) -> Optional[Path]:
        if self._path is not None:
            if not self._path.is_file():
                raise SettingsFileNotFoundError(
                    f"Settings file not found: {self._path}",
                    path=str(self._path),
                    component="file_reader",
                )
            return self._path
        for candidate in self._search_paths:
            if candidate.is_file():
                return candidate
        return None

    def read(self) -> LayerReading:
        path = self.locate()
        if path is None:
            _LOGGER.debug(
                "settings_file_absent",
                extra={
                    "event": "settings_file_absent",
                    "search_paths": [str(p) for p in self._search_paths],
                },
            )
            return LayerReading(layer=self.layer)

        origin = str(path)
        document = self._select_environment(self._load(path))

        values: dict[SettingKey, SettingValue] = {}
        dropped: list[str] = []
        for segments, raw in iter_leaves(document):
            if raw is None:
                continue
            try:
                key = self._normalizer.from_file_path(segments)
            except InvalidKeyError as exc:
                dropped.append(".".join(segments))
                _LOGGER.warning(
                    "settings_key_dropped",
                    extra={
                        "event": "settings_key_dropped",
                        "layer": self.layer.label,
                        "raw_key": ".".join(segments),
                        "reason": str(exc),
                    },
                )
                continue
            if key in values:
                raise ParseError(
                    f"Duplicate setting {key} after key normalization",
                    path=origin,
                    component="file_reader",
                )
            values[key] = SettingValue.from_raw(raw, self.layer, origin=origin)

        _LOGGER.debug(
            "settings_layer_read",
            extra={
                "event": "settings_layer_read",
                "layer": self.layer.label,
                "path": origin,
                "keys": len(values),
            },
        )
        return LayerReading(
            layer=self.layer, values=values, dropped=tuple(dropped), origin=origin
        )

    def _load(self, path: Path) -> Mapping[str, Any]:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            raise ParseError(
                f"Malformed YAML in {path}: {exc}",
                path=str(path),
                line=mark.line + 1 if mark is not None else None,
                column=mark.column + 1 if mark is not None else None,
                component="file_reader",
            ) from exc
        except UnicodeDecodeError as exc:
            raise ParseError(
                f"Settings file {path} is not valid UTF-8: {exc}",
                path=str(path),
                component="file_reader",
            ) from exc
        except OSError as exc:
            raise ParseError(
                f"Cannot read settings file {path}: {exc}",
                path=str(path),
                component="file_reader",
            ) from exc

        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise ParseError(
                f"Settings root must be a mapping, got: {type(data).__name__}",
                path=str(path),
                component="file_reader",
            )
        return data

    def _select_environment(self, document: Mapping[str, Any]) -> Mapping[str, Any]:
        common = document.get(COMMON_SECTION)
        if not isinstance(common, Mapping):
            return document

        selected: Mapping[str, Any] = common
        if self._environment is not None:
            section = document.get(self._environment)
            if isinstance(section, Mapping):
                selected = deep_merge(common, section)
            else:
                _LOGGER.debug(
                    "settings_environment_absent",
                    extra={
                        "event": "settings_environment_absent",
                        "environment": self._environment,
                    },
                )
        return selected
