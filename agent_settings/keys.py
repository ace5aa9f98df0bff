"""
Key normalization.

Folds the three external key notations into one canonical SettingKey:

    file:        transaction_events.max_samples_stored   (nested mapping path)
    property:    newrelic.config.transaction_events.max_samples_stored
    environment: NEW_RELIC_TRANSACTION_EVENTS_MAX_SAMPLES_STORED

File and property notations are already dot-segmented. Environment names are
not: ``_`` separates segments *and* words inside a segment, so the normalizer
only accepts a name when exactly one split of it into registered segment names
forms a registered key.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional, Sequence, Union

from pydantic import BaseModel

from agent_settings.errors import AmbiguousKeyError
from agent_settings.models import ENV_PREFIX, PROPERTY_PREFIX, AgentSettings
from agent_settings.types import SettingKey, SourceLayer
from agent_settings.utility import schema_leaf_paths


class KeyRegistry:
    """Fixed set of known canonical keys and the segment names they are built from."""

    def __init__(self, keys: Iterable[Union[str, SettingKey]]) -> None:
        self._keys = frozenset(SettingKey.of(key) for key in keys)
        self._segments = frozenset(
            segment for key in self._keys for segment in key.segments
        )

    @classmethod
    def from_schema(
        cls,
        model: type[BaseModel] = AgentSettings,
        extra_keys: Iterable[Union[str, SettingKey]] = (),
    ) -> "KeyRegistry":
        return cls([*schema_leaf_paths(model), *extra_keys])

    @property
    def keys(self) -> frozenset[SettingKey]:
        return self._keys

    @property
    def segments(self) -> frozenset[str]:
        return self._segments

    def is_registered(self, key: Union[str, SettingKey]) -> bool:
        return SettingKey.of(key) in self._keys

    def __len__(self) -> int:
        return len(self._keys)


class KeyNormalizer:
    def __init__(
        self,
        registry: Optional[KeyRegistry] = None,
        *,
        env_prefix: str = ENV_PREFIX,
        property_prefix: str = PROPERTY_PREFIX,
    ) -> None:
        self._registry = registry if registry is not None else KeyRegistry.from_schema()
        self._env_prefix = env_prefix.upper()
        self._property_prefix = property_prefix.lower()

    @property
    def registry(self) -> KeyRegistry:
        return self._registry

    def normalize(self, raw: str, layer: SourceLayer) -> Optional[SettingKey]:
        """
        Canonical key for ``raw`` written in ``layer``'s notation.

        Returns None when a property or environment name does not carry the
        agent prefix (it is not a setting at all).
        """
        if layer is SourceLayer.ENVIRONMENT:
            return self.from_environment(raw)
        if layer is SourceLayer.SYSTEM_PROPERTY:
            return self.from_property(raw)
        return SettingKey.of(raw)

    def from_file_path(self, segments: Sequence[str]) -> SettingKey:
        return SettingKey.from_segments(segments)

    def from_property(self, name: str) -> Optional[SettingKey]:
        if not name.lower().startswith(self._property_prefix):
            return None
        return SettingKey.of(name[len(self._property_prefix) :])

    def from_environment(self, name: str) -> Optional[SettingKey]:
        if not name.upper().startswith(self._env_prefix):
            return None
        tokens = name[len(self._env_prefix) :].lower().split("_")

        candidates = sorted(
            {
                key
                for key in (SettingKey(".".join(split)) for split in self._splits(tokens, 0))
                if key in self._registry.keys
            }
        )
        if len(candidates) == 1:
            return candidates[0]
        if candidates:
            reason = "matches several registered keys"
        else:
            reason = "matches no registered key"
        raise AmbiguousKeyError(
            f"Environment variable {name!r} {reason}",
            env_name=name,
            candidates=[str(key) for key in candidates],
            component="key_normalizer",
        )

    def _splits(self, tokens: list[str], start: int) -> Iterator[tuple[str, ...]]:
        """Every way to cut ``tokens[start:]`` into registered segment names."""
        if start == len(tokens):
            yield ()
            return
        for end in range(start + 1, len(tokens) + 1):
            segment = "_".join(tokens[start:end])
            if segment not in self._registry.segments:
                continue
            for rest in self._splits(tokens, end):
                yield (segment, *rest)
