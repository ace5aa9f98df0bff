"""
EffectiveConfig: the merged, read-only view of all layers.

Built once per load/reload by the PrecedenceMerger and never mutated
afterwards, so it can be shared across threads without locking.
"""

from __future__ import annotations

import hashlib
from collections import Counter
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Optional, Union

import orjson

from agent_settings.errors import InvalidKeyError
from agent_settings.models import REDACTED, SECRET_KEYS
from agent_settings.types import SettingKey, SettingValue, SourceLayer

KeyLike = Union[str, SettingKey]


class EffectiveConfig(Mapping[SettingKey, SettingValue]):
    """
    Immutable mapping of canonical key to winning value.

    Lookups accept either a SettingKey or any spelling that folds to one;
    a malformed string key is simply absent.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[SettingKey, SettingValue]] = None) -> None:
        ordered = {key: values[key] for key in sorted(values)} if values else {}
        self._values: Mapping[SettingKey, SettingValue] = MappingProxyType(ordered)

    @staticmethod
    def _coerce_key(key: KeyLike) -> Optional[SettingKey]:
        try:
            return SettingKey.of(key)
        except InvalidKeyError:
            return None

    def __getitem__(self, key: KeyLike) -> SettingValue:
        canonical = self._coerce_key(key)
        if canonical is None:
            raise KeyError(key)
        return self._values[canonical]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, SettingKey)):
            return False
        canonical = self._coerce_key(key)
        return canonical is not None and canonical in self._values

    def __iter__(self) -> Iterator[SettingKey]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EffectiveConfig):
            return dict(self._values) == dict(other._values)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"EffectiveConfig({len(self)} keys)"

    def provenance(self, key: KeyLike) -> Optional[SourceLayer]:
        value = self.get(key)
        return value.layer if value is not None else None

    def layer_counts(self) -> dict[str, int]:
        counts = Counter(value.layer for value in self._values.values())
        return {layer.label: counts.get(layer, 0) for layer in SourceLayer}

    def to_flat(self) -> dict[str, Any]:
        return {str(key): value.to_python() for key, value in self._values.items()}

    def to_nested(self) -> dict[str, Any]:
        """
        Settings as a ``newrelic.yml``-shaped tree.

        Raises ValueError when one key is a prefix of another
        (``proxy`` and ``proxy.host``), since no tree can hold both.
        """
        tree: dict[str, Any] = {}
        for key, value in self._values.items():
            *parents, leaf = key.segments
            node = tree
            for segment in parents:
                node = node.setdefault(segment, {})
                if not isinstance(node, dict):
                    raise ValueError(f"Cannot nest {key}: '{segment}' already holds a value")
            if isinstance(node.get(leaf), dict):
                raise ValueError(f"Cannot nest {key}: '{leaf}' already holds settings")
            node[leaf] = value.to_python()
        return tree

    def fingerprint(self) -> str:
        """sha256 over the canonical values; provenance does not affect it."""
        payload = orjson.dumps(self.to_flat(), option=orjson.OPT_SORT_KEYS)
        return hashlib.sha256(payload).hexdigest()

    def redacted(self, secret_keys: Iterable[KeyLike] = SECRET_KEYS) -> tuple[dict[str, Any], int]:
        secrets = {SettingKey.of(k) for k in secret_keys}
        flat: dict[str, Any] = {}
        count = 0
        for key, value in self._values.items():
            if key in secrets:
                flat[str(key)] = REDACTED
                count += 1
            else:
                flat[str(key)] = value.to_python()
        return flat, count
