"""
Shared types for the settings resolver.

SettingKey, SettingValue and SourceLayer are used by every component:
normalizer, readers, merger, accessor and resolver.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from typing import Any, Optional, Union

from agent_settings.errors import InvalidKeyError, ParseError

RawValue = Union[bool, int, str, tuple[str, ...]]


class SourceLayer(IntEnum):
    """Configuration layers ranked by priority. Higher value wins."""

    DEFAULT = 0
    FILE = 1
    SYSTEM_PROPERTY = 2
    ENVIRONMENT = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "SourceLayer":
        try:
            return cls[label.strip().upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown source layer: {label!r}") from exc


class ValueKind(str, Enum):
    """Tag of the SettingValue union."""

    BOOL = "bool"
    INT = "int"
    STRING = "string"
    LIST = "list"


@dataclass(frozen=True, order=True)
class SettingKey:
    """
    Canonical identifier of one configuration option.

    Lowercase, dash-free, dot-separated. Two keys spelled differently in
    different notations compare equal once folded.
    """

    path: str

    @classmethod
    def of(cls, raw: Union[str, "SettingKey"]) -> "SettingKey":
        if isinstance(raw, SettingKey):
            return raw
        return cls.from_segments(str(raw).split("."), raw_key=str(raw))

    @classmethod
    def from_segments(cls, segments: Sequence[str], *, raw_key: Optional[str] = None) -> "SettingKey":
        folded = [str(segment).strip().lower().replace("-", "_") for segment in segments]
        shown = raw_key if raw_key is not None else ".".join(map(str, segments))
        if not folded or any(not segment for segment in folded):
            raise InvalidKeyError(f"Invalid setting key: {shown!r}", raw_key=shown)
        return cls(".".join(folded))

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.path.split("."))

    @property
    def flat(self) -> str:
        """Underscore-joined form, the shape environment variable names take."""
        return self.path.replace(".", "_")

    def __str__(self) -> str:
        return self.path


def _list_item(item: Any, origin: Optional[str]) -> str:
    if isinstance(item, bool):
        return "true" if item else "false"
    if isinstance(item, (int, float, str)):
        return str(item)
    if isinstance(item, date):
        return item.isoformat()
    raise ParseError(
        f"Unsupported list element of type {type(item).__name__}",
        path=origin,
    )


@dataclass(frozen=True)
class SettingValue:
    """One raw setting value tagged with its kind and the layer that produced it."""

    value: RawValue
    kind: ValueKind
    layer: SourceLayer
    origin: Optional[str] = field(default=None, compare=False)

    @classmethod
    def from_raw(
        cls, raw: Any, layer: SourceLayer, origin: Optional[str] = None
    ) -> "SettingValue":
        # bool is a subclass of int, check it first
        if isinstance(raw, bool):
            return cls(raw, ValueKind.BOOL, layer, origin)
        if isinstance(raw, int):
            return cls(raw, ValueKind.INT, layer, origin)
        if isinstance(raw, str):
            return cls(raw, ValueKind.STRING, layer, origin)
        if isinstance(raw, float):
            return cls(str(raw), ValueKind.STRING, layer, origin)
        # YAML timestamps; datetime is a date subclass
        if isinstance(raw, date):
            return cls(raw.isoformat(), ValueKind.STRING, layer, origin)
        if isinstance(raw, Sequence) and not isinstance(raw, (bytes, bytearray)):
            items = tuple(_list_item(item, origin) for item in raw if item is not None)
            return cls(items, ValueKind.LIST, layer, origin)
        raise ParseError(
            f"Unsupported setting value of type {type(raw).__name__}",
            path=origin,
        )

    def to_python(self) -> Any:
        """Plain JSON-friendly form (lists instead of tuples)."""
        if self.kind is ValueKind.LIST:
            return list(self.value)  # type: ignore[arg-type]
        return self.value


@dataclass(frozen=True)
class LayerReading:
    """Output of a single source reader."""

    layer: SourceLayer
    values: Mapping[SettingKey, SettingValue] = field(default_factory=dict)
    dropped: tuple[str, ...] = ()
    origin: Optional[str] = None

    def __len__(self) -> int:
        return len(self.values)
