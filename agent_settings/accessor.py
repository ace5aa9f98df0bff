"""
Typed access to the effective configuration.

The accessor is the surface the agent runtime calls. Absence is normal and
returns the caller's default; a present value of the wrong shape raises
TypeMismatchError for that call only.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Optional

from agent_settings.effective import EffectiveConfig, KeyLike
from agent_settings.errors import TypeMismatchError
from agent_settings.types import SettingValue, ValueKind

INT_MIN: int = -(2**63)
INT_MAX: int = 2**63 - 1
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def _mismatch(key: KeyLike, expected: str, setting: SettingValue, reason: str) -> TypeMismatchError:
    return TypeMismatchError(
        f"Setting '{key}' {reason}",
        key=str(key),
        expected_type=expected,
        value=setting.value,
        layer=setting.layer.label,
        component="typed_accessor",
    )


def coerce_bool(key: KeyLike, setting: SettingValue) -> bool:
    raw = setting.value
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        folded = raw.lower()
        if folded == "true":
            return True
        if folded == "false":
            return False
    raise _mismatch(key, "bool", setting, f"is not a boolean: {raw!r}")


def coerce_int(key: KeyLike, setting: SettingValue) -> int:
    raw = setting.value
    if isinstance(raw, bool):
        raise _mismatch(key, "int", setting, f"is a boolean, not an integer: {raw!r}")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and _INT_PATTERN.fullmatch(raw.strip()):
        value = int(raw.strip())
    else:
        raise _mismatch(key, "int", setting, f"is not an integer: {raw!r}")
    if not INT_MIN <= value <= INT_MAX:
        raise _mismatch(key, "int", setting, f"is out of range: {value}")
    return value


def coerce_str(key: KeyLike, setting: SettingValue) -> str:
    raw = setting.value
    if setting.kind is ValueKind.LIST:
        raise _mismatch(key, "str", setting, "is a list, not a string")
    if isinstance(raw, bool):
        return "true" if raw else "false"
    return str(raw)


def coerce_list(key: KeyLike, setting: SettingValue) -> list[str]:
    raw = setting.value
    if setting.kind is ValueKind.LIST:
        return list(raw)  # type: ignore[arg-type]
    if isinstance(raw, str):
        return [segment.strip() for segment in raw.split(",") if segment.strip()]
    raise _mismatch(key, "list", setting, f"is not a list: {raw!r}")


COERCERS: dict[type, Callable[[KeyLike, SettingValue], Any]] = {
    bool: coerce_bool,
    int: coerce_int,
    str: coerce_str,
    list: coerce_list,
}


class TypedAccessor:
    """Typed lookups bound to one EffectiveConfig snapshot."""

    def __init__(self, config: EffectiveConfig) -> None:
        self._config = config

    @property
    def config(self) -> EffectiveConfig:
        return self._config

    def lookup(self, key: KeyLike) -> Optional[SettingValue]:
        return self._config.get(key)

    def contains(self, key: KeyLike) -> bool:
        return key in self._config

    def get(self, key: KeyLike, expected_type: type, default: Any = None) -> Any:
        coercer = COERCERS.get(expected_type)
        if coercer is None:
            raise TypeError(f"Unsupported setting type: {expected_type!r}")
        setting = self._config.get(key)
        if setting is None:
            return default
        return coercer(key, setting)
