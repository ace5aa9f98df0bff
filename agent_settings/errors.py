"""
Exceptions for the settings resolver.

Exception hierarchy:
- SettingsError (base)
  - ParseError: malformed or unsupported settings file content
  - SettingsFileNotFoundError: explicitly named settings file is missing
  - InvalidKeyError: a raw key cannot be folded into a canonical key
    - AmbiguousKeyError: environment key does not map to exactly one registered key
  - TypeMismatchError: typed accessor coercion failure
  - SettingsNotLoadedError: resolver used before the first load
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


class SettingsError(Exception):
    """Base exception for all settings resolution errors."""

    def __init__(
        self,
        message: str,
        *,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.component = component
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.component:
            parts.append(f"[component={self.component}]")
        if self.details:
            parts.append(f"[details={self.details}]")
        return " ".join(parts)


class ParseError(SettingsError):
    """Raised when a settings file cannot be parsed into nested mappings."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.path = path
        self.line = line
        self.column = column
        details = details or {}
        if path:
            details["path"] = path
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column
        super().__init__(message, component=component, details=details)


class SettingsFileNotFoundError(SettingsError, FileNotFoundError):
    """Raised when an explicitly named settings file does not exist."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.path = path
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(message, component=component, details=details)


class InvalidKeyError(SettingsError):
    """Raised when a raw key is empty or contains empty segments."""

    def __init__(
        self,
        message: str,
        *,
        raw_key: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.raw_key = raw_key
        details = details or {}
        if raw_key is not None:
            details["raw_key"] = raw_key
        super().__init__(message, component=component, details=details)


class AmbiguousKeyError(InvalidKeyError):
    """Raised when an environment variable maps to zero or several registered keys."""

    def __init__(
        self,
        message: str,
        *,
        env_name: Optional[str] = None,
        candidates: Sequence[str] = (),
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.env_name = env_name
        self.candidates = tuple(candidates)
        details = details or {}
        details["candidates"] = list(self.candidates)
        super().__init__(message, raw_key=env_name, component=component, details=details)


class TypeMismatchError(SettingsError):
    """Raised when an effective value cannot be coerced to the requested type."""

    def __init__(
        self,
        message: str,
        *,
        key: Optional[str] = None,
        expected_type: Optional[str] = None,
        value: Optional[Any] = None,
        layer: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.key = key
        self.expected_type = expected_type
        self.value = value
        self.layer = layer
        details = details or {}
        if key:
            details["key"] = key
        if expected_type:
            details["expected_type"] = expected_type
        if value is not None:
            details["value"] = str(value)
        if layer:
            details["layer"] = layer
        super().__init__(message, component=component, details=details)


class SettingsNotLoadedError(SettingsError):
    """Raised when the effective settings are requested before the first load."""
