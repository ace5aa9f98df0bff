"""
Layered settings resolver for the monitoring agent.

Reads four configuration layers, folds their keys into one canonical space
and merges them by fixed precedence:

    environment (NEW_RELIC_*) > system properties (newrelic.config.*) > newrelic.yml > built-in defaults

Components:
- KeyNormalizer / KeyRegistry: canonical keys from file, property and environment notation
- DefaultReader, FileReader, SystemPropertyReader, EnvironmentReader: one layer each
- PrecedenceMerger: highest layer wins per key, provenance recorded
- TypedAccessor: bool / int / str / list lookups with caller-supplied defaults
- SettingsResolver: load, atomic reload, explain

Usage:
    from agent_settings import SettingsResolver

    resolver = SettingsResolver.from_process("newrelic.yml", environment="production")
    resolver.load()
    resolver.get("transaction_events.max_samples_stored", int, 2000)
"""

from agent_settings.accessor import TypedAccessor
from agent_settings.effective import EffectiveConfig
from agent_settings.errors import (
    AmbiguousKeyError,
    InvalidKeyError,
    ParseError,
    SettingsError,
    SettingsFileNotFoundError,
    SettingsNotLoadedError,
    TypeMismatchError,
)
from agent_settings.keys import KeyNormalizer, KeyRegistry
from agent_settings.merge import PrecedenceMerger
from agent_settings.resolver import ResolvedSettings, SettingsResolver
from agent_settings.sources.defaults import DefaultReader
from agent_settings.sources.environment import EnvironmentReader
from agent_settings.sources.file import FileReader
from agent_settings.sources.properties import (
    SYSTEM_PROPERTIES,
    PropertyTable,
    SystemPropertyReader,
)
from agent_settings.types import LayerReading, SettingKey, SettingValue, SourceLayer, ValueKind

__all__ = [
    # Main entry point
    "SettingsResolver",
    "ResolvedSettings",
    "TypedAccessor",
    "EffectiveConfig",
    # Components
    "KeyNormalizer",
    "KeyRegistry",
    "PrecedenceMerger",
    "DefaultReader",
    "FileReader",
    "SystemPropertyReader",
    "EnvironmentReader",
    "PropertyTable",
    "SYSTEM_PROPERTIES",
    # Types
    "SettingKey",
    "SettingValue",
    "SourceLayer",
    "ValueKind",
    "LayerReading",
    # Errors
    "SettingsError",
    "ParseError",
    "SettingsFileNotFoundError",
    "InvalidKeyError",
    "AmbiguousKeyError",
    "TypeMismatchError",
    "SettingsNotLoadedError",
]
