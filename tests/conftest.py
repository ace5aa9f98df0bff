"""
Shared fixtures for the settings resolver tests.

Every fixture isolates the process: environment variables are injected as
plain mappings, system properties live in a fresh PropertyTable, and files are
written under ``tmp_path``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import pytest

from agent_settings.keys import KeyNormalizer
from agent_settings.resolver import SettingsResolver
from agent_settings.sources.defaults import DefaultReader
from agent_settings.sources.environment import EnvironmentReader
from agent_settings.sources.file import FileReader
from agent_settings.sources.properties import PropertyTable, SystemPropertyReader

NEWRELIC_YML = """\
common: &default_settings
  app_name: Checkout Service
  license_key: abc123secret
  log_level: info

  transaction_events:
    enabled: true
    max_samples_stored: 2000

  span_events:
    max_samples_stored: 1000

  application_logging:
    enabled: true
    forwarding:
      max_samples_stored: 5000

  attributes:
    exclude:
      - request.headers.cookie
      - request.parameters.*

production:
  <<: *default_settings
  transaction_events:
    max_samples_stored: 500

staging:
  <<: *default_settings
  app_name: Checkout Service (Staging)
"""


@dataclass
class StubTelemetry:
    events: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)

    def log(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def named(self, event: str) -> List[Dict[str, Any]]:
        return [fields for name, fields in self.events if name == event]


@pytest.fixture
def telemetry() -> StubTelemetry:
    return StubTelemetry()


@pytest.fixture
def normalizer() -> KeyNormalizer:
    return KeyNormalizer()


@pytest.fixture
def properties() -> PropertyTable:
    """A private property table so tests never touch SYSTEM_PROPERTIES."""
    return PropertyTable()


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[..., Path]:
    def _write(text: str, name: str = "newrelic.yml") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_resolver(
    tmp_path: Path, telemetry: StubTelemetry, normalizer: KeyNormalizer
) -> Callable[..., SettingsResolver]:
    """
    Factory for a resolver over injected layers.

    ``yaml_text=None`` yields an empty file layer; ``environ`` replaces os.environ.
    """

    def _make(
        *,
        yaml_text: Optional[str] = None,
        environment: Optional[str] = None,
        properties: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> SettingsResolver:
        if yaml_text is None:
            file_reader = FileReader(normalizer=normalizer, search_paths=())
        else:
            path = tmp_path / "newrelic.yml"
            path.write_text(yaml_text, encoding="utf-8")
            file_reader = FileReader(path, environment=environment, normalizer=normalizer)
        return SettingsResolver(
            DefaultReader(),
            file_reader,
            SystemPropertyReader(PropertyTable(properties or {}), normalizer=normalizer),
            EnvironmentReader(environ or {}, normalizer=normalizer),
            telemetry=telemetry,
        )

    return _make
