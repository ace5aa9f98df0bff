from agent_settings.models import AgentSettings
from agent_settings.sources.defaults import DefaultReader
from agent_settings.types import SettingKey, SourceLayer, ValueKind


def test_defaults_are_non_empty_and_tagged():
    reading = DefaultReader().read()

    assert reading.layer is SourceLayer.DEFAULT
    assert len(reading) > 0
    assert all(value.layer is SourceLayer.DEFAULT for value in reading.values.values())


def test_known_defaults():
    values = DefaultReader().read().values

    assert values[SettingKey("transaction_events.max_samples_stored")].value == 2000
    assert values[SettingKey("custom_insights_events.max_samples_stored")].value == 30000
    assert values[SettingKey("application_logging.enabled")].value is True
    assert values[SettingKey("attributes.exclude")].kind is ValueKind.LIST


def test_none_defaults_are_absent():
    values = DefaultReader().read().values

    assert SettingKey("license_key") not in values
    assert SettingKey("proxy_host") not in values


def test_custom_settings_model():
    reading = DefaultReader(AgentSettings(app_name="Billing")).read()

    assert reading.values[SettingKey("app_name")].value == "Billing"


def test_read_is_idempotent():
    reader = DefaultReader()

    assert reader.read() == reader.read()
