"""
Unit tests for the YAML file layer.
"""

from pathlib import Path

import pytest

from agent_settings.errors import ParseError, SettingsFileNotFoundError
from agent_settings.sources.file import FileReader
from agent_settings.types import SettingKey, SourceLayer, ValueKind

from conftest import NEWRELIC_YML


class TestLocate:
    def test_explicit_missing_file_raises(self, tmp_path: Path) -> None:
        reader = FileReader(tmp_path / "missing.yml")
        with pytest.raises(SettingsFileNotFoundError) as exc_info:
            reader.read()
        assert exc_info.value.path == str(tmp_path / "missing.yml")

    def test_missing_file_error_is_builtin_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            FileReader(tmp_path / "missing.yml").read()

    def test_unspecified_missing_file_is_empty_layer(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        reading = FileReader().read()
        assert reading.layer is SourceLayer.FILE
        assert len(reading) == 0
        assert reading.origin is None

    def test_unspecified_file_found_in_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "newrelic.yml").write_text("app_name: Found\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        reading = FileReader().read()
        assert reading.values[SettingKey("app_name")].value == "Found"


class TestParsing:
    def test_nested_mapping_flattens_to_dotted_keys(self, write_yaml) -> None:
        path = write_yaml("transaction_events:\n  max_samples_stored: 2000\n")
        reading = FileReader(path).read()

        value = reading.values[SettingKey("transaction_events.max_samples_stored")]
        assert value.value == 2000
        assert value.kind is ValueKind.INT
        assert value.origin == str(path)

    def test_malformed_yaml_raises_parse_error(self, write_yaml) -> None:
        path = write_yaml("transaction_events:\n  max_samples_stored: [1, 2\n")
        with pytest.raises(ParseError) as exc_info:
            FileReader(path).read()
        assert exc_info.value.path == str(path)
        assert exc_info.value.line is not None

    def test_non_utf8_bytes_raise_parse_error(self, tmp_path: Path) -> None:
        path = tmp_path / "newrelic.yml"
        path.write_bytes(b"app_name: \xff\xfe bad\n")
        with pytest.raises(ParseError) as exc_info:
            FileReader(path).read()
        assert exc_info.value.path == str(path)
        assert "not valid UTF-8" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    def test_yaml_timestamps_kept_as_strings(self, write_yaml) -> None:
        path = write_yaml(
            "app_name: 2024-01-01\n"
            "labels:\n  deployed: 2024-01-01 12:30:00\n  windows: [2024-01-01, 2024-02-01]\n"
        )
        values = FileReader(path).read().values

        app_name = values[SettingKey("app_name")]
        assert app_name.kind is ValueKind.STRING
        assert app_name.value == "2024-01-01"
        assert values[SettingKey("labels.deployed")].value == "2024-01-01T12:30:00"
        assert values[SettingKey("labels.windows")].value == ("2024-01-01", "2024-02-01")

    def test_non_mapping_root_raises(self, write_yaml) -> None:
        path = write_yaml("- just\n- a list\n")
        with pytest.raises(ParseError) as exc_info:
            FileReader(path).read()
        assert "must be a mapping" in str(exc_info.value)

    def test_empty_document_is_empty_layer(self, write_yaml) -> None:
        assert len(FileReader(write_yaml("")).read()) == 0

    def test_null_leaves_are_skipped(self, write_yaml) -> None:
        reading = FileReader(write_yaml("license_key:\napp_name: X\n")).read()
        assert SettingKey("license_key") not in reading.values
        assert SettingKey("app_name") in reading.values

    def test_sequence_leaf_is_list(self, write_yaml) -> None:
        reading = FileReader(write_yaml("attributes:\n  exclude: [a, b]\n")).read()
        assert reading.values[SettingKey("attributes.exclude")].value == ("a", "b")

    def test_keys_folded_and_duplicates_rejected(self, write_yaml) -> None:
        path = write_yaml("App_Name: one\napp-name: two\n")
        with pytest.raises(ParseError) as exc_info:
            FileReader(path).read()
        assert "Duplicate setting app_name" in str(exc_info.value)

    def test_read_is_idempotent(self, write_yaml) -> None:
        reader = FileReader(write_yaml(NEWRELIC_YML))
        assert reader.read() == reader.read()


class TestEnvironmentSections:
    """newrelic.yml ``common`` + per-environment sections."""

    def test_common_only_without_environment(self, write_yaml) -> None:
        reading = FileReader(write_yaml(NEWRELIC_YML)).read()
        assert reading.values[SettingKey("app_name")].value == "Checkout Service"
        assert reading.values[SettingKey("transaction_events.max_samples_stored")].value == 2000
        # section names are not settings
        assert not any(key.segments[0] == "production" for key in reading.values)

    def test_environment_section_overrides_common(self, write_yaml) -> None:
        reading = FileReader(write_yaml(NEWRELIC_YML), environment="production").read()
        assert reading.values[SettingKey("transaction_events.max_samples_stored")].value == 500
        assert reading.values[SettingKey("transaction_events.enabled")].value is True

    def test_anchor_merge_and_override(self, write_yaml) -> None:
        reading = FileReader(write_yaml(NEWRELIC_YML), environment="staging").read()
        assert reading.values[SettingKey("app_name")].value == "Checkout Service (Staging)"
        assert reading.values[SettingKey("span_events.max_samples_stored")].value == 1000

    def test_lists_replaced_wholesale(self, write_yaml) -> None:
        text = (
            "common:\n  attributes:\n    exclude: [a, b]\n"
            "production:\n  attributes:\n    exclude: [c]\n"
        )
        reading = FileReader(write_yaml(text), environment="production").read()
        assert reading.values[SettingKey("attributes.exclude")].value == ("c",)

    def test_unknown_environment_falls_back_to_common(self, write_yaml) -> None:
        reading = FileReader(write_yaml(NEWRELIC_YML), environment="qa").read()
        assert reading.values[SettingKey("app_name")].value == "Checkout Service"
