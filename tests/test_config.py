from pathlib import Path

import pytest
import yaml

from l10n_common.config import AppConfig, ConfigError, config_from_dict, load_config
from l10n_common.schema import DEFAULT_KEYS


def test_defaults_without_config_file():
    config = load_config()

    assert config.default_keys == list(DEFAULT_KEYS)
    assert config.accumulation_key == "features"
    assert config.key_mode == "strict"
    assert config.resolved_essential_keys() == list(DEFAULT_KEYS)
    assert config.archive_fallback_name == "translations"


def test_load_yaml(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text(
        """
reference_language: fr
keys:
  defaults: [title, body, extras]
  accumulation: extras
  mode: open
files:
  extensions: [.xlsx, .xlsm]
export:
  fallback_name: bundle
  json_indent: 4
""",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.reference_language == "fr"
    assert config.default_keys == ["title", "body", "extras"]
    assert config.resolved_essential_keys() == []
    assert config.file_extensions == [".xlsx", ".xlsm"]
    assert config.json_indent == 4

    registry = config.new_registry()
    assert registry.keys == ["title", "body", "extras"]
    assert registry.is_accumulation("extras")


def test_default_config_file_in_working_directory(tmp_path):
    Path("l10n_config.yaml").write_text("reference_language: de\n", encoding="utf-8")
    assert load_config().reference_language == "de"


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("keys:\n  mode: open\n", encoding="utf-8")
    monkeypatch.setenv("L10N_CONFIG", str(path))

    assert load_config().key_mode == "open"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("L10N_REFERENCE_LANGUAGE", "ja")
    monkeypatch.setenv("L10N_KEY_MODE", "OPEN")
    monkeypatch.setenv("L10N_ARCHIVE_FALLBACK", "out")

    config = load_config()

    assert config.reference_language == "ja"
    assert config.key_mode == "open"
    assert config.archive_fallback_name == "out"


def test_essential_keys_override_mode():
    config = config_from_dict({"keys": {"mode": "open", "essential": ["rtp"]}})
    registry = config.new_registry()
    assert registry.is_essential("rtp")
    assert not registry.is_essential("wild")


@pytest.mark.parametrize(
    "raw",
    [
        {"keys": {"defaults": ["a", "a"]}},
        {"keys": {"defaults": ["a", ""]}},
        {"keys": {"defaults": "a,b"}},
        {"keys": {"mode": "loose"}},
        {"files": {"extensions": []}},
        {"export": {"json_indent": "wide"}},
    ],
)
def test_invalid_config_values(tmp_path, raw):
    path = tmp_path / "bad.yaml"
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_missing_or_malformed_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("keys: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(broken)


def test_app_config_registry_is_fresh_each_time():
    config = AppConfig()
    first = config.new_registry()
    first.add("bonus")
    assert "bonus" not in config.new_registry()


@pytest.mark.parametrize(
    "raw",
    [
        {"keys": {"defaults": ["game", "header"]}},
        {"keys": {"accumulation": "header"}},
    ],
)
def test_header_cannot_be_configured_as_key(tmp_path, raw):
    path = tmp_path / "reserved.yaml"
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


@pytest.mark.parametrize("section", ["keys", "files", "export"])
def test_non_mapping_section_is_config_error(section):
    with pytest.raises(ConfigError):
        config_from_dict({section: ["a", "b"]})


def test_non_utf8_config_file(tmp_path):
    path = tmp_path / "latin1.yaml"
    path.write_bytes(b"reference_language: \xe9\xff\n")
    with pytest.raises(ConfigError):
        load_config(path)
