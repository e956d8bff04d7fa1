from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml
from dotenv import load_dotenv

from .schema import DEFAULT_ACCUMULATION_KEY, DEFAULT_KEYS, RESERVED_KEY, KeyRegistry

load_dotenv()

CONFIG_ENV_KEY = "L10N_CONFIG"
DEFAULT_CONFIG_PATH = Path("l10n_config.yaml")
KEY_MODES = ("strict", "open")


class ConfigError(ValueError):
    """Raised when the YAML configuration is invalid."""


def _ensure_list(value: Optional[Sequence[Any]], fallback: Sequence[str]) -> List[str]:
    if value is None:
        return list(fallback)
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"Expected a list, got {value!r}")
    return [str(v).strip() for v in value]


@dataclass
class AppConfig:
    default_keys: List[str] = field(default_factory=lambda: list(DEFAULT_KEYS))
    accumulation_key: str = DEFAULT_ACCUMULATION_KEY
    key_mode: str = "strict"
    essential_keys: Optional[List[str]] = None
    reference_language: str = "en"
    file_extensions: List[str] = field(default_factory=lambda: [".xlsx"])
    temp_prefix: str = "~$"
    archive_fallback_name: str = "translations"
    json_indent: int = 2

    def resolved_essential_keys(self) -> List[str]:
        if self.essential_keys is not None:
            return list(self.essential_keys)
        if self.key_mode == "strict":
            return list(self.default_keys)
        return []

    def new_registry(self) -> KeyRegistry:
        return KeyRegistry(
            defaults=self.default_keys,
            accumulation_key=self.accumulation_key,
            essential=self.resolved_essential_keys(),
        )


def validate_config(config: AppConfig) -> AppConfig:
    if not config.default_keys or any(not key for key in config.default_keys):
        raise ConfigError("default_keys must be a non-empty list of non-empty names")
    duplicates = sorted({key for key in config.default_keys if config.default_keys.count(key) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate key names in default_keys: {', '.join(duplicates)}")
    if RESERVED_KEY in config.default_keys or config.accumulation_key == RESERVED_KEY:
        raise ConfigError(f"'{RESERVED_KEY}' is reserved for the game name and cannot be a key")
    if not config.accumulation_key:
        raise ConfigError("accumulation_key must not be empty")
    if config.key_mode not in KEY_MODES:
        raise ConfigError(f"key_mode must be one of: {', '.join(KEY_MODES)}")
    if not config.file_extensions:
        raise ConfigError("file_extensions must list at least one extension")
    if config.json_indent < 0:
        raise ConfigError("json_indent must be >= 0")
    return config


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"`{name}` section must be a mapping")
    return value


def config_from_dict(raw: Dict[str, Any]) -> AppConfig:
    """Build an AppConfig from a parsed mapping; unknown sections are ignored."""

    if not isinstance(raw, dict):
        raise ConfigError("Configuration must be a mapping")

    keys_cfg = _section(raw, "keys")
    files_cfg = _section(raw, "files")
    export_cfg = _section(raw, "export")

    essential = keys_cfg.get("essential")
    try:
        config = AppConfig(
            default_keys=_ensure_list(keys_cfg.get("defaults"), DEFAULT_KEYS),
            accumulation_key=str(keys_cfg.get("accumulation", DEFAULT_ACCUMULATION_KEY)).strip(),
            key_mode=str(keys_cfg.get("mode", "strict")).strip().lower(),
            essential_keys=_ensure_list(essential, []) if essential is not None else None,
            reference_language=str(raw.get("reference_language", "en")).strip(),
            file_extensions=_ensure_list(files_cfg.get("extensions"), [".xlsx"]),
            temp_prefix=str(files_cfg.get("temp_prefix", "~$")),
            archive_fallback_name=str(export_cfg.get("fallback_name", "translations")).strip(),
            json_indent=int(export_cfg.get("json_indent", 2)),
        )
    except ConfigError:
        raise
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration value: {exc}") from exc
    return config


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    reference = os.getenv("L10N_REFERENCE_LANGUAGE")
    if reference:
        config.reference_language = reference.strip()
    key_mode = os.getenv("L10N_KEY_MODE")
    if key_mode:
        config.key_mode = key_mode.strip().lower()
    fallback = os.getenv("L10N_ARCHIVE_FALLBACK")
    if fallback:
        config.archive_fallback_name = fallback.strip()
    return config


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load the YAML configuration.

    Resolution order: explicit path, then $L10N_CONFIG, then ./l10n_config.yaml
    when it exists, otherwise built-in defaults. Environment overrides apply last.
    """

    if path is None:
        env_path = os.getenv(CONFIG_ENV_KEY)
        if env_path:
            path = Path(env_path)
        elif DEFAULT_CONFIG_PATH.exists():
            path = DEFAULT_CONFIG_PATH

    raw: Dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as handle:
                raw = yaml.safe_load(handle) or {}
        except (yaml.YAMLError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    config = config_from_dict(raw)
    return validate_config(_apply_env_overrides(config))
