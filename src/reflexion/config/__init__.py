"""
reflexion.config - Configuration loading and defaults

Configuration lives in a ``.reflexion.toml`` file found by walking up
from the working directory. Values are merged onto DEFAULT_CONFIG and
may be overridden with ``REFLEXION_<SECTION>_<KEY>`` environment
variables.

Example file:

    [engine]
    validate_mappings_before_run = true
    check_invariants_after_run = false

    [logging]
    level = "INFO"
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.toml_document import TOMLDocument

from reflexion.errors import ConfigError
from reflexion.logging_setup import configure_logging

CONFIG_FILENAME = ".reflexion.toml"
ENV_PREFIX = "REFLEXION_"

DEFAULT_CONFIG: dict[str, Any] = {
    "engine": {
        "validate_mappings_before_run": False,
        "check_invariants_after_run": False,
    },
    "logging": {
        "level": "WARNING",
    },
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_toml_document(content: str) -> TOMLDocument:
    """Parse TOML text into a style-preserving tomlkit document.

    Raises:
        ConfigError: If the text is not valid TOML.
    """
    try:
        return tomlkit.parse(content)
    except TOMLKitError as e:
        raise ConfigError(f"Invalid TOML: {e}") from e


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML text into plain Python dicts and lists."""
    return parse_toml_document(content).unwrap()


def find_config_file(start: Path) -> Path | None:
    """Find ``.reflexion.toml`` in ``start`` or any parent directory.

    Args:
        start: Directory to begin the search from.

    Returns:
        Path to the config file, or None if not found.
    """
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def merge_configs(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` onto ``base`` without mutating either."""
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(value: str) -> Any:
    """Interpret an environment value as JSON list/object, boolean, or string."""
    stripped = value.strip()
    if stripped.lower() == "true":
        return True
    if stripped.lower() == "false":
        return False
    if stripped.startswith(("[", "{")):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    return value


def _apply_env_overrides(
    config: dict[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Apply ``REFLEXION_<SECTION>_<KEY>`` overrides to known sections."""
    environ = os.environ if environ is None else environ
    for name, raw in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, _, key = name[len(ENV_PREFIX) :].lower().partition("_")
        if not key or section not in config or not isinstance(config[section], dict):
            continue
        config[section][key] = _try_parse_env_value(raw)
    return config


def load_config(path: Path, environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Load a config file, merged onto defaults, with env overrides applied.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    merged = merge_configs(DEFAULT_CONFIG, parse_toml(content))
    return _apply_env_overrides(merged, environ)


@dataclass
class EngineConfig:
    """Typed engine settings.

    Attributes:
        validate_mappings_before_run: Re-check every mapping entry's
            subgraph membership at the start of each full run.
        check_invariants_after_run: Verify counters and provenance after
            each full run.
        log_level: Level name for the ``reflexion`` logger.
    """

    validate_mappings_before_run: bool = False
    check_invariants_after_run: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EngineConfig:
        """Create EngineConfig from a configuration dictionary.

        Raises:
            ConfigError: If a value has the wrong type.
        """
        engine = data.get("engine", {})
        logging_section = data.get("logging", {})
        for name, section in (("engine", engine), ("logging", logging_section)):
            if not isinstance(section, Mapping):
                raise ConfigError(f"{name} must be a table, got {section!r}")

        validate = engine.get("validate_mappings_before_run", False)
        check = engine.get("check_invariants_after_run", False)
        for key, value in (
            ("engine.validate_mappings_before_run", validate),
            ("engine.check_invariants_after_run", check),
        ):
            if not isinstance(value, bool):
                raise ConfigError(f"{key} must be a boolean, got {value!r}")

        level = str(logging_section.get("level", "WARNING")).upper()
        if level not in _LOG_LEVELS:
            raise ConfigError(f"logging.level must be one of {', '.join(_LOG_LEVELS)}, got {level!r}")

        return cls(
            validate_mappings_before_run=validate,
            check_invariants_after_run=check,
            log_level=level,
        )

    def apply_logging(self) -> None:
        """Configure the ``reflexion`` logger at ``log_level``."""
        configure_logging(self.log_level)

    @classmethod
    def discover(cls, start: Path | None = None) -> EngineConfig:
        """Load settings from the nearest config file, or use defaults.

        Only reads settings; call ``apply_logging()`` to put ``log_level``
        into effect.
        """
        config_path = find_config_file(start or Path.cwd())
        if config_path is None:
            return cls.from_dict(_apply_env_overrides(copy.deepcopy(DEFAULT_CONFIG)))
        return cls.from_dict(load_config(config_path))


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "EngineConfig",
    "find_config_file",
    "load_config",
    "merge_configs",
    "parse_toml",
    "parse_toml_document",
]
