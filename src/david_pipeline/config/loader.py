"""Configuration loading with YAML parsing and validation."""

from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import DavidConfig


def load_config(config_path: Path | str) -> DavidConfig:
    """
    Load and validate client configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated DavidConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        yaml_content = f.read()

    return pydantic_yaml.parse_yaml_raw_as(DavidConfig, yaml_content)


def apply_overrides(config: DavidConfig, overrides: dict[str, Any]) -> DavidConfig:
    """
    Return a re-validated copy of config with overrides applied.

    Args:
        config: Base configuration (not modified)
        overrides: Values to override; dotted keys address nested models
            (e.g. "api.timeout_seconds")

    Raises:
        KeyError: If a dotted key names an unknown section
        pydantic.ValidationError: If the result is invalid
    """
    config_dict = config.model_dump()

    for key, value in overrides.items():
        *sections, name = key.split(".")
        target = config_dict
        for section in sections:
            target = target[section]
        target[name] = value

    return DavidConfig.model_validate(config_dict)


def load_config_with_overrides(
    config_path: Path | str | None,
    overrides: dict[str, Any],
) -> DavidConfig:
    """
    Load config from YAML (or built-in defaults) and apply overrides.

    Used by CLI flags that override config file values.

    Args:
        config_path: Path to YAML configuration file; None uses DavidConfig()
        overrides: See apply_overrides()

    Returns:
        Validated DavidConfig with overrides applied

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If final config is invalid
    """
    config = load_config(config_path) if config_path is not None else DavidConfig()
    return apply_overrides(config, overrides)
