"""
Configuration management for cardbridge.

Provides YAML-based configuration with overrides,
configuration hierarchy (overrides > YAML > defaults), and validation.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from cardbridge.registry.normalize import NameAliases

DEFAULT_CONFIG_FILE = "~/.cardbridge/config.yaml"

TOKEN_ENV_VAR = "CARDBRIDGE_TOKEN"
ACCOUNT_ENV_VAR = "CARDBRIDGE_ACCOUNT"


class RegistrySettings(BaseModel):
    """Codecks registry API configuration."""

    base_url: str = Field(
        default="https://api.codecks.io",
        description="Base URL of the Codecks API",
    )
    account: str | None = Field(
        default=None,
        description=f"Account subdomain (falls back to ${ACCOUNT_ENV_VAR})",
    )
    token: str | None = Field(
        default=None,
        description=f"Session token (falls back to ${TOKEN_ENV_VAR})",
    )
    timeout: float = Field(
        default=10.0,
        description="Request timeout in seconds for registry calls",
    )

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


class AliasSettings(BaseModel):
    """Short names used in chat, mapped to full registry names."""

    spaces: dict[str, str] = Field(
        default_factory=dict,
        description="Space alias -> full space name (e.g. MT: MA TXA)",
    )
    decks: dict[str, str] = Field(
        default_factory=dict,
        description="Deck alias -> full deck name or Space/Deck path",
    )
    users: dict[str, str] = Field(
        default_factory=dict,
        description="User alias -> full user name",
    )

    def to_aliases(self) -> NameAliases:
        """Build the normalized alias tables used for resolution."""
        return NameAliases(spaces=self.spaces, decks=self.decks, users=self.users)


class CardSettings(BaseModel):
    """Defaults applied to created cards."""

    default_deck: str | None = Field(
        default=None,
        description="Deck name or Space/Deck path used when a message names no deck",
    )
    default_priority: Literal["a", "b", "c"] = Field(
        default="b",
        description="Card priority (a=high, b=medium, c=low)",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log record format",
    )


class BridgeConfig(BaseModel):
    """
    Main configuration for cardbridge.

    Configuration is loaded with the following priority:
    1. Overrides (highest)
    2. YAML file (~/.cardbridge/config.yaml)
    3. Defaults (lowest)
    """

    model_config = {"populate_by_name": True}

    registry: RegistrySettings = Field(
        default_factory=RegistrySettings,
        description="Registry API configuration",
    )
    aliases: AliasSettings = Field(
        default_factory=AliasSettings,
        description="Name aliases",
    )
    cards: CardSettings = Field(
        default_factory=CardSettings,
        description="Card defaults",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )


def load_yaml(config_file: str) -> dict[str, Any]:
    """
    Load YAML or JSON configuration file.

    Args:
        config_file: Path to YAML or JSON configuration file

    Returns:
        Dictionary with parsed YAML/JSON content

    Raises:
        ValueError: If YAML/JSON is invalid or file format is wrong
    """
    config_path = Path(config_file).expanduser()

    if not config_path.exists():
        return {}

    file_ext = config_path.suffix.lower()
    if file_ext not in [".yaml", ".yml", ".json"]:
        raise ValueError(
            f"Config file must have .yaml, .yml, or .json extension, got: {file_ext}\n"
            f"File: {config_path}"
        )

    try:
        with open(config_path) as f:
            content = f.read()

        if file_ext == ".json":
            return json.loads(content) if content.strip() else {}

        data = yaml.safe_load(content)
        return data if data is not None else {}

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}") from e


def apply_overrides(
    config_dict: dict[str, Any],
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Apply overrides to a config dictionary.

    Args:
        config_dict: Configuration dictionary
        overrides: Overrides; dotted keys like "registry.timeout" set nested values

    Returns:
        Configuration dictionary with overrides applied
    """
    if overrides is None:
        return config_dict

    for key, value in overrides.items():
        if "." in key:
            parts = key.split(".")
            current = config_dict
            for part in parts[:-1]:
                if part not in current or not isinstance(current[part], dict):
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = value
        else:
            config_dict[key] = value

    return config_dict


def _apply_env_credentials(config_dict: dict[str, Any]) -> dict[str, Any]:
    registry = config_dict.get("registry")
    if not isinstance(registry, dict):
        registry = {}
        config_dict["registry"] = registry

    if not registry.get("token") and os.environ.get(TOKEN_ENV_VAR):
        registry["token"] = os.environ[TOKEN_ENV_VAR]
    if not registry.get("account") and os.environ.get(ACCOUNT_ENV_VAR):
        registry["account"] = os.environ[ACCOUNT_ENV_VAR]
    return config_dict


def load_config(
    config_file: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> BridgeConfig:
    """
    Load configuration with hierarchy: overrides > YAML > defaults.

    Registry credentials missing from the file are read from
    $CARDBRIDGE_TOKEN and $CARDBRIDGE_ACCOUNT.

    Args:
        config_file: Path to YAML config file (default: ~/.cardbridge/config.yaml)
        overrides: Dictionary of overrides

    Returns:
        Validated BridgeConfig instance

    Raises:
        ValueError: If configuration is invalid
    """
    if config_file is None:
        config_file = DEFAULT_CONFIG_FILE

    config_dict = load_yaml(config_file)
    if not isinstance(config_dict, dict):
        raise ValueError(
            f"Config file must contain a mapping at the top level, "
            f"got {type(config_dict).__name__}\n"
            f"File: {config_file}"
        )
    config_dict = apply_overrides(config_dict, overrides)
    config_dict = _apply_env_credentials(config_dict)

    try:
        return BridgeConfig(**config_dict)
    except Exception as e:
        raise ValueError(
            f"Configuration validation failed: {e}\n"
            f"Please check your configuration file at {config_file}"
        ) from e


def save_config(config: BridgeConfig, config_file: str | None = None) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: BridgeConfig instance to save
        config_file: Path to YAML config file (default: ~/.cardbridge/config.yaml)

    Raises:
        OSError: If file operations fail
    """
    if config_file is None:
        config_file = DEFAULT_CONFIG_FILE

    config_path = Path(config_file).expanduser()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.model_dump(mode="python", exclude_none=True)

    with open(config_path, "w") as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

    # Holds the registry token: owner read/write only
    config_path.chmod(0o600)
