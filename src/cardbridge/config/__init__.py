"""
Configuration package for cardbridge.

Pydantic config models and YAML loading live in cardbridge.config.app.
"""

from cardbridge.config.app import (
    AliasSettings,
    BridgeConfig,
    CardSettings,
    LoggingSettings,
    RegistrySettings,
    load_config,
    save_config,
)

__all__ = [
    "AliasSettings",
    "BridgeConfig",
    "CardSettings",
    "LoggingSettings",
    "RegistrySettings",
    "load_config",
    "save_config",
]
