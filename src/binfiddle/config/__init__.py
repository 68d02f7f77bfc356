"""Configuration loading, schema, and defaults."""

from binfiddle.config.loader import CONFIG_FILENAME, ConfigError, load_config
from binfiddle.config.schema import BinfiddleConfig, DiffConfig, OutputConfig, PatchConfig

__all__ = [
    "CONFIG_FILENAME",
    "BinfiddleConfig",
    "ConfigError",
    "DiffConfig",
    "OutputConfig",
    "PatchConfig",
    "load_config",
]
