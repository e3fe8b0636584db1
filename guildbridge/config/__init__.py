"""Configuration module for guildbridge."""

from guildbridge.config.loader import get_config_path, load_config, save_config, validate_config
from guildbridge.config.schema import Config

__all__ = ["Config", "load_config", "save_config", "validate_config", "get_config_path"]
