"""Loading and saving the JSON config file."""

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from guildbridge.config.schema import Config
from guildbridge.errors import ConfigError


def get_config_path() -> Path:
    return Path.home() / ".guildbridge" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """Load the config file, falling back to defaults when it is unusable.

    Keys in the file are camelCase. Settings the file leaves out can still
    come from environment variables.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            return Config(**convert_keys(data))
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            logger.warning("Using default configuration.")

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = convert_to_camel(config.model_dump())

    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def validate_config(config: Config) -> None:
    """Raise :class:`ConfigError` if the bridge cannot start with ``config``."""
    if not config.discord.token:
        raise ConfigError("Discord token not configured (discord.token)")
    if not config.discord.guild_channel or not config.discord.officer_channel:
        raise ConfigError("Discord channels not configured (discord.guildChannel, discord.officerChannel)")
    if config.backoff.floor <= 0 or config.backoff.ceiling < config.backoff.floor:
        raise ConfigError("Backoff ceiling must be at least the floor, and the floor positive")


def convert_keys(data: Any) -> Any:
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)


def snake_to_camel(name: str) -> str:
    components = name.split("_")
    return components[0] + "".join(x.title() for x in components[1:])
