"""Configuration schema."""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiscordConfig(BaseModel):
    token: str = ""  # Bot token from Discord Developer Portal
    guild_id: int | None = None  # Server the slash commands are synced to
    guild_channel: int = 0  # Mirrors in-game guild chat
    officer_channel: int = 0  # Mirrors in-game officer chat


class MinecraftConfig(BaseModel):
    bridge_url: str = "ws://localhost:3002"


class DispatchConfig(BaseModel):
    cooldown_ticks: int = 10
    tick_interval: float = 0.05  # Seconds between drain ticks


class FeedbackConfig(BaseModel):
    timeout: float = 10.0  # Seconds to wait for a command's response


class BackoffConfig(BaseModel):
    floor: float = 5.0
    ceiling: float = 300.0


class LoggingConfig(BaseModel):
    level: str = "INFO"


class Config(BaseSettings):
    """Root configuration.

    Read from ``~/.guildbridge/config.json`` and overridable through
    ``GUILDBRIDGE_`` environment variables, e.g.
    ``GUILDBRIDGE_DISCORD__TOKEN``.
    """

    model_config = SettingsConfigDict(env_prefix="GUILDBRIDGE_", env_nested_delimiter="__")

    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    minecraft: MinecraftConfig = Field(default_factory=MinecraftConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    feedback: FeedbackConfig = Field(default_factory=FeedbackConfig)
    backoff: BackoffConfig = Field(default_factory=BackoffConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
