"""Tests for configuration loading."""

import json

import pytest

from guildbridge.config.loader import (
    camel_to_snake,
    convert_keys,
    load_config,
    save_config,
    snake_to_camel,
    validate_config,
)
from guildbridge.config.schema import Config
from guildbridge.errors import ConfigError


def test_defaults():
    config = Config()
    assert config.feedback.timeout == 10.0
    assert config.dispatch.cooldown_ticks == 10
    assert config.backoff.floor == 5.0
    assert config.backoff.ceiling == 300.0


def test_key_conversion():
    assert camel_to_snake("officerChannel") == "officer_channel"
    assert snake_to_camel("bridge_url") == "bridgeUrl"
    assert convert_keys({"discord": {"guildChannel": 1}}) == {"discord": {"guild_channel": 1}}


def test_load_camel_case_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "discord": {"token": "abc", "guildChannel": 1, "officerChannel": 2},
        "feedback": {"timeout": 3.5},
    }))

    config = load_config(path)

    assert config.discord.token == "abc"
    assert config.discord.guild_channel == 1
    assert config.feedback.timeout == 3.5


def test_invalid_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    assert load_config(path).feedback.timeout == 10.0


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "missing.json").discord.token == ""


def test_save_and_reload(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = Config()
    config.minecraft.bridge_url = "ws://game:9000"

    save_config(config, path)

    assert "bridgeUrl" in json.loads(path.read_text())["minecraft"]
    assert load_config(path).minecraft.bridge_url == "ws://game:9000"


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("GUILDBRIDGE_DISCORD__TOKEN", "from-env")
    monkeypatch.setenv("GUILDBRIDGE_FEEDBACK__TIMEOUT", "2.5")

    config = Config()

    assert config.discord.token == "from-env"
    assert config.feedback.timeout == 2.5


def test_validate_config():
    config = Config()
    with pytest.raises(ConfigError):
        validate_config(config)

    config.discord.token = "abc"
    config.discord.guild_channel = 1
    config.discord.officer_channel = 2
    validate_config(config)

    config.backoff.ceiling = 1
    with pytest.raises(ConfigError):
        validate_config(config)
