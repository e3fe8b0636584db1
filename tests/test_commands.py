"""Tests for in-game command serialization."""

import pytest

from guildbridge.bus.events import Chat, MuteUnit
from guildbridge.errors import CommandError
from guildbridge.minecraft.commands import (
    MAX_COMMAND_LENGTH,
    ChatMessage,
    Demote,
    Execute,
    Invite,
    Kick,
    Mute,
    Promote,
    SetRank,
    Unmute,
)


@pytest.mark.parametrize(
    "command, line",
    [
        (ChatMessage("neyoa", "hello", Chat.GUILD), "/gc neyoa: hello"),
        (ChatMessage("neyoa", "hello", Chat.OFFICER), "/oc neyoa: hello"),
        (Mute("neyoa", 30, MuteUnit.DAY), "/g mute neyoa 30d"),
        (Mute("everyone", 1, MuteUnit.HOUR), "/g mute everyone 1h"),
        (Unmute("neyoa"), "/g unmute neyoa"),
        (Invite("neyoa"), "/g invite neyoa"),
        (Kick("neyoa", "spamming"), "/g kick neyoa spamming"),
        (Kick("neyoa"), "/g kick neyoa No reason specified"),
        (Promote("neyoa"), "/g promote neyoa"),
        (Demote("neyoa"), "/g demote neyoa"),
        (SetRank("neyoa", "Guild Staff"), "/g setrank neyoa Guild Staff"),
        (Execute("g online"), "/g online"),
        (Execute("/g online"), "/g online"),
    ],
)
def test_serialize(command, line):
    assert command.serialize() == line


@pytest.mark.parametrize(
    "build",
    [
        lambda: Invite("not a name"),
        lambda: Invite(""),
        lambda: Invite("a" * 17),
        lambda: Mute("neyoa", 0, MuteUnit.DAY),
        lambda: Mute("neyoa", 31, MuteUnit.MINUTE),
        lambda: SetRank("neyoa", ""),
        lambda: SetRank("neyoa", "Staff!"),
        lambda: Kick("neyoa", ""),
        lambda: Execute("/"),
        lambda: ChatMessage("neyoa", "", Chat.GUILD),
    ],
)
def test_invalid_arguments_are_rejected(build):
    with pytest.raises(CommandError):
        build()


def test_serialize_asserts_length_limit():
    command = Execute("say " + "a" * MAX_COMMAND_LENGTH)
    with pytest.raises(AssertionError):
        command.serialize()


def test_build_trims_content_to_fit():
    message, issues = ChatMessage.build("neyoa", "a" * 400, Chat.GUILD)

    assert issues.too_long
    assert not issues.illegal_characters
    assert len(message.serialize()) == MAX_COMMAND_LENGTH


def test_build_reports_illegal_characters():
    message, issues = ChatMessage.build("neyoa", "hi \x07there", Chat.OFFICER)

    assert issues.illegal_characters
    assert message.serialize() == "/oc neyoa: hi there"


def test_build_rejects_empty_content():
    message, issues = ChatMessage.build("neyoa", "\x07\x07", Chat.GUILD)

    assert message is None
    assert issues.empty


def test_build_keeps_newlines_visible():
    message, issues = ChatMessage.build("neyoa", "one\ntwo", Chat.GUILD)

    assert not issues
    assert message.content == "one ⤶ two"
