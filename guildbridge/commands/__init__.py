"""Commands issued from Discord."""

from guildbridge.commands.base import RunCommand, check_response
from guildbridge.commands.chat import ChatCommand, Reaction
from guildbridge.commands.guild import (
    DemoteCommand,
    ExecuteCommand,
    InviteCommand,
    KickCommand,
    MuteCommand,
    PromoteCommand,
    SetRankCommand,
    UnmuteCommand,
)

__all__ = [
    "RunCommand",
    "check_response",
    "ChatCommand",
    "Reaction",
    "MuteCommand",
    "UnmuteCommand",
    "InviteCommand",
    "KickCommand",
    "PromoteCommand",
    "DemoteCommand",
    "SetRankCommand",
    "ExecuteCommand",
]
