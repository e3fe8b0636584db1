"""Game side of the bridge: classification, dispatch, correlation and reconnection."""

from guildbridge.minecraft.classifier import RULES, Rule, classify, normalize, parse
from guildbridge.minecraft.dispatch import CompletionSignal, DispatchQueue
from guildbridge.minecraft.feedback import Failure, Feedback, Outcome, Success, Timeout
from guildbridge.minecraft.session import BridgeSession
from guildbridge.minecraft.supervisor import Backoff, ConnectionState, ConnectionSupervisor

__all__ = [
    "RULES",
    "Rule",
    "classify",
    "normalize",
    "parse",
    "CompletionSignal",
    "DispatchQueue",
    "Feedback",
    "Outcome",
    "Success",
    "Failure",
    "Timeout",
    "BridgeSession",
    "Backoff",
    "ConnectionState",
    "ConnectionSupervisor",
]
