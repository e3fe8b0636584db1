"""Cleaning of user supplied text before it is sent in game."""

import re
import unicodedata

# Letters, numbers, punctuation, space separators and math, currency and
# modifier symbols survive. Everything else is stripped.
_ALLOWED_CATEGORIES = frozenset({
    "Lu", "Ll", "Lt", "Lm", "Lo",
    "Nd", "Nl", "No",
    "Pc", "Pd", "Ps", "Pe", "Pi", "Pf", "Po",
    "Zs",
    "Sm", "Sc", "Sk",
})

_NEWLINES = re.compile(r"(?:\r?\n)+")
_IGN = re.compile(r"[A-Za-z0-9_]{1,16}")
_RANK = re.compile(r"[^A-Za-z0-9 ]")

NEWLINE_MARKER = " ⤶ "


def _allowed(char: str) -> bool:
    if 0x2700 <= ord(char) <= 0x27BF:
        return True
    return unicodedata.category(char) in _ALLOWED_CATEGORIES


def clean(text: str) -> tuple[str, bool]:
    """Return ``text`` safe to send in game and whether anything was removed.

    Runs of newlines are joined with a visible marker and do not count as
    issues.
    """
    joined = _NEWLINES.sub(NEWLINE_MARKER, text.strip())
    cleaned = "".join(char for char in joined if _allowed(char))
    return cleaned.strip(), len(cleaned) != len(joined)


def is_valid_ign(name: str) -> bool:
    return _IGN.fullmatch(name) is not None


def clean_rank(rank: str) -> str:
    return _RANK.sub("", rank).strip()
