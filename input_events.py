from __future__ import annotations

from dataclasses import dataclass
from typing import Union

DELETE_KEYS = frozenset({"backspace"})
CONFIRM_KEYS = frozenset({"enter"})
SPACE_KEY = "space"


@dataclass(frozen=True)
class AppendChar:
    char: str


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class CommitWord:
    pass


InputEvent = Union[AppendChar, Backspace, CommitWord]


def is_typeable(char: str | None) -> bool:
    """True for a single alphanumeric character or a space."""
    return char is not None and len(char) == 1 and (char == " " or char.isalnum())


def normalize_key(key: str, character: str | None = None) -> InputEvent | None:
    """Map a decoded key signal to a session event.

    ``key`` is the host's key name (Textual names such as ``"enter"`` or
    ``"a"``); ``character`` is the printable character, if any. Keys that
    produce no event return ``None``.
    """
    if key in DELETE_KEYS:
        return Backspace()
    if key in CONFIRM_KEYS:
        return CommitWord()
    if key == SPACE_KEY:
        return AppendChar(" ")
    if is_typeable(character):
        return AppendChar(character)
    return None
