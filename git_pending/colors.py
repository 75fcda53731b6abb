"""ANSI colour codes for terminal output."""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Literal, Mapping, TextIO

ColorMode = Literal["auto", "always", "never"]

COLORS: Mapping[str, str] = MappingProxyType(
    {
        "reset": "\x1b[0m",
        "red": "\x1b[31m",
        "green": "\x1b[32m",
        "yellow": "\x1b[33m",
        "blue": "\x1b[34m",
        "cyan": "\x1b[36m",
        "bold": "\x1b[1m",
    }
)


def paint(text: str, color: str, enabled: bool = True) -> str:
    """Wrap `text` in the named colour, or return it unchanged when disabled."""
    if not enabled:
        return text
    return f"{COLORS[color]}{text}{COLORS['reset']}"


def should_use_color(mode: ColorMode, stream: TextIO) -> bool:
    """Resolve a --color mode. "auto" colours a TTY unless NO_COLOR is set."""
    if mode == "always":
        return True
    if mode == "never":
        return False
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())
