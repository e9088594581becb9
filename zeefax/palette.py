"""Teletext colour palette."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class Color(str, Enum):
    """Closed set of colour identifiers used by grid segments."""

    BLACK = "black"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    MAGENTA = "magenta"
    CYAN = "cyan"
    WHITE = "white"
    GRAY = "gray"
    DIM = "dim"
    ORANGE = "orange"
    PINK = "pink"
    FOOTER = "footer"

    @classmethod
    def parse(cls, name: str) -> "Color":
        """Return the colour called ``name`` or raise ``ValueError``."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown colour: {name!r}") from None


COLOR_CSS: Dict[Color, str] = {
    Color.BLACK: "#000000",
    Color.RED: "#FF3333",
    Color.GREEN: "#00FF66",
    Color.YELLOW: "#FFEE00",
    Color.BLUE: "#4488FF",
    Color.MAGENTA: "#FF00FF",
    Color.CYAN: "#00FFFF",
    Color.WHITE: "#FFFFFF",
    Color.GRAY: "#888888",
    Color.DIM: "#444444",
    Color.ORANGE: "#FF8800",
    Color.PINK: "#FF66CC",
    Color.FOOTER: "#000040",
}


def css_for(color: Optional[Color]) -> str:
    """Map a colour to its CSS value; a missing colour renders transparent."""
    if color is None:
        return "transparent"
    return COLOR_CSS[Color(color)]
