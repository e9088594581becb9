"""Fixed-width row building for the 40-column teletext grid.

Every builder returns a ``Row`` whose segment texts add up to exactly
``COLS`` characters; renderers rely on that.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from .models import Row, Segment
from .palette import Color

COLS = 40
ROWS = 24
ELLIPSIS = "…"


def pad(s: str, n: int, ch: str = " ") -> str:
    """Pad/truncate s to exactly n chars."""
    if len(s) >= n:
        return s[:n]
    return s + ch * (n - len(s))


def pad_left(s: str, n: int, ch: str = " ") -> str:
    """Right-align s within n chars; long strings keep their first n chars."""
    if len(s) >= n:
        return s[:n]
    return ch * (n - len(s)) + s


def centre(s: str, n: int, ch: str = " ") -> str:
    """Centre s within n chars, any odd column going to the right."""
    if len(s) >= n:
        return s[:n]
    total = n - len(s)
    left = total // 2
    return ch * left + s + ch * (total - left)


def truncate(s: str, n: int) -> str:
    """Shorten s to n chars, ending in an ellipsis when anything was cut."""
    n = max(n, 0)
    if len(s) <= n:
        return s
    if n == 0:
        return ""
    return s[: n - 1] + ELLIPSIS


def fit(s: str, n: int) -> str:
    """Truncate with ellipsis, then pad to exactly n chars."""
    return pad(truncate(s, n), n)


def hrule(ch: str = "─") -> str:
    return ch * COLS


def seg(
    text: str,
    fg: Color,
    bg: Color = Color.BLACK,
    bold: bool = False,
    link: Optional[str] = None,
) -> Segment:
    """Build a segment. Callers keep ``text`` at its column budget."""
    return Segment(text=text, fg=fg, bg=bg, bold=bold, link=link or None)


def blank(width: int, bg: Color = Color.BLACK) -> Segment:
    return Segment(text=" " * width, fg=Color.BLACK, bg=bg)


def row(*segments: Segment, link: Optional[str] = None) -> Row:
    return Row(segments=tuple(segments), link=link or None)


def empty_row() -> Row:
    return row(seg(pad("", COLS), Color.WHITE))


def text_row(text: str, fg: Color = Color.WHITE, bg: Color = Color.BLACK) -> Row:
    """Left-aligned full-width row."""
    return row(seg(fit(text, COLS), fg, bg))


def centred_row(text: str, fg: Color = Color.WHITE, bg: Color = Color.BLACK) -> Row:
    return row(seg(centre(text, COLS), fg, bg))


def separator(ch: str = "─", fg: Color = Color.DIM) -> Row:
    return row(seg(hrule(ch), fg))


def header_row(page: int, now: datetime) -> Row:
    """[ZEEFAX][   date  time   ][P.nnn]"""
    date_str = now.strftime("%a %d %b %Y").upper()
    time_str = now.strftime("%H:%M")
    left = pad("ZEEFAX", 7)
    right = pad_left(f"P.{page}", 5)
    mid = centre(f"{date_str}  {time_str}", COLS - len(left) - len(right))
    return row(
        seg(left, Color.YELLOW, Color.BLUE, bold=True),
        seg(mid, Color.WHITE, Color.BLUE),
        seg(right, Color.CYAN, Color.BLUE),
    )


def section_bar(label: str, page: int, color: Color) -> Row:
    """Colour-coded title bar: accent column, label, page number."""
    page_str = str(page)
    title = fit(label, COLS - 4 - len(page_str) - 1)
    return row(
        seg(" ", color),
        seg(pad(f" {title} {page_str} ", COLS - 1), Color.BLACK, color, bold=True),
    )


def nav_hint_row(hints: Iterable[str]) -> Row:
    return row(seg(centre("  ".join(hints), COLS), Color.GRAY))


def footer_row(prev_page: Optional[int], next_page: Optional[int]) -> Row:
    """[◄prev][   PAGE ___   ][next►], composed outside the 24-row grid."""
    side = 6
    prev_str = f"◄{prev_page}" if prev_page else ""
    next_str = f"{next_page}►" if next_page else ""
    return row(
        seg(pad(prev_str, side), Color.CYAN, Color.FOOTER),
        seg(centre("PAGE ___", COLS - 2 * side), Color.YELLOW, Color.FOOTER),
        seg(pad_left(next_str, side), Color.CYAN, Color.FOOTER),
    )
