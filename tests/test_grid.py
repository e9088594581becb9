from zeefax import grid
from zeefax.palette import Color

from conftest import NOW


def test_pad_truncates_or_pads():
    assert grid.pad("abc", 5) == "abc  "
    assert grid.pad("abcdef", 4) == "abcd"


def test_pad_left_keeps_leading_characters_when_too_long():
    assert grid.pad_left("42►", 5) == "  42►"
    assert grid.pad_left("123456", 4) == "1234"


def test_centre_puts_extra_column_on_the_right():
    assert grid.centre("ab", 5) == " ab  "
    assert grid.centre("abcdef", 3) == "abc"


def test_truncate_uses_single_ellipsis():
    assert grid.truncate("abcdef", 4) == "abc…"
    assert grid.truncate("abcd", 4) == "abcd"
    assert grid.truncate("abcd", 0) == ""
    assert grid.truncate("abcd", -3) == ""
    assert grid.fit("ab", 4) == "ab  "
    assert grid.fit("abcdef", 4) == "abc…"


def test_seg_drops_empty_link():
    segment = grid.seg("x", Color.RED, link="")

    assert segment.link is None
    assert segment.bg is Color.BLACK


def test_header_row_layout():
    header = grid.header_row(110, NOW)

    assert header.width == grid.COLS
    assert header.text.startswith("ZEEFAX")
    assert header.text.endswith("P.110")
    assert "MON 19 OCT 2026  12:00" in header.text


def test_section_bar_fits_long_labels():
    bar = grid.section_bar("CONSUMER PRODUCTS  ─  TOP HEADLINES", 140, Color.YELLOW)

    assert bar.width == grid.COLS
    assert "…" in bar.text
    assert bar.text.rstrip().endswith("140")
    assert bar.segments[1].bg is Color.YELLOW


def test_footer_row_with_and_without_neighbours():
    both = grid.footer_row(100, 111)
    first = grid.footer_row(None, 110)

    assert both.width == grid.COLS
    assert both.text.startswith("◄100")
    assert both.text.endswith("111►")
    assert first.width == grid.COLS
    assert first.text.startswith("      ")
    assert all(s.bg is Color.FOOTER for s in first.segments)


def test_builders_produce_full_width_rows():
    rows = [
        grid.empty_row(),
        grid.separator(),
        grid.text_row("x" * 60),
        grid.centred_row("hello"),
        grid.nav_hint_row(["111:NEW", "112:SIGNALS"]),
    ]

    assert all(r.width == grid.COLS for r in rows)


def test_blank_fills_width_with_background():
    segment = grid.blank(3, Color.FOOTER)

    assert segment.text == "   "
    assert segment.bg is Color.FOOTER
    assert segment.link is None
