"""Page builders.

Each builder maps its inputs to exactly ``ROWS`` rows: row 0 is the header,
rows 1-22 hold content and row 23 a navigation hint. Builders are pure and
take the current time as an argument.
"""

from __future__ import annotations

import re
from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .config import CACHE_TTL
from .feeds import format_time, is_new_today
from .grid import (
    COLS,
    ROWS,
    blank,
    centred_row,
    empty_row,
    fit,
    header_row,
    nav_hint_row,
    pad,
    row,
    section_bar,
    seg,
    separator,
    text_row,
)
from .models import CategoryConfig, CategoryResult, Dataset, FeedItem, Row
from .navigation import (
    ABOUT_PAGE,
    HOME_PAGE,
    SUBPAGE_NEW,
    SUBPAGE_SIGNALS,
    SUBPAGE_SOURCES,
    SUBPAGE_TOP,
    Navigator,
    default_navigator,
)
from .palette import Color

Grid = List[Row]

HINT_ROW = ROWS - 1
CONTENT_LIMIT = ROWS - 2

PREFIX = "  ■ "
OPEN_TAG = "[OPEN]"
NEW_BADGE = " [NEW]"
SOURCE_WIDTH = 13
TIME_WIDTH = 10

SIGNAL_ITEMS = 20
SIGNAL_LIMIT = 15
SIGNAL_ROWS = 14
SIGNAL_LABEL_WIDTH = 20
SIGNAL_BAR_MAX = 8

SUBPAGE_HINTS = {
    SUBPAGE_TOP: "ALL",
    SUBPAGE_NEW: "NEW",
    SUBPAGE_SIGNALS: "SIGNALS",
    SUBPAGE_SOURCES: "SOURCES",
}

STOP_WORDS = frozenset(
    """
    the a an and or but in on at to for of with by from is are was were be
    been being have has had do does did will would could should may might
    this that these those it its as not no new how what which who when where
    why all also into about up out use using used via can over after more
    than large model models paper research based through
    """.split()
)

_NON_WORD_RE = re.compile(r"[^a-z0-9\s-]")
_SCHEME_RE = re.compile(r"^https?://")


def _finish(rows: List[Row], hint: Row) -> Grid:
    """Clamp content, pad with blank rows and append the hint row."""
    rows = rows[:HINT_ROW]
    while len(rows) < HINT_ROW:
        rows.append(empty_row())
    rows.append(hint)
    return rows


def _items(dataset: Dataset, key: str) -> Tuple[FeedItem, ...]:
    result = dataset.get(key)
    return result.items if result is not None else ()


def _section_rows(category: CategoryConfig, subpage: int, label: str, now: datetime) -> List[Row]:
    page = category.page + subpage
    return [
        header_row(page, now),
        section_bar(f"{category.short_name}  ─  {label}", page, category.color),
        separator(),
    ]


def _section_hint(category: CategoryConfig, current: int) -> Row:
    return nav_hint_row(
        f"{category.page + subpage}:{label}"
        for subpage, label in SUBPAGE_HINTS.items()
        if subpage != current
    )


def headline_pair(
    item: FeedItem, color: Color, now: datetime, is_new: bool
) -> Tuple[Row, Row]:
    """Title row plus source/time/[OPEN] meta row for one item."""
    badge = NEW_BADGE if is_new else ""
    title_width = COLS - len(PREFIX) - len(badge)
    title_segments = [seg(PREFIX, color), seg(fit(item.title, title_width), Color.WHITE)]
    if badge:
        title_segments.append(seg(badge, Color.YELLOW))

    gap = COLS - 4 - SOURCE_WIDTH - 2 - TIME_WIDTH - len(OPEN_TAG)
    meta = row(
        blank(4),
        seg(fit(item.source, SOURCE_WIDTH), Color.GRAY),
        seg("  ", Color.GRAY),
        seg(pad(format_time(item, now), TIME_WIDTH), Color.GRAY),
        blank(gap),
        seg(OPEN_TAG, Color.RED, link=item.link),
        link=item.link,
    )
    return row(*title_segments), meta


def _append_headlines(
    rows: List[Row],
    items: Iterable[FeedItem],
    color: Color,
    now: datetime,
    all_new: bool = False,
) -> None:
    for item in items:
        if len(rows) + 2 > CONTENT_LIMIT:
            break
        is_new = all_new or is_new_today(item, now)
        rows.extend(headline_pair(item, color, now, is_new))


def build_home_page(dataset: Dataset, now: datetime, navigator: Navigator) -> Grid:
    rows = [
        header_row(HOME_PAGE, now),
        centred_row("  Z E E F A X", Color.YELLOW, Color.BLUE),
        centred_row("RETRO NEWS TERMINAL", Color.WHITE, Color.BLUE),
    ]

    categories = navigator.categories
    title_width = COLS - 2 - 1 - len(OPEN_TAG)
    for index, category in enumerate(categories):
        rows.append(section_bar(category.short_name, category.page, category.color))
        items = _items(dataset, category.key)
        if not items:
            rows.append(text_row("  No items available", Color.GRAY))
        else:
            item = items[0]
            rows.append(
                row(
                    seg("  ", Color.WHITE),
                    seg(fit(item.title, title_width), category.color),
                    blank(1),
                    seg(OPEN_TAG, Color.RED, link=item.link),
                    link=item.link,
                )
            )
        if index < len(categories) - 1 and len(rows) < CONTENT_LIMIT:
            rows.append(empty_row())

    return _finish(rows, centred_row("TYPE PAGE NUMBER ─ ◄ PREV   NEXT ►", Color.GRAY))


def build_section_top_page(category: CategoryConfig, dataset: Dataset, now: datetime) -> Grid:
    rows = _section_rows(category, SUBPAGE_TOP, "TOP HEADLINES", now)
    items = _items(dataset, category.key)
    if not items:
        rows.append(text_row("  NO FEEDS LOADED - REFRESH TO RETRY", Color.RED))
    else:
        _append_headlines(rows, items, category.color, now)
    return _finish(rows, _section_hint(category, SUBPAGE_TOP))


def build_section_new_page(category: CategoryConfig, dataset: Dataset, now: datetime) -> Grid:
    rows = _section_rows(category, SUBPAGE_NEW, "NEW TODAY", now)
    items = [item for item in _items(dataset, category.key) if is_new_today(item, now)]
    if not items:
        rows.append(text_row("  NOTHING NEW IN THE LAST 24 HOURS", Color.GRAY))
    else:
        _append_headlines(rows, items, category.color, now, all_new=True)
    return _finish(rows, _section_hint(category, SUBPAGE_NEW))


def extract_signals(
    items: Iterable[FeedItem], limit: int = SIGNAL_LIMIT
) -> List[Tuple[str, int]]:
    """Rank recurring title keywords by frequency.

    Tokens of four or more characters that are not stop words are counted
    across titles; those seen at least twice are returned, most frequent
    first, ties in order of first appearance.
    """
    counts: Counter = Counter()
    for item in items:
        words = _NON_WORD_RE.sub(" ", item.title.lower()).split()
        counts.update(w for w in words if len(w) > 3 and w not in STOP_WORDS)

    ranked = sorted(
        ((word, count) for word, count in counts.items() if count >= 2),
        key=lambda pair: pair[1],
        reverse=True,
    )
    return ranked[:limit]


def format_signal(word: str, count: int) -> str:
    bar = "█" * min(count, SIGNAL_BAR_MAX)
    return pad(word.upper(), SIGNAL_LABEL_WIDTH) + f"  {bar} ({count})"


def build_section_signals_page(
    category: CategoryConfig, dataset: Dataset, now: datetime
) -> Grid:
    rows = _section_rows(category, SUBPAGE_SIGNALS, "SIGNALS", now)
    rows.append(text_row("  AUTO-EXTRACTED TREND SIGNALS:", category.color))
    rows.append(empty_row())

    signals = extract_signals(_items(dataset, category.key)[:SIGNAL_ITEMS])
    for word, count in signals[:SIGNAL_ROWS]:
        if len(rows) >= CONTENT_LIMIT:
            break
        rows.append(
            row(
                seg("  ▶ ", category.color),
                seg(pad(format_signal(word, count), COLS - 4), Color.WHITE),
            )
        )
    if not signals:
        rows.append(text_row("  NOT ENOUGH DATA YET", Color.GRAY))

    return _finish(rows, _section_hint(category, SUBPAGE_SIGNALS))


def _clock(value: datetime, now: datetime) -> str:
    if now.tzinfo is not None and value.tzinfo is not None:
        value = value.astimezone(now.tzinfo)
    return value.strftime("%H:%M")


def build_section_sources_page(
    category: CategoryConfig,
    dataset: Dataset,
    now: datetime,
    cache_ttl: timedelta = CACHE_TTL,
) -> Grid:
    rows = _section_rows(category, SUBPAGE_SOURCES, "SOURCES", now)
    rows.append(text_row("  FEEDS POWERING THIS SECTION:", category.color))
    rows.append(empty_row())

    for source in category.sources:
        rows.append(
            row(
                seg("  ● ", category.color),
                seg(fit(source.name, 15), Color.WHITE),
                blank(2),
                seg(fit(_SCHEME_RE.sub("", source.url), 19), Color.GRAY),
            )
        )
    rows.append(empty_row())

    result: Optional[CategoryResult] = dataset.get(category.key)
    if result is not None:
        rows.append(text_row(f"  LAST FETCHED: {_clock(result.fetched_at, now)}", Color.GRAY))
    ttl_minutes = int(cache_ttl.total_seconds() // 60)
    rows.append(text_row(f"  CACHE: {ttl_minutes} MIN  HEADLINE+LINK ONLY", Color.GRAY))
    rows.append(empty_row())
    if result is not None and result.error:
        rows.append(text_row(f"  ERROR: {result.error[:30]}", Color.RED))

    return _finish(rows, _section_hint(category, SUBPAGE_SOURCES))


def build_about_page(now: datetime, navigator: Navigator) -> Grid:
    rows = [
        header_row(ABOUT_PAGE, now),
        centred_row("ABOUT ZEEFAX", Color.YELLOW, Color.BLUE),
        separator(),
    ]
    lines = [
        "  ZEEFAX IS A RETRO TELETEXT-STYLE",
        "  NEWS AGGREGATOR. NO ALGORITHMS.",
        "  NO TRACKING. JUST HEADLINES.",
        "",
        "  NAVIGATE WITH PAGE NUMBERS:",
        f"  {HOME_PAGE}  HOME",
    ]
    lines.extend(f"  {c.page}  {c.name.upper()}" for c in navigator.categories)
    lines.extend(
        [
            "",
            "  ADD +1 FOR NEW TODAY",
            "  ADD +2 FOR SIGNALS",
            "  ADD +3 FOR SOURCES",
            "",
            "  HEADLINES ONLY. CLICK [OPEN] TO",
            "  READ THE ORIGINAL ARTICLE.",
        ]
    )
    rows.extend(text_row(line) for line in lines)

    hints = [f"{HOME_PAGE}:HOME"]
    hints.extend(f"{c.page}:{c.key.upper()}" for c in navigator.categories[:2])
    return _finish(rows, nav_hint_row(hints))


def build_not_found_page(page: int, now: datetime, navigator: Navigator) -> Grid:
    rows = [
        header_row(page, now),
        centred_row("PAGE NOT FOUND", Color.RED),
        separator(),
        empty_row(),
        centred_row(f"PAGE {page} DOES NOT EXIST", Color.YELLOW),
        empty_row(),
        centred_row("VALID PAGES:"),
        empty_row(),
        centred_row(f"{HOME_PAGE}  HOME", Color.CYAN),
    ]
    rows.extend(
        centred_row(f"{c.page}  {c.short_name}", c.color) for c in navigator.categories
    )
    rows.append(centred_row(f"{ABOUT_PAGE}  ABOUT", Color.GRAY))
    return _finish(rows, centred_row("TYPE A 3-DIGIT PAGE NUMBER", Color.GRAY))


SectionBuilder = Callable[[CategoryConfig, Dataset, datetime], Grid]

SECTION_BUILDERS: Dict[int, SectionBuilder] = {
    SUBPAGE_TOP: build_section_top_page,
    SUBPAGE_NEW: build_section_new_page,
    SUBPAGE_SIGNALS: build_section_signals_page,
    SUBPAGE_SOURCES: build_section_sources_page,
}


def build_page(
    page: int,
    dataset: Dataset,
    now: datetime,
    navigator: Optional[Navigator] = None,
    cache_ttl: timedelta = CACHE_TTL,
) -> Grid:
    """Compose the 24 rows for ``page``; unknown pages get the not-found page.

    ``cache_ttl`` is only shown on the sources page.
    """
    navigator = navigator or default_navigator()
    if page == HOME_PAGE:
        return build_home_page(dataset, now, navigator)
    if page == ABOUT_PAGE:
        return build_about_page(now, navigator)

    category = navigator.category_for_page(page)
    builder = SECTION_BUILDERS.get(page - category.page) if category else None
    if category is None or builder is None:
        return build_not_found_page(page, now, navigator)
    if builder is build_section_sources_page:
        return builder(category, dataset, now, cache_ttl)
    return builder(category, dataset, now)
