"""Page-number registry and prev/next ordering."""

from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Optional, Sequence, Tuple

from .config import load_default_categories
from .models import CategoryConfig, PageDef

HOME_PAGE = 100
ABOUT_PAGE = 199
PAGE_RANGE = 10

SUBPAGE_TOP = 0
SUBPAGE_NEW = 1
SUBPAGE_SIGNALS = 2
SUBPAGE_SOURCES = 3

SUBPAGE_LABELS = ("Headlines", "New Today", "Signals", "Sources")


class Navigator:
    """Immutable lookup structure derived once from the category config.

    Each category owns ``[page, page + 10)``; only the first four pages are
    in use, the rest of the window is reserved for future subpages.
    """

    def __init__(self, categories: Sequence[CategoryConfig]) -> None:
        self.categories: Tuple[CategoryConfig, ...] = tuple(categories)
        _validate(self.categories)

        page_map: Dict[int, PageDef] = {
            HOME_PAGE: PageDef(page=HOME_PAGE, label="Home"),
        }
        order = [HOME_PAGE]
        for category in self.categories:
            for subpage, label in enumerate(SUBPAGE_LABELS):
                number = category.page + subpage
                page_map[number] = PageDef(
                    page=number,
                    label=f"{category.name} – {label}",
                    category_key=category.key,
                    subpage=subpage,
                )
                order.append(number)
        page_map[ABOUT_PAGE] = PageDef(page=ABOUT_PAGE, label="About / Sources")
        order.append(ABOUT_PAGE)

        self.pages: Tuple[int, ...] = tuple(order)
        self._index = MappingProxyType({page: i for i, page in enumerate(self.pages)})
        self._page_map = MappingProxyType(page_map)

    def resolve(self, page: int) -> Optional[PageDef]:
        return self._page_map.get(page)

    def is_valid(self, page: int) -> bool:
        return page in self._page_map

    def adjacent(self, page: int) -> Tuple[Optional[int], Optional[int]]:
        """Return ``(previous, next)`` pages, None at either end."""
        index = self._index.get(page)
        if index is None:
            return None, None
        prev_page = self.pages[index - 1] if index > 0 else None
        next_page = self.pages[index + 1] if index < len(self.pages) - 1 else None
        return prev_page, next_page

    def category_for_page(self, page: int) -> Optional[CategoryConfig]:
        for category in self.categories:
            if category.page <= page < category.page + PAGE_RANGE:
                return category
        return None


def _validate(categories: Tuple[CategoryConfig, ...]) -> None:
    seen_keys = set()
    spans = []
    for category in categories:
        if category.key in seen_keys:
            raise ValueError(f"Duplicate category key: {category.key!r}")
        seen_keys.add(category.key)

        start, end = category.page, category.page + PAGE_RANGE
        for reserved in (HOME_PAGE, ABOUT_PAGE):
            if start <= reserved < end:
                raise ValueError(
                    f"Category '{category.key}' pages {start}-{end - 1} overlap page {reserved}"
                )
        for other_key, other_start in spans:
            if abs(other_start - start) < PAGE_RANGE:
                raise ValueError(
                    f"Categories '{other_key}' and '{category.key}' have overlapping pages"
                )
        spans.append((category.key, start))


@lru_cache(maxsize=1)
def default_navigator() -> Navigator:
    return Navigator(load_default_categories())
