"""Shared data models for zeefax."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .palette import Color


@dataclass(frozen=True)
class FeedSource:
    """A single syndication feed powering a category."""

    url: str
    name: str


@dataclass(frozen=True)
class CategoryConfig:
    """Static configuration for one topic category."""

    key: str
    page: int
    name: str
    short_name: str
    color: Color
    sources: Tuple[FeedSource, ...] = ()


@dataclass(frozen=True)
class FeedItem:
    """Normalised feed entry shown as a headline."""

    title: str
    link: str
    source: str
    category_key: str
    published_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "publishedAt": self.published_at,
            "source": self.source,
            "categoryKey": self.category_key,
        }


@dataclass(frozen=True)
class SourceResult:
    """Outcome of fetching one feed source."""

    source: FeedSource
    items: Tuple[FeedItem, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class CategoryResult:
    """Merged, newest-first headlines for a category."""

    key: str
    items: Tuple[FeedItem, ...]
    fetched_at: datetime
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "key": self.key,
            "items": [item.to_dict() for item in self.items],
            "fetchedAt": self.fetched_at.isoformat(),
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


Dataset = Dict[str, CategoryResult]


@dataclass(frozen=True)
class CacheEntry:
    data: CategoryResult
    expires_at: datetime


@dataclass(frozen=True)
class Segment:
    """A run of fixed-width text with uniform styling."""

    text: str
    fg: Color
    bg: Color = Color.BLACK
    bold: bool = False
    link: Optional[str] = None


@dataclass(frozen=True)
class Row:
    """One grid row; ``link`` makes the whole row actionable."""

    segments: Tuple[Segment, ...]
    link: Optional[str] = None

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments)

    @property
    def width(self) -> int:
        return sum(len(segment.text) for segment in self.segments)


@dataclass(frozen=True)
class PageDef:
    """Descriptor of a navigable page."""

    page: int
    label: str
    category_key: Optional[str] = None
    subpage: Optional[int] = None


@dataclass
class Outcome:
    """Result-or-error of one task in a fan-out."""

    value: Any = None
    error: Optional[BaseException] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None
