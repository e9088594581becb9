"""Feed fetching, normalisation and merging helpers."""

from __future__ import annotations

import asyncio
import calendar
import logging
import re
from concurrent.futures import Executor, ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Mapping, Optional, Tuple

import feedparser
import requests
from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from .config import MAX_ITEMS_PER_CATEGORY, MAX_ITEMS_PER_SOURCE, REQUEST_TIMEOUT
from .models import FeedItem, FeedSource, SourceResult

logger = logging.getLogger(__name__)

REQUEST_HEADERS = {
    "User-Agent": "ZEEFAX/1.0 (news aggregator; headline-only)",
    "Accept": "application/rss+xml, application/atom+xml, text/xml, application/xml",
}

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
NEW_WINDOW = timedelta(hours=24)
UNKNOWN_TIME = "??:??"

_WHITESPACE_RE = re.compile(r"\s+")


class FeedParseError(Exception):
    """Raised when a downloaded document is not a usable feed."""


def clean_title(raw: Optional[str]) -> str:
    """Strip markup and entities from a feed title and collapse whitespace."""
    if not raw:
        return ""
    text = BeautifulSoup(raw, "html.parser").get_text()
    return _WHITESPACE_RE.sub(" ", text).strip()


def _struct_to_iso(value: Any) -> str:
    """Convert a feedparser UTC ``struct_time`` into an ISO-8601 string."""
    return datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc).isoformat()


def _entry_timestamp(entry: Mapping[str, Any]) -> Optional[str]:
    for attr in ("published_parsed", "updated_parsed"):
        value = entry.get(attr)
        if value:
            return _struct_to_iso(value)
    return entry.get("published") or entry.get("updated") or None


def normalise_entry(
    entry: Mapping[str, Any], source: FeedSource, category_key: str
) -> FeedItem:
    """Turn a raw feedparser entry into a ``FeedItem``."""
    link = entry.get("link") or entry.get("guid") or entry.get("id") or ""
    return FeedItem(
        title=clean_title(entry.get("title")) or "Untitled",
        link=link.strip(),
        source=source.name,
        category_key=category_key,
        published_at=_entry_timestamp(entry),
    )


def _download(url: str, timeout: float) -> bytes:
    response = requests.get(url, timeout=timeout, headers=REQUEST_HEADERS)
    response.raise_for_status()
    return response.content


def download_pool(size: int) -> ThreadPoolExecutor:
    """Thread pool with one worker per feed so no download waits for another."""
    return ThreadPoolExecutor(max_workers=max(size, 1), thread_name_prefix="zeefax-fetch")


def parse_feed(
    content: bytes,
    source: FeedSource,
    category_key: str,
    max_items: int = MAX_ITEMS_PER_SOURCE,
) -> Tuple[FeedItem, ...]:
    """Parse feed content and normalise at most ``max_items`` entries."""
    parsed = feedparser.parse(content)
    if parsed.bozo and not parsed.entries:
        raise FeedParseError(f"unparseable feed: {parsed.get('bozo_exception')}")
    return tuple(
        normalise_entry(entry, source, category_key)
        for entry in parsed.entries[:max_items]
    )


async def fetch_source(
    source: FeedSource,
    category_key: str,
    timeout: float = REQUEST_TIMEOUT,
    max_items: int = MAX_ITEMS_PER_SOURCE,
    executor: Optional[Executor] = None,
) -> SourceResult:
    """Fetch and parse one feed; failures yield an empty result, never raise.

    The blocking download runs on ``executor``, or the loop default when None.
    """
    logger.info("Fetching feed '%s' (%s)", source.name, source.url)
    loop = asyncio.get_running_loop()
    try:
        content = await loop.run_in_executor(executor, _download, source.url, timeout)
        items = parse_feed(content, source, category_key, max_items)
    except (requests.RequestException, FeedParseError) as exc:
        logger.warning("Failed to fetch feed '%s' (%s): %s", source.name, source.url, exc)
        return SourceResult(source=source, error=str(exc) or type(exc).__name__)
    except Exception as exc:
        logger.exception("Unexpected error processing feed %s", source.url)
        return SourceResult(source=source, error=str(exc) or type(exc).__name__)

    logger.info("Collected %d entries from feed '%s'", len(items), source.url)
    return SourceResult(source=source, items=items)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse ISO-8601 or RFC-822 timestamps; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError):
        logger.debug("Unparseable timestamp: %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _aware(now: datetime) -> datetime:
    return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)


def _sort_key(item: FeedItem) -> datetime:
    return parse_timestamp(item.published_at) or EPOCH


def merge_items(
    items: Iterable[FeedItem], limit: int = MAX_ITEMS_PER_CATEGORY
) -> List[FeedItem]:
    """Deduplicate by link, order newest first and keep at most ``limit``."""
    seen_links = set()
    unique_items: List[FeedItem] = []
    for item in items:
        if not item.link or item.link in seen_links:
            continue
        seen_links.add(item.link)
        unique_items.append(item)

    unique_items.sort(key=_sort_key, reverse=True)
    return unique_items[:limit]


def is_new_today(item: FeedItem, now: datetime) -> bool:
    published = parse_timestamp(item.published_at)
    if published is None:
        return False
    return _aware(now) - published < NEW_WINDOW


def format_time(item: FeedItem, now: datetime) -> str:
    """Recency label: clock time today, weekday this week, date otherwise."""
    published = parse_timestamp(item.published_at)
    if published is None:
        return UNKNOWN_TIME
    now = _aware(now)
    local = published.astimezone(now.tzinfo)
    age = now - published
    if age < NEW_WINDOW:
        return local.strftime("%H:%M")
    if age < timedelta(days=7):
        return local.strftime("%a %d %b").upper()
    return local.strftime("%d %b").upper()
