from datetime import datetime, timedelta, timezone

import pytest

from zeefax.models import CategoryConfig, CategoryResult, FeedItem, FeedSource
from zeefax.navigation import Navigator
from zeefax.palette import Color

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_item(title, link, hours_ago=None, source="Feed", key="tech", published_at=None):
    if published_at is None and hours_ago is not None:
        published_at = (NOW - timedelta(hours=hours_ago)).isoformat()
    return FeedItem(
        title=title,
        link=link,
        source=source,
        category_key=key,
        published_at=published_at,
    )


def make_result(key, items, error=None):
    return CategoryResult(key=key, items=tuple(items), fetched_at=NOW, error=error)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def categories():
    return (
        CategoryConfig(
            key="tech",
            page=110,
            name="Technology",
            short_name="TECHNOLOGY",
            color=Color.CYAN,
            sources=(
                FeedSource(url="https://example.com/tech.xml", name="Example Tech"),
                FeedSource(url="http://feeds.example.org/more", name="More Tech"),
            ),
        ),
        CategoryConfig(
            key="design",
            page=120,
            name="Design",
            short_name="DESIGN",
            color=Color.MAGENTA,
            sources=(FeedSource(url="https://example.com/design.xml", name="Design Weekly"),),
        ),
    )


@pytest.fixture
def navigator(categories):
    return Navigator(categories)
