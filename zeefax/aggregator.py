"""Concurrent aggregation of feeds into per-category results."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

from .cache import Clock, SectionCache, utcnow
from .config import (
    MAX_ITEMS_PER_CATEGORY,
    MAX_ITEMS_PER_SOURCE,
    REQUEST_TIMEOUT,
    AppConfig,
)
from .feeds import download_pool, fetch_source, merge_items
from .models import CategoryConfig, CategoryResult, Dataset, FeedItem, Outcome, SourceResult

logger = logging.getLogger(__name__)

SourceFetcher = Callable[..., Awaitable[SourceResult]]


class CategoryFetchError(RuntimeError):
    """Raised when no source of a category could be fetched."""


async def gather_outcomes(aws: Iterable[Awaitable]) -> List[Outcome]:
    """Run awaitables concurrently and return one outcome per task, in order."""
    results = await asyncio.gather(*aws, return_exceptions=True)
    return [
        Outcome(error=result) if isinstance(result, BaseException) else Outcome(value=result)
        for result in results
    ]


def describe_error(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class SectionAggregator:
    """Fetch, merge and cache the headlines of a single category."""

    def __init__(
        self,
        cache: SectionCache,
        fetcher: SourceFetcher = fetch_source,
        timeout: float = REQUEST_TIMEOUT,
        max_items_per_source: int = MAX_ITEMS_PER_SOURCE,
        max_items: int = MAX_ITEMS_PER_CATEGORY,
    ) -> None:
        self.cache = cache
        self.fetcher = fetcher
        self.timeout = timeout
        self.max_items_per_source = max_items_per_source
        self.max_items = max_items

    async def get(
        self, category: CategoryConfig, executor: Optional[Executor] = None
    ) -> CategoryResult:
        """Return the cached result for ``category`` or fetch it.

        Downloads run on ``executor`` when given; otherwise a pool sized to
        the category's sources is used for this fetch alone.
        """
        return await self.cache.get_or_fetch(
            category.key, lambda: self._fetch(category, executor)
        )

    async def _fetch(
        self, category: CategoryConfig, executor: Optional[Executor]
    ) -> CategoryResult:
        if executor is None:
            pool = download_pool(len(category.sources))
            try:
                return await self._fetch(category, pool)
            finally:
                pool.shutdown(wait=False)

        logger.info(
            "Fetching %d sources for category '%s'", len(category.sources), category.key
        )
        outcomes = await gather_outcomes(
            self.fetcher(
                source,
                category.key,
                timeout=self.timeout,
                max_items=self.max_items_per_source,
                executor=executor,
            )
            for source in category.sources
        )

        collected: List[FeedItem] = []
        failures = 0
        for source, outcome in zip(category.sources, outcomes):
            if not outcome.ok:
                logger.warning(
                    "Source '%s' failed for category '%s': %s",
                    source.name,
                    category.key,
                    describe_error(outcome.error),
                )
                failures += 1
                continue
            result: SourceResult = outcome.value
            if result.error is not None:
                failures += 1
            collected.extend(result.items)

        if category.sources and failures == len(category.sources):
            raise CategoryFetchError(f"all {failures} sources failed")

        items = merge_items(collected, limit=self.max_items)
        logger.info(
            "Merged %d items (from %d fetched) for category '%s'",
            len(items),
            len(collected),
            category.key,
        )
        return CategoryResult(
            key=category.key, items=tuple(items), fetched_at=self.cache.clock()
        )


class FeedAggregator:
    """Fetch every configured category concurrently into a ``Dataset``."""

    def __init__(
        self,
        categories: Sequence[CategoryConfig],
        sections: SectionAggregator,
        clock: Optional[Clock] = None,
    ) -> None:
        self.categories = tuple(categories)
        self.sections = sections
        self.clock = clock or sections.cache.clock

    async def fetch_all(self) -> Dataset:
        if not self.categories:
            raise RuntimeError("No categories configured.")

        pool = download_pool(sum(len(category.sources) for category in self.categories))
        try:
            outcomes = await gather_outcomes(
                self.sections.get(category, pool) for category in self.categories
            )
        finally:
            pool.shutdown(wait=False)

        dataset: Dict[str, CategoryResult] = {}
        for category, outcome in zip(self.categories, outcomes):
            if outcome.ok:
                dataset[category.key] = outcome.value
                continue
            message = describe_error(outcome.error)
            logger.warning("Category '%s' failed: %s", category.key, message)
            dataset[category.key] = CategoryResult(
                key=category.key, items=(), fetched_at=self.clock(), error=message
            )
        return dataset


def build_aggregator(
    app_config: AppConfig,
    categories: Sequence[CategoryConfig],
    clock: Clock = utcnow,
) -> FeedAggregator:
    """Wire a cache and aggregators from application settings."""
    cache = SectionCache(ttl=app_config.cache_ttl, clock=clock)
    sections = SectionAggregator(
        cache,
        timeout=app_config.timeout,
        max_items_per_source=app_config.max_items_per_source,
        max_items=app_config.max_items_per_category,
    )
    return FeedAggregator(categories, sections, clock=clock)
