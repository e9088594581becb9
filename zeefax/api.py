"""Request/response boundary exposing the aggregated dataset."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from .aggregator import FeedAggregator
from .models import Dataset

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, s-maxage=900, stale-while-revalidate=1800"


@dataclass
class Response:
    """Transport-agnostic response handed to whatever serves HTTP."""

    status: int
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)


def serialise_dataset(dataset: Dataset) -> Dict[str, Any]:
    return {key: result.to_dict() for key, result in dataset.items()}


async def feeds_endpoint(aggregator: FeedAggregator) -> Response:
    """Fetch every category; a pipeline failure becomes a 500 response."""
    try:
        dataset = await aggregator.fetch_all()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Feed aggregation failed.")
        return Response(status=500, body={"error": str(exc) or "Unknown error"})

    return Response(
        status=200,
        body=serialise_dataset(dataset),
        headers={"Cache-Control": CACHE_CONTROL},
    )
