import asyncio

from zeefax import api

from conftest import NOW, make_item, make_result


class StubAggregator:
    def __init__(self, dataset=None, error=None):
        self.dataset = dataset
        self.error = error

    async def fetch_all(self):
        if self.error is not None:
            raise self.error
        return self.dataset


def test_feeds_endpoint_serialises_dataset():
    item = make_item("Title", "https://x/1", hours_ago=1, source="Src")
    dataset = {
        "tech": make_result("tech", [item]),
        "design": make_result("design", [], error="all 1 sources failed"),
    }

    response = asyncio.run(api.feeds_endpoint(StubAggregator(dataset)))

    assert response.status == 200
    assert response.headers["Cache-Control"] == (
        "public, s-maxage=900, stale-while-revalidate=1800"
    )
    assert response.body["tech"] == {
        "key": "tech",
        "items": [
            {
                "title": "Title",
                "link": "https://x/1",
                "publishedAt": item.published_at,
                "source": "Src",
                "categoryKey": "tech",
            }
        ],
        "fetchedAt": NOW.isoformat(),
    }
    assert response.body["design"]["error"] == "all 1 sources failed"


def test_feeds_endpoint_reports_pipeline_failure():
    aggregator = StubAggregator(error=RuntimeError("No categories configured."))

    response = asyncio.run(api.feeds_endpoint(aggregator))

    assert response.status == 500
    assert response.body == {"error": "No categories configured."}
    assert "Cache-Control" not in response.headers
