"""
DataForSEO client: request shape, envelope validation and batch error capture
"""

import asyncio
import json

import httpx
import pytest

from aio_tracker.services import DataForSEOError, DataForSEOService

API_URL = "https://api.dataforseo.test/v3/serp/google/organic/live/advanced"


def _envelope(keyword):
    return {
        "status_code": 20000,
        "status_message": "Ok.",
        "tasks": [{"result": [{"keyword": keyword, "items": []}]}],
    }


class _Transport(httpx.AsyncBaseTransport):
    """Answers every POST through `handler(payload) -> httpx.Response`"""

    def __init__(self, handler):
        self.handler = handler
        self.requests = []

    async def handle_async_request(self, request):
        self.requests.append(request)
        return self.handler(json.loads(request.content))


@pytest.fixture
def service():
    return DataForSEOService(api_key="Basic abc", api_url=API_URL, depth=20)


def _run(coro):
    return asyncio.run(coro)


class TestFetchKeyword:

    def test_posts_task_and_returns_result(self, service):
        transport = _Transport(lambda payload: httpx.Response(200, json=_envelope(payload[0]["keyword"])))

        async def go():
            async with httpx.AsyncClient(transport=transport) as client:
                return await service.fetch_keyword("best crm", "2840", "en", client=client)

        result = _run(go())

        assert result == {"keyword": "best crm", "items": []}
        request = transport.requests[0]
        assert request.headers["Authorization"] == "Basic abc"
        payload = json.loads(request.content)[0]
        assert payload["location_code"] == 2840
        assert payload["language_code"] == "en"
        assert payload["depth"] == 20
        assert payload["load_async_ai_overview"] is True

    def test_http_error(self, service):
        transport = _Transport(lambda payload: httpx.Response(401, json={}))

        async def go():
            async with httpx.AsyncClient(transport=transport) as client:
                return await service.fetch_keyword("kw", "2840", "en", client=client)

        with pytest.raises(DataForSEOError, match="401"):
            _run(go())

    def test_provider_status(self, service):
        transport = _Transport(lambda payload: httpx.Response(
            200, json={"status_code": 40100, "status_message": "Not authorized"},
        ))

        async def go():
            async with httpx.AsyncClient(transport=transport) as client:
                return await service.fetch_keyword("kw", "2840", "en", client=client)

        with pytest.raises(DataForSEOError, match="Not authorized"):
            _run(go())

    def test_empty_result(self, service):
        transport = _Transport(lambda payload: httpx.Response(
            200, json={"status_code": 20000, "tasks": [{"result": None}]},
        ))

        async def go():
            async with httpx.AsyncClient(transport=transport) as client:
                return await service.fetch_keyword("kw", "2840", "en", client=client)

        with pytest.raises(DataForSEOError, match="No result"):
            _run(go())


    def test_non_object_body(self, service):
        transport = _Transport(lambda payload: httpx.Response(200, json=[{"status_code": 20000}]))

        async def go():
            async with httpx.AsyncClient(transport=transport) as client:
                return await service.fetch_keyword("kw", "2840", "en", client=client)

        with pytest.raises(DataForSEOError, match="Unexpected"):
            _run(go())


class TestFetchKeywordsBatch:

    def test_failures_do_not_abort_batch(self, service, monkeypatch):
        async def fake_fetch(keyword, location_code, language_code, client=None):
            if keyword == "bad":
                raise DataForSEOError("DataForSEO error: boom")
            return {"keyword": keyword, "items": []}

        monkeypatch.setattr(service, "fetch_keyword", fake_fetch)
        progress = []

        outcomes = _run(service.fetch_keywords_batch(
            ["a", "bad", "c", "d", "e"], "2840", "en",
            batch_size=2,
            on_progress=lambda done, total: progress.append((done, total)),
        ))

        assert [o.keyword for o in outcomes] == ["a", "bad", "c", "d", "e"]
        assert outcomes[1].result is None
        assert "boom" in outcomes[1].error
        assert all(o.result for i, o in enumerate(outcomes) if i != 1)
        assert progress == [(2, 5), (4, 5), (5, 5)]

    def test_malformed_response_reported_per_keyword(self, service, monkeypatch):
        def handler(payload):
            if payload[0]["keyword"] == "bad":
                return httpx.Response(200, json=["not", "an", "object"])
            return httpx.Response(200, json=_envelope(payload[0]["keyword"]))

        real_client = httpx.AsyncClient
        monkeypatch.setattr(
            httpx, "AsyncClient",
            lambda **kwargs: real_client(transport=_Transport(handler), **kwargs),
        )

        outcomes = _run(service.fetch_keywords_batch(["good", "bad"], "2840", "en"))

        assert outcomes[0].result == {"keyword": "good", "items": []}
        assert outcomes[1].result is None
        assert "Unexpected" in outcomes[1].error
