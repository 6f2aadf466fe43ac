"""
Shared fixtures: canonical keyword rows, provider results and an API client
backed by a throwaway SQLite database.
"""

import json

import pytest
from fastapi.testclient import TestClient

from aio_tracker.adapters.ingest import RawKeywordRow
from aio_tracker.config import get_settings


def _refs_json(refs):
    return json.dumps(refs) if refs is not None else None


@pytest.fixture
def make_row():
    """Factory for canonical rows; has_ai_overview defaults to True when refs are given"""

    def _make(keyword, refs=None, markdown=None, has_aio=None, raw=None):
        if has_aio is None:
            has_aio = refs is not None or markdown is not None
        return RawKeywordRow(
            keyword=keyword,
            has_ai_overview=1 if has_aio else 0,
            aio_markdown=markdown,
            aio_references=_refs_json(refs),
            raw_api_result=raw,
        )

    return _make


@pytest.fixture
def make_result():
    """Factory for one provider SERP result"""

    def _make(keyword, refs=None, markdown="", organic=None):
        items = []
        if refs is not None:
            items.append({
                "type": "ai_overview",
                "rank_group": 1,
                "markdown": markdown,
                "references": refs,
            })
        for rank, domain in enumerate(organic or [], 1):
            items.append({
                "type": "organic",
                "rank_group": rank,
                "domain": domain,
                "url": f"https://{domain}/",
            })
        return {"keyword": keyword, "items_count": len(items), "items": items}

    return _make


@pytest.fixture
def sample_results(make_result):
    """Two keywords with AI Overviews and one without"""
    return [
        make_result(
            "best crm",
            refs=[
                {"domain": "acme.com", "source": "Acme", "url": "https://acme.com/crm"},
                {"domain": "beta.io", "source": "Beta", "url": "https://beta.io/blog"},
            ],
            markdown="Acme and Beta lead the market [[1]](https://acme.com/crm) [[2]](https://beta.io/blog)",
            organic=["beta.io", "acme.com"],
        ),
        make_result(
            "crm pricing",
            refs=[{"domain": "acme.com", "source": "Acme", "url": "https://acme.com/pricing"}],
            markdown="Acme pricing starts low [[1]](https://acme.com/pricing)",
            organic=["acme.com"],
        ),
        make_result("crm login", organic=["example.org"]),
    ]


@pytest.fixture
def client(tmp_path, monkeypatch):
    """API client on an empty SQLite database"""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.delenv("DATAFORSEO_API_KEY", raising=False)
    get_settings.cache_clear()

    from aio_tracker.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client

    get_settings.cache_clear()


@pytest.fixture
def project(client):
    """A project tracking the "Acme" brand"""
    response = client.post("/api/v1/projects", json={
        "name": "CRM tracking",
        "brand_name": "Acme",
        "brand_domain": "acme.com",
        "location_code": "2840",
        "language_code": "en",
    })
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def upload(client):
    """Upload a JSON document into a project as a new session"""

    def _upload(project_id, payload, session_name=None, filename="results.json"):
        data = {"project_id": str(project_id)}
        if session_name:
            data["session_name"] = session_name
        content = payload if isinstance(payload, (bytes, str)) else json.dumps(payload)
        return client.post(
            "/api/v1/ingest/upload",
            data=data,
            files={"file": (filename, content, "application/json")},
        )

    return _upload
