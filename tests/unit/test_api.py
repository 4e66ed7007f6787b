"""
Unit tests for the HTTP surface (FastAPI TestClient, in-memory store).
"""

import pytest
from fastapi.testclient import TestClient

from myth_parallels.cache import SnapshotCache
from myth_parallels.main import create_app
from myth_parallels.suggester import ParallelSuggester

pytestmark = pytest.mark.unit


@pytest.fixture
def client(flood_store):
    suggester = ParallelSuggester(flood_store, cache=SnapshotCache(flood_store))
    with TestClient(create_app(suggester)) as test_client:
        yield test_client


class TestSuggestEndpoint:
    
    def test_suggest(self, client):
        response = client.post("/v1/parallels/suggest", json={"mythId": 1})
        assert response.status_code == 200
        
        data = response.json()
        assert len(data) == 1
        item = data[0]
        assert item["myth"]["id"] == 2
        assert item["myth"]["title"] == "Noah's Ark"
        assert item["myth"]["tags"] == ["ark", "covenant"]
        assert item["myth"]["themes"] == ["flood"]
        assert item["score"] > 0
        assert item["rationale"]["id"] == 2
        assert item["rationale"]["sharedThemeCount"] == 1
        assert "baseScore" in item["rationale"]
    
    def test_snake_case_body(self, client):
        response = client.post("/v1/parallels/suggest", json={"myth_id": "1"})
        assert response.status_code == 200
    
    def test_invalid_id(self, client):
        response = client.post("/v1/parallels/suggest", json={"mythId": "abc"})
        assert response.status_code == 400
    
    def test_missing_id(self, client):
        response = client.post("/v1/parallels/suggest", json={})
        assert response.status_code == 422
    
    def test_not_found(self, client):
        response = client.post("/v1/parallels/suggest", json={"mythId": 999})
        assert response.status_code == 404
    
    def test_upstream_failure(self, client, flood_store):
        flood_store.fail_fetch = True
        response = client.post("/v1/parallels/suggest", json={"mythId": 1})
        assert response.status_code == 502


class TestParallelEndpoints:
    
    def test_create_parallel(self, client, flood_store):
        response = client.post(
            "/v1/parallels",
            json={"mythA": 1, "mythB": 2, "score": 0.4, "rationale": "shared flood", "detectedBy": "system"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["myth_a"] == 1
        assert data["myth_b"] == 2
        assert data["detected_by"] == "system"
        assert flood_store.links[1] == {2}
    
    def test_create_self_link_rejected(self, client):
        response = client.post("/v1/parallels", json={"mythA": 3, "mythB": 3})
        assert response.status_code == 400
    
    def test_created_parallel_excluded_from_suggestions(self, client):
        client.post("/v1/parallels/suggest", json={"mythId": 1})
        client.post("/v1/parallels", json={"mythA": 1, "mythB": 2})
        response = client.post("/v1/parallels/suggest", json={"mythId": 1})
        assert 2 not in [item["myth"]["id"] for item in response.json()]
    
    def test_list_parallels(self, client):
        client.post("/v1/parallels", json={"mythA": 1, "mythB": 2})
        response = client.get("/v1/parallels", params={"myth_id": 1})
        assert response.status_code == 200
        assert [p["myth_b"] for p in response.json()] == [2]
    
    def test_list_parallels_invalid_id(self, client):
        response = client.get("/v1/parallels", params={"myth_id": "x"})
        assert response.status_code == 400


class TestAdminAndHealth:
    
    def test_rebuild_cache(self, client, flood_store):
        response = client.post("/admin/rebuild-suggest-cache")
        assert response.status_code == 200
        assert response.json() == {"rebuilt": True, "docs": 3}
        assert flood_store.fetch_all_calls == 1
    
    def test_rebuild_cache_failure(self, client, flood_store):
        flood_store.fail_fetch = True
        response = client.post("/admin/rebuild-suggest-cache")
        assert response.status_code == 502
    
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["cached_docs"] is None
        
        client.post("/v1/parallels/suggest", json={"mythId": 1})
        assert client.get("/health").json()["cached_docs"] == 3
    
    def test_root(self, client):
        assert client.get("/").json()["service"] == "Myth Parallels API"
