"""Tests for the v1 HTTP routes."""

import base64
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from app.core.errors import EmbeddingConfigurationError
from app.core.schemas_discovery import DiscoveryResult, DomainPrepResponse, PrepProgress
from app.main import app

client = TestClient(app)


def test_discover_returns_result():
    result = DiscoveryResult(query="permits", total_found=0, indexed=0, used_curated_fallback=True)
    with patch("app.api.sources.discover_sources", AsyncMock(return_value=result)):
        response = client.post(
            "/v1/sources/discover",
            json={"query": "permits", "jurisdiction": "USA", "category": "environmental"},
        )

    assert response.status_code == 200
    assert response.json()["used_curated_fallback"] is True


def test_discover_configuration_error_is_503():
    with patch(
        "app.api.sources.discover_sources",
        AsyncMock(side_effect=EmbeddingConfigurationError("No embedding provider configured")),
    ):
        response = client.post(
            "/v1/sources/discover",
            json={"query": "permits", "jurisdiction": "USA", "category": "environmental"},
        )

    assert response.status_code == 503


def test_discover_rejects_unknown_category():
    response = client.post(
        "/v1/sources/discover",
        json={"query": "permits", "jurisdiction": "USA", "category": "user_uploaded"},
    )
    assert response.status_code == 422


def test_retrieve_without_candidates():
    response = client.post("/v1/sources/retrieve", json={"query": "permits", "candidates": []})

    assert response.status_code == 200
    assert response.json() == {"results": [], "query": "permits", "total_candidates": 0}


def test_upload_text_document():
    payload = base64.b64encode(b"Site emergency response plan.").decode()
    response = client.post(
        "/v1/documents/upload",
        json={"file_name": "emergency_plan.txt", "file_content": payload},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["source"]["title"] == "Emergency Plan"


def test_prepare_domain_route():
    prepared = DomainPrepResponse(progress=PrepProgress(status="ready", progress=100))
    with patch("app.api.domains.prepare_domain", AsyncMock(return_value=prepared)):
        response = client.post(
            "/v1/domains/prepare",
            json={"country": "USA", "categories": ["financial"]},
        )

    assert response.status_code == 200
    assert response.json()["progress"]["status"] == "ready"


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
