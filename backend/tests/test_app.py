"""
HTTP-level tests for the FastAPI app (pipeline mocked).
Run from repo root: python -m pytest backend/tests/test_app.py -v
"""
import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

import app as app_module
from core.models.suggestion import Citation, EnrichedSuggestion, SourceType
from core.pipeline.orchestrator import InvalidRequestError


@pytest.fixture
def client():
    return TestClient(app_module.app)


def test_health(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_suggest_returns_serialized_suggestions(client):
    suggestions = [
        EnrichedSuggestion("Trứng chiên cà chua", "Ngon!", Citation("Local Recipe Data"),
                           SourceType.DATASET, tags={"difficulty": "Dễ"}, match_ratio=1.0),
        EnrichedSuggestion("Cách làm trứng", "Xem video!",
                           Citation("YouTube: Bếp Nhà", "https://www.youtube.com/watch?v=1", is_video=True),
                           SourceType.VIDEO, image_url="https://i.ytimg.com/1.jpg"),
    ]
    with patch.object(app_module, "pipeline") as mock_pipeline:
        mock_pipeline.suggest = AsyncMock(return_value=suggestions)
        resp = client.post("/suggest-recipes", json={"ingredients": ["2 trứng", "1 cà chua"], "enableWebSearch": True})
    assert resp.status_code == 200
    body = resp.json()["suggestions"]
    assert [s["name"] for s in body] == ["Trứng chiên cà chua", "Cách làm trứng"]
    assert body[0]["citation"] == {"sourceName": "Local Recipe Data", "isVideo": False}
    assert body[0]["matchRatio"] == 1.0
    assert body[1]["citation"]["isVideo"] is True
    assert body[1]["imageUrl"] == "https://i.ytimg.com/1.jpg"
    args, kwargs = mock_pipeline.suggest.call_args
    assert args[0] == ["2 trứng", "1 cà chua"]
    assert kwargs["web_search_enabled"] is True


def test_suggest_empty_list_is_400(client):
    with patch.object(app_module, "pipeline") as mock_pipeline:
        mock_pipeline.suggest = AsyncMock(side_effect=InvalidRequestError("Ingredients list is required"))
        resp = client.post("/suggest-recipes", json={"ingredients": []})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Ingredients list is required"


def test_suggest_missing_body_field_uses_empty_list(client):
    with patch.object(app_module, "pipeline") as mock_pipeline:
        mock_pipeline.suggest = AsyncMock(side_effect=InvalidRequestError("Ingredients list is required"))
        resp = client.post("/suggest-recipes", json={})
    assert resp.status_code == 400
    assert mock_pipeline.suggest.call_args.args[0] == []


def test_suggest_unexpected_failure_is_500(client):
    with patch.object(app_module, "pipeline") as mock_pipeline:
        mock_pipeline.suggest = AsyncMock(side_effect=RuntimeError("boom"))
        resp = client.post("/suggest-recipes", json={"ingredients": ["trứng"]})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to suggest recipes"


def test_wrong_ingredients_type_is_rejected(client):
    resp = client.post("/suggest-recipes", json={"ingredients": "trứng"})
    assert resp.status_code == 422
