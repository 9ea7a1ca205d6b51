"""
Unit tests for the generative-text clients (requests mocked).
Run from repo root: python -m pytest backend/tests/test_llm_client.py -v
"""
import pytest
import requests
from unittest.mock import patch, MagicMock

from core.llm_client import (
    GeminiClient,
    LLMBlockedError,
    LLMError,
    OllamaClient,
    build_llm_client,
    parse_json_response,
)


def _post_response(payload):
    resp = MagicMock()
    resp.raise_for_status = MagicMock()
    resp.json = MagicMock(return_value=payload)
    return resp


@patch("core.llm_client.requests.post")
def test_ollama_json_mode_sets_format(mock_post):
    mock_post.return_value = _post_response({"response": '{"description": "ok"}'})
    out = OllamaClient(url="http://ollama/api/generate", model="m").generate("hi", json_mode=True)
    assert out == '{"description": "ok"}'
    body = mock_post.call_args.kwargs["json"]
    assert body["format"] == "json"
    assert body["options"]["temperature"] == 0.0
    assert body["stream"] is False


@patch("core.llm_client.requests.post")
def test_ollama_transport_error_raises_llm_error(mock_post):
    mock_post.side_effect = requests.ConnectionError("refused")
    with pytest.raises(LLMError):
        OllamaClient().generate("hi")


@patch("core.llm_client.requests.post")
def test_ollama_empty_response_raises(mock_post):
    mock_post.return_value = _post_response({"response": "  "})
    with pytest.raises(LLMError):
        OllamaClient().generate("hi")


@patch("core.llm_client.requests.post")
def test_gemini_returns_text(mock_post):
    mock_post.return_value = _post_response({
        "candidates": [{"content": {"parts": [{"text": '{"a": '}, {"text": "1}"}]}, "finishReason": "STOP"}]
    })
    out = GeminiClient("key", model="gemini-1.5-flash").generate("hi", json_mode=True)
    assert out == '{"a": 1}'
    kwargs = mock_post.call_args.kwargs
    assert kwargs["params"] == {"key": "key"}
    assert kwargs["json"]["generationConfig"]["responseMimeType"] == "application/json"
    assert len(kwargs["json"]["safetySettings"]) == 4


@patch("core.llm_client.requests.post")
def test_gemini_prompt_block_raises_blocked(mock_post):
    mock_post.return_value = _post_response({"promptFeedback": {"blockReason": "SAFETY"}})
    with pytest.raises(LLMBlockedError) as exc:
        GeminiClient("key").generate("hi")
    assert exc.value.reason == "SAFETY"


@patch("core.llm_client.requests.post")
def test_gemini_safety_finish_reason_raises_blocked(mock_post):
    mock_post.return_value = _post_response({"candidates": [{"finishReason": "SAFETY"}]})
    with pytest.raises(LLMBlockedError):
        GeminiClient("key").generate("hi")


@patch("core.llm_client.requests.post")
def test_gemini_http_error_raises_llm_error(mock_post):
    resp = MagicMock()
    resp.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    mock_post.return_value = resp
    with pytest.raises(LLMError) as exc:
        GeminiClient("key").generate("hi")
    assert not isinstance(exc.value, LLMBlockedError)


def test_parse_json_response_variants():
    assert parse_json_response('{"a": 1}') == {"a": 1}
    assert parse_json_response('```json\n{"a": {"b": 2}}\n```') == {"a": {"b": 2}}
    assert parse_json_response('Here you go: {"tags": {"type": "Món chính"}} enjoy') == {
        "tags": {"type": "Món chính"}
    }
    assert parse_json_response("not json") is None
    assert parse_json_response("[1, 2]") is None
    assert parse_json_response("") is None


def test_build_llm_client_selects_provider():
    with patch("core.llm_client.get_llm_provider", return_value="gemini"), \
            patch("core.llm_client.get_gemini_api_key", return_value="k"):
        assert isinstance(build_llm_client(), GeminiClient)
    with patch("core.llm_client.get_llm_provider", return_value="gemini"), \
            patch("core.llm_client.get_gemini_api_key", return_value=""):
        assert build_llm_client() is None
    with patch("core.llm_client.get_llm_provider", return_value="ollama"):
        assert isinstance(build_llm_client(), OllamaClient)
    with patch("core.llm_client.get_llm_provider", return_value="none"):
        assert build_llm_client() is None
