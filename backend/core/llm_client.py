"""
Generative-text clients. Ollama (local) and Gemini (REST) behind one shape:
generate(prompt, json_mode=False) -> str.

Failures raise LLMError; a provider safety block raises LLMBlockedError with the
provider's reason so callers can surface it instead of a generic message.
"""
import json
import logging
import re
from typing import Optional, Protocol

import requests

from core.config import (
    LLM_ENRICHMENT_TIMEOUT,
    get_gemini_api_key,
    get_gemini_model,
    get_llm_provider,
    get_ollama_model,
    get_ollama_url,
)

logger = logging.getLogger(__name__)

GEMINI_URL_TEMPLATE = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

_GEMINI_SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]


class LLMError(Exception):
    """Generative call failed: transport, HTTP status, or empty/invalid output."""


class LLMBlockedError(LLMError):
    """Provider refused the prompt or the answer on safety grounds."""

    def __init__(self, reason: str):
        super().__init__(f"blocked: {reason}")
        self.reason = reason


class LLMClient(Protocol):
    name: str

    def generate(self, prompt: str, json_mode: bool = False) -> str: ...


class OllamaClient:
    name = "ollama"

    def __init__(self, url: Optional[str] = None, model: Optional[str] = None,
                 timeout: int = LLM_ENRICHMENT_TIMEOUT):
        self.url = url or get_ollama_url()
        self.model = model or get_ollama_model()
        self.timeout = timeout

    def generate(self, prompt: str, json_mode: bool = False) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": 0.0, "num_predict": 400},
        }
        if json_mode:
            payload["format"] = "json"
        try:
            resp = requests.post(self.url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            text = (resp.json().get("response") or "").strip()
        except (requests.RequestException, ValueError) as e:
            raise LLMError(f"ollama call failed: {e}") from e
        if not text:
            raise LLMError("ollama returned empty response")
        return text


class GeminiClient:
    name = "gemini"

    def __init__(self, api_key: str, model: Optional[str] = None,
                 timeout: int = LLM_ENRICHMENT_TIMEOUT):
        self.api_key = api_key
        self.model = model or get_gemini_model()
        self.timeout = timeout

    def generate(self, prompt: str, json_mode: bool = False) -> str:
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "safetySettings": _GEMINI_SAFETY_SETTINGS,
        }
        if json_mode:
            body["generationConfig"] = {"responseMimeType": "application/json"}
        try:
            resp = requests.post(
                GEMINI_URL_TEMPLATE.format(model=self.model),
                params={"key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise LLMError(f"gemini call failed: {e}") from e

        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise LLMBlockedError(block_reason)
        candidates = data.get("candidates") or []
        if not candidates:
            raise LLMError("gemini returned no candidates")
        first = candidates[0]
        if first.get("finishReason") == "SAFETY":
            raise LLMBlockedError("SAFETY")
        parts = (first.get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts).strip()
        if not text:
            raise LLMError("gemini returned empty text")
        return text


def parse_json_response(raw: str) -> Optional[dict]:
    """Extract a JSON object from model output (may contain markdown fences)."""
    if not raw:
        return None
    cleaned = re.sub(r"```(?:json)?\s*", "", raw)
    cleaned = cleaned.strip().rstrip("`")
    try:
        parsed = json.loads(cleaned)
        return parsed if isinstance(parsed, dict) else None
    except json.JSONDecodeError:
        # Nested objects (tags) are allowed, so take the outermost braces
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start != -1 and end > start:
            try:
                parsed = json.loads(cleaned[start:end + 1])
                return parsed if isinstance(parsed, dict) else None
            except json.JSONDecodeError:
                pass
    logger.warning("LLM could not parse JSON from: %s", raw[:200])
    return None


def build_llm_client() -> Optional[LLMClient]:
    """Client for the configured provider, or None when generation is disabled."""
    provider = get_llm_provider()
    if provider == "gemini":
        key = get_gemini_api_key()
        if not key:
            logger.warning("LLM provider=gemini but GEMINI_API_KEY not set; enrichment disabled")
            return None
        return GeminiClient(key)
    if provider == "ollama":
        return OllamaClient()
    logger.info("LLM provider=%s; enrichment disabled", provider)
    return None
