"""
Feature flags, paths, and centralized configuration.
All resolution relative to the backend directory.
"""
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Repo root: backend/core/config.py -> parent=core, parent.parent=backend, parent.parent.parent=repo
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_REPO_ROOT = _BACKEND_DIR.parent


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        logger.warning("CONFIG invalid float %s=%r, using %s", name, os.environ.get(name), default)
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        logger.warning("CONFIG invalid int %s=%r, using %s", name, os.environ.get(name), default)
        return default


# --- Pipeline bounds ---
MAX_SUGGESTIONS = _env_int("MAX_SUGGESTIONS", 10)
MIN_MATCH_RATIO = _env_float("MIN_MATCH_RATIO", 0.5)
WEB_RESULTS_LIMIT = 5
VIDEO_RESULTS_LIMIT = 3
ENCYCLOPEDIA_MAX_CHARS = 1500
ENRICHMENT_CONCURRENCY = _env_int("ENRICHMENT_CONCURRENCY", 4)
# Deadline per external stage (seconds); one slow source must not stall the request
SOURCE_TIMEOUT = _env_float("SOURCE_TIMEOUT", 20.0)

# --- Query templates ---
WEB_QUERY_TEMPLATE = "Vietnamese recipes with {ingredients}"
VIDEO_QUERY_TEMPLATE = "{ingredients} cách làm OR hướng dẫn OR recipe"
ENCYCLOPEDIA_QUERY_TEMPLATE = "{name} (món ăn)"
IMAGE_QUERY_TEMPLATE = "{name} món ăn Việt Nam"


# --- Data paths ---
def get_dataset_path() -> Path:
    override = os.environ.get("RECIPE_DATASET_PATH", "").strip()
    if override:
        return Path(override)
    return _REPO_ROOT / "data" / "vn_food_translated.csv"


def get_dataset_name_column() -> str:
    return os.environ.get("RECIPE_DATASET_NAME_COLUMN", "tiêu đề")


def get_dataset_ingredients_column() -> str:
    return os.environ.get("RECIPE_DATASET_INGREDIENTS_COLUMN", "translated_ingredients")


# --- External APIs (lazy read from env) ---
def get_google_search_api_key() -> str:
    return os.environ.get("GOOGLE_SEARCH_API_KEY", "").strip()


def get_google_search_engine_id() -> str:
    return os.environ.get("GOOGLE_SEARCH_ENGINE_ID", "").strip()


def get_youtube_api_key() -> str:
    return os.environ.get("YOUTUBE_API_KEY", "").strip()


def get_wikipedia_lang() -> str:
    return os.environ.get("WIKIPEDIA_LANG", "vi").strip() or "vi"


def get_wikipedia_enabled() -> bool:
    return os.environ.get("WIKIPEDIA_ENABLED", "true").lower() in ("1", "true", "yes")


# --- LLM ---
def get_gemini_api_key() -> str:
    return os.environ.get("GEMINI_API_KEY", "").strip()


def get_gemini_model() -> str:
    return os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")


def get_ollama_url() -> str:
    return os.environ.get("OLLAMA_API_URL", "http://localhost:11434/api/generate")


def get_ollama_model() -> str:
    return os.environ.get("OLLAMA_MODEL", "llama3.2:3b")


def get_llm_provider() -> str:
    """'gemini', 'ollama' or 'none'. Defaults to gemini when a key is present."""
    provider = os.environ.get("LLM_PROVIDER", "").strip().lower()
    if provider:
        return provider
    return "gemini" if get_gemini_api_key() else "ollama"


# LLM timeout defaults (seconds)
LLM_ENRICHMENT_TIMEOUT = _env_int("LLM_ENRICHMENT_TIMEOUT", 30)


# --- Startup logging ---
def log_config() -> None:
    logger.info(
        "CONFIG: dataset=%s dataset_exists=%s min_match_ratio=%.2f max_suggestions=%s "
        "llm_provider=%s web_search=%s youtube=%s wikipedia=%s concurrency=%s source_timeout=%.0fs",
        get_dataset_path(), get_dataset_path().exists(), MIN_MATCH_RATIO, MAX_SUGGESTIONS,
        get_llm_provider(),
        bool(get_google_search_api_key() and get_google_search_engine_id()),
        bool(get_youtube_api_key()), get_wikipedia_enabled(),
        ENRICHMENT_CONCURRENCY, SOURCE_TIMEOUT,
    )
