#!/usr/bin/env python3
"""
Check if the recipe suggestion sources (web search, YouTube, Wikipedia, LLM) are reachable.
Run from backend: python scripts/check_external_apis.py
Exit 0 if at least one source works; 1 if all fail or none configured.
"""
import sys
from pathlib import Path
from typing import Tuple

# Add backend to path when run as script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# Short timeout for health check
HEALTH_TIMEOUT = 8
PROBE_QUERY = "phở bò"


def check_web_search() -> Tuple[bool, str]:
    """Return (success, message)."""
    from core.config import get_google_search_api_key, get_google_search_engine_id
    key, engine = get_google_search_api_key(), get_google_search_engine_id()
    if not (key and engine):
        return False, "not configured (set GOOGLE_SEARCH_API_KEY and GOOGLE_SEARCH_ENGINE_ID)"
    from core.external_apis.google_search import GoogleWebSearch
    results = GoogleWebSearch(key, engine, timeout=HEALTH_TIMEOUT).search(PROBE_QUERY, max_results=1)
    if results:
        return True, f"ok ({results[0].url[:60]})"
    return False, "no result"


def check_youtube() -> Tuple[bool, str]:
    from core.config import get_youtube_api_key
    key = get_youtube_api_key()
    if not key:
        return False, "not configured (set YOUTUBE_API_KEY)"
    from core.external_apis.youtube import YouTubeVideoSearch
    results = YouTubeVideoSearch(key, timeout=HEALTH_TIMEOUT).search(PROBE_QUERY, max_results=1)
    if results:
        return True, f"ok ({results[0].channel})"
    return False, "no result"


def check_wikipedia() -> Tuple[bool, str]:
    from core.config import get_wikipedia_enabled, get_wikipedia_lang
    if not get_wikipedia_enabled():
        return False, "disabled (WIKIPEDIA_ENABLED=false)"
    from core.external_apis.wikipedia import WikipediaLookup
    article = WikipediaLookup(get_wikipedia_lang(), timeout=HEALTH_TIMEOUT).lookup(PROBE_QUERY, max_chars=200)
    if article is not None:
        return True, f"ok ({article.title})"
    return False, "no result"


def check_llm() -> Tuple[bool, str]:
    from core.llm_client import LLMError, build_llm_client
    client = build_llm_client()
    if client is None:
        return False, "not configured"
    try:
        client.generate("Reply with the single word: ok")
    except LLMError as e:
        return False, str(e)[:80]
    return True, f"ok ({client.name})"


def main() -> int:
    print("Checking recipe suggestion sources...")
    checks = [
        ("Web search", check_web_search),
        ("YouTube", check_youtube),
        ("Wikipedia", check_wikipedia),
        ("LLM", check_llm),
    ]
    any_ok = False
    for label, check in checks:
        ok, msg = check()
        any_ok = any_ok or ok
        print(f"  {label + ':':<12} {'OK' if ok else 'FAIL'} - {msg}")
    if any_ok:
        print("At least one source is working.")
        return 0
    print("All configured sources failed or none configured.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
