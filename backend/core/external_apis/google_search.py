"""
Google Custom Search JSON API connector (web and image search).
Key: https://developers.google.com/custom-search/v1/introduction
Search: GET https://www.googleapis.com/customsearch/v1?key=KEY&cx=ENGINE&q=...
"""
import logging
import threading
from typing import List, Optional

from core.external_apis.base import WebResult
from core.external_apis.http_retry import get_with_retries

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
# API caps num at 10 per page
_MAX_NUM = 10


def _query_items(
    api_key: str,
    engine_id: str,
    query: str,
    num: int,
    timeout: int,
    extra_params: Optional[dict] = None,
    cancel_event: Optional[threading.Event] = None,
) -> List[dict]:
    params = {
        "key": api_key,
        "cx": engine_id,
        "q": query,
        "num": max(1, min(num, _MAX_NUM)),
        "safe": "active",
    }
    params.update(extra_params or {})
    resp, err = get_with_retries(GOOGLE_SEARCH_URL, params=params, timeout=timeout, cancel_event=cancel_event)
    if resp is None:
        logger.warning("EXTERNAL_API google_search query=%s error=%s", query[:60], err)
        return []
    if resp.status_code != 200:
        logger.warning("EXTERNAL_API google_search query=%s status=%s", query[:60], resp.status_code)
        return []
    try:
        data = resp.json()
    except ValueError as e:
        logger.warning("EXTERNAL_API google_search invalid json query=%s error=%s", query[:60], e)
        return []
    return data.get("items") or []


class GoogleWebSearch:
    """General web search; results keep the engine's ranking order."""

    def __init__(self, api_key: str, engine_id: str, timeout: int = 10):
        self.api_key = api_key
        self.engine_id = engine_id
        self.timeout = timeout

    def search(self, query: str, max_results: int = 5,
               cancel_event: Optional[threading.Event] = None) -> List[WebResult]:
        items = _query_items(self.api_key, self.engine_id, query, max_results, self.timeout,
                             cancel_event=cancel_event)
        results = []
        for item in items:
            title = (item.get("title") or "").strip()
            url = (item.get("link") or "").strip()
            if not title or not url:
                continue
            results.append(WebResult(title=title, url=url, snippet=(item.get("snippet") or "").strip()))
        logger.info("WEB_SEARCH query=%s results=%d", query[:60], len(results))
        return results[:max_results]


class GoogleImageSearch:
    """Image search; returns absolute image URLs only."""

    def __init__(self, api_key: str, engine_id: str, timeout: int = 10):
        self.api_key = api_key
        self.engine_id = engine_id
        self.timeout = timeout

    def search(self, query: str, max_results: int = 5,
               cancel_event: Optional[threading.Event] = None) -> List[str]:
        items = _query_items(self.api_key, self.engine_id, query, max_results, self.timeout,
                             extra_params={"searchType": "image"}, cancel_event=cancel_event)
        urls = [
            item["link"] for item in items
            if isinstance(item.get("link"), str) and item["link"].startswith(("http://", "https://"))
        ]
        logger.info("IMAGE_SEARCH query=%s results=%d", query[:60], len(urls))
        return urls[:max_results]
