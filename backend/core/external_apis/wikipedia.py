"""
Wikipedia connector via the MediaWiki action API (no key required).
Search: GET https://{lang}.wikipedia.org/w/api.php?action=query&list=search&srsearch=...
Extract: GET ...?action=query&prop=extracts|pageprops|info&explaintext=1&titles=...
"""
import logging
import threading
from typing import Optional

from core.external_apis.base import EncyclopediaArticle
from core.external_apis.http_retry import get_with_retries, BROWSER_USER_AGENT

logger = logging.getLogger(__name__)

MIN_ARTICLE_CHARS = 50
_DISAMBIGUATION_MARKERS = ("may refer to", "có thể chỉ đến", "có thể đề cập đến")


def is_plausible_article(article: Optional[EncyclopediaArticle]) -> bool:
    """Non-trivial text that is not a disambiguation page."""
    if article is None or not article.text:
        return False
    if len(article.text) <= MIN_ARTICLE_CHARS:
        return False
    text = article.text.lower()
    return not any(marker in text for marker in _DISAMBIGUATION_MARKERS)


class WikipediaLookup:
    def __init__(self, lang: str = "vi", timeout: int = 10):
        self.lang = lang
        self.timeout = timeout
        self.api_url = f"https://{lang}.wikipedia.org/w/api.php"
        self.headers = {"User-Agent": BROWSER_USER_AGENT}

    def _get(self, params: dict, cancel_event: Optional[threading.Event]) -> Optional[dict]:
        params = {"format": "json", "utf8": 1, **params}
        resp, err = get_with_retries(self.api_url, params=params, headers=self.headers,
                                     timeout=self.timeout, cancel_event=cancel_event)
        if resp is None:
            logger.warning("EXTERNAL_API wikipedia error=%s", err)
            return None
        if resp.status_code != 200:
            logger.warning("EXTERNAL_API wikipedia status=%s", resp.status_code)
            return None
        try:
            return resp.json()
        except ValueError as e:
            logger.warning("EXTERNAL_API wikipedia invalid json error=%s", e)
            return None

    def lookup(self, query: str, max_chars: int = 1500,
               cancel_event: Optional[threading.Event] = None) -> Optional[EncyclopediaArticle]:
        """Top search hit's plain-text extract (truncated to max_chars), or None if not found."""
        data = self._get({"action": "query", "list": "search", "srsearch": query, "srlimit": 1}, cancel_event)
        hits = ((data or {}).get("query") or {}).get("search") or []
        if not hits:
            logger.info("WIKIPEDIA not_found query=%s", query[:60])
            return None
        title = hits[0].get("title")
        if not title:
            return None

        data = self._get(
            {
                "action": "query",
                "prop": "extracts|pageprops|info",
                "explaintext": 1,
                "inprop": "url",
                "redirects": 1,
                "titles": title,
            },
            cancel_event,
        )
        pages = ((data or {}).get("query") or {}).get("pages") or {}
        for page in pages.values():
            if "missing" in page:
                continue
            if "disambiguation" in (page.get("pageprops") or {}):
                logger.info("WIKIPEDIA disambiguation title=%s", title)
                return None
            text = (page.get("extract") or "").strip()
            url = page.get("fullurl") or f"https://{self.lang}.wikipedia.org/wiki/{title.replace(' ', '_')}"
            logger.info("WIKIPEDIA found title=%s chars=%d", page.get("title", title), len(text))
            return EncyclopediaArticle(title=page.get("title", title), url=url, text=text[:max_chars])
        return None
