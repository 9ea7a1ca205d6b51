"""
Fetch an HTML page and parse it with BeautifulSoup.
"""
import logging
import threading
from typing import Optional

from bs4 import BeautifulSoup

from core.external_apis.http_retry import get_with_retries, BROWSER_USER_AGENT

logger = logging.getLogger(__name__)


class PageFetcher:
    def __init__(self, timeout: int = 10, max_retries: int = 1):
        self.timeout = timeout
        self.max_retries = max_retries

    def fetch(self, url: str, cancel_event: Optional[threading.Event] = None) -> Optional[BeautifulSoup]:
        """Parsed document, or None on network error or non-200 status."""
        resp, err = get_with_retries(
            url,
            headers={"User-Agent": BROWSER_USER_AGENT},
            timeout=self.timeout,
            max_retries=self.max_retries,
            cancel_event=cancel_event,
        )
        if resp is None:
            logger.warning("PAGE_FETCH failed url=%s error=%s", url[:80], err)
            return None
        if resp.status_code != 200:
            logger.warning("PAGE_FETCH failed url=%s status=%s", url[:80], resp.status_code)
            return None
        return BeautifulSoup(resp.text, "html.parser")
