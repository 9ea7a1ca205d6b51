"""
HTTP GET with retries and exponential backoff for external APIs.
"""
import logging
import threading
import time
from typing import Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 2
DEFAULT_INITIAL_BACKOFF = 0.5
BROWSER_USER_AGENT = "Mozilla/5.0 (compatible; RecipeSuggest/1.0)"


def get_with_retries(
    url: str,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: int = 10,
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
    cancel_event: Optional[threading.Event] = None,
) -> Tuple[Optional[requests.Response], Optional[str]]:
    """
    GET with retries and exponential backoff on timeout/connection errors.
    Returns (response, None) on success, (None, error_message) on failure.
    HTTP error statuses are returned as responses; callers check status_code.
    If cancel_event is set before an attempt or during backoff, returns (None, "cancelled").
    """
    params = params or {}
    last_error: Optional[str] = None
    for attempt in range(max_retries):
        if cancel_event is not None and cancel_event.is_set():
            return (None, "cancelled")
        try:
            resp = requests.get(url, params=params, headers=headers, timeout=timeout)
            return (resp, None)
        except requests.Timeout as e:
            last_error = f"Read timed out: {e}"
            logger.warning(
                "EXTERNAL_API retry attempt=%s/%s url=%s error=%s",
                attempt + 1, max_retries, url[:60], last_error,
            )
        except requests.RequestException as e:
            last_error = f"{type(e).__name__}: {e}"
            logger.warning(
                "EXTERNAL_API retry attempt=%s/%s url=%s error=%s",
                attempt + 1, max_retries, url[:60], last_error,
            )
        if attempt < max_retries - 1:
            delay = initial_backoff * (2 ** attempt)
            logger.info("EXTERNAL_API backoff %.1fs before retry", delay)
            if cancel_event is not None:
                if cancel_event.wait(delay):
                    return (None, "cancelled")
            else:
                time.sleep(delay)
    return (None, last_error)
