"""
YouTube Data API v3 connector (video search).
Search: GET https://www.googleapis.com/youtube/v3/search?part=snippet&type=video&q=...&key=KEY
"""
import logging
import threading
from typing import List, Optional

from core.external_apis.base import VideoResult
from core.external_apis.http_retry import get_with_retries

logger = logging.getLogger(__name__)

YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
_THUMBNAIL_QUALITIES = ("maxres", "high", "medium", "default")


def _best_thumbnail(thumbnails: dict) -> Optional[str]:
    for quality in _THUMBNAIL_QUALITIES:
        url = (thumbnails.get(quality) or {}).get("url")
        if url:
            return url
    return None


class YouTubeVideoSearch:
    def __init__(self, api_key: str, timeout: int = 10):
        self.api_key = api_key
        self.timeout = timeout

    def search(self, query: str, max_results: int = 3,
               cancel_event: Optional[threading.Event] = None) -> List[VideoResult]:
        params = {
            "key": self.api_key,
            "part": "snippet",
            "q": query,
            "type": "video",
            "videoEmbeddable": "true",
            "maxResults": max_results,
        }
        resp, err = get_with_retries(YOUTUBE_SEARCH_URL, params=params, timeout=self.timeout,
                                     cancel_event=cancel_event)
        if resp is None:
            logger.warning("EXTERNAL_API youtube query=%s error=%s", query[:60], err)
            return []
        if resp.status_code == 403:
            logger.warning("EXTERNAL_API youtube quota exceeded or invalid key")
            return []
        if resp.status_code != 200:
            logger.warning("EXTERNAL_API youtube query=%s status=%s", query[:60], resp.status_code)
            return []
        try:
            items = resp.json().get("items") or []
        except ValueError as e:
            logger.warning("EXTERNAL_API youtube invalid json error=%s", e)
            return []

        results = []
        for item in items:
            video_id = (item.get("id") or {}).get("videoId")
            if not video_id:
                continue
            snippet = item.get("snippet") or {}
            results.append(
                VideoResult(
                    title=snippet.get("title") or "YouTube Video",
                    channel=snippet.get("channelTitle") or "Unknown Channel",
                    video_id=video_id,
                    thumbnail_url=_best_thumbnail(snippet.get("thumbnails") or {}),
                    description=snippet.get("description") or "",
                )
            )
        logger.info("VIDEO_SEARCH query=%s results=%d", query[:60], len(results))
        return results[:max_results]
