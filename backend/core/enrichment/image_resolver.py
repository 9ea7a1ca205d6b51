"""
Find a representative image for a recipe: the source page's Open Graph image,
then its first absolute <img>, then an image search by name.
"""
import logging
import threading
from typing import Optional

from core.config import IMAGE_QUERY_TEMPLATE
from core.external_apis.base import ImageSearchProvider, PageFetchProvider

_ABSOLUTE = ("http://", "https://")


def extract_page_image(soup) -> Optional[str]:
    """og:image content, else the first <img> whose src is absolute."""
    og = soup.select_one('meta[property="og:image"]')
    if og and og.get("content"):
        return og["content"].strip()
    for img in soup.find_all("img"):
        src = (img.get("src") or "").strip()
        if src.startswith(_ABSOLUTE):
            return src
    return None


class ImageResolver:
    def __init__(
        self,
        page_fetcher: Optional[PageFetchProvider],
        image_search: Optional[ImageSearchProvider],
        logger: Optional[logging.Logger] = None,
    ):
        self.page_fetcher = page_fetcher
        self.image_search = image_search
        self.logger = logger or logging.getLogger(__name__)

    def _from_page(self, url: str, cancel_event: Optional[threading.Event]) -> Optional[str]:
        if self.page_fetcher is None:
            return None
        try:
            soup = self.page_fetcher.fetch(url, cancel_event=cancel_event)
            if soup is None:
                return None
            image = extract_page_image(soup)
        except Exception as e:
            self.logger.warning("IMAGE page extraction failed url=%s error=%s", url[:80], e)
            return None
        if image:
            self.logger.info("IMAGE from page url=%s", url[:80])
        return image

    def _from_search(self, name: str, cancel_event: Optional[threading.Event]) -> Optional[str]:
        if self.image_search is None:
            return None
        try:
            results = self.image_search.search(IMAGE_QUERY_TEMPLATE.format(name=name), cancel_event=cancel_event)
        except Exception as e:
            self.logger.warning("IMAGE search failed name=%s error=%s", name[:60], e)
            return None
        for url in results:
            if isinstance(url, str) and url.startswith(_ABSOLUTE):
                self.logger.info("IMAGE from search name=%s", name[:60])
                return url
        return None

    def resolve(self, name: str, source_url: Optional[str] = None,
                cancel_event: Optional[threading.Event] = None) -> Optional[str]:
        """Image URL or None. Never raises."""
        if source_url:
            image = self._from_page(source_url, cancel_event)
            if image:
                return image
        image = self._from_search(name, cancel_event)
        if image is None:
            self.logger.info("IMAGE none found name=%s", name[:60])
        return image
