"""
Result types and provider shapes for external search/lookup services.
"""
import threading
from dataclasses import dataclass
from typing import List, Optional, Protocol

from bs4 import BeautifulSoup


@dataclass
class WebResult:
    title: str
    url: str
    snippet: str = ""


@dataclass
class VideoResult:
    title: str
    channel: str
    video_id: str
    thumbnail_url: Optional[str] = None
    description: str = ""

    @property
    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"


@dataclass
class EncyclopediaArticle:
    title: str
    url: str
    text: str


class WebSearchProvider(Protocol):
    def search(self, query: str, max_results: int = 5,
               cancel_event: Optional[threading.Event] = None) -> List[WebResult]: ...


class ImageSearchProvider(Protocol):
    def search(self, query: str, max_results: int = 5,
               cancel_event: Optional[threading.Event] = None) -> List[str]: ...


class VideoSearchProvider(Protocol):
    def search(self, query: str, max_results: int = 3,
               cancel_event: Optional[threading.Event] = None) -> List[VideoResult]: ...


class EncyclopediaProvider(Protocol):
    def lookup(self, query: str, max_chars: int = 1500,
               cancel_event: Optional[threading.Event] = None) -> Optional[EncyclopediaArticle]: ...


class PageFetchProvider(Protocol):
    def fetch(self, url: str,
              cancel_event: Optional[threading.Event] = None) -> Optional[BeautifulSoup]: ...
