"""
External search and lookup connectors for recipe suggestions.
Google Custom Search (web, images), YouTube Data API, Wikipedia, HTML page fetch.
"""
from .base import WebResult, VideoResult, EncyclopediaArticle
from .google_search import GoogleWebSearch, GoogleImageSearch
from .youtube import YouTubeVideoSearch
from .wikipedia import WikipediaLookup, is_plausible_article
from .page_fetch import PageFetcher

__all__ = [
    "WebResult",
    "VideoResult",
    "EncyclopediaArticle",
    "GoogleWebSearch",
    "GoogleImageSearch",
    "YouTubeVideoSearch",
    "WikipediaLookup",
    "is_plausible_article",
    "PageFetcher",
]
