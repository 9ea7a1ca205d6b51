"""
Candidate enrichment: generated descriptions and tags, creative fallback, images.
"""
from .recipe_enricher import RecipeEnricher, Enrichment, DEGRADED_DESCRIPTION
from .creative import CreativeSuggester, CreativeIdea
from .image_resolver import ImageResolver

__all__ = [
    "RecipeEnricher",
    "Enrichment",
    "DEGRADED_DESCRIPTION",
    "CreativeSuggester",
    "CreativeIdea",
    "ImageResolver",
]
