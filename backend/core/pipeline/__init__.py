"""
Recipe suggestion pipeline: staged source collection, enrichment, ranking.
"""
from .ranking import rank, citation_for
from .orchestrator import SuggestionPipeline, Stage, InvalidRequestError, build_pipeline

__all__ = [
    "rank",
    "citation_for",
    "SuggestionPipeline",
    "Stage",
    "InvalidRequestError",
    "build_pipeline",
]
