from .strategy import MatchStrategy, SubstringContainmentStrategy
from .dataset_matcher import DatasetMatcher

__all__ = [
    "MatchStrategy",
    "SubstringContainmentStrategy",
    "DatasetMatcher",
]
