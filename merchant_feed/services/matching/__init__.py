"""Search matching services.

Key Components:
    - normalize: Case and diacritic folding for comparisons
    - distance: Levenshtein edit distance (fuzzy fallback)
    - RankerStrategy / SignalRanker: Relevance scoring
    - ScoreResult: Score plus reason codes
"""
from merchant_feed.services.matching.normalizer import normalize
from merchant_feed.services.matching.distance import distance
from merchant_feed.services.matching.ranker import (
    RankerStrategy,
    ScoreResult,
    SignalRanker,
    create_ranker,
    matches_category,
)

__all__ = [
    "normalize",
    "distance",
    "RankerStrategy",
    "ScoreResult",
    "SignalRanker",
    "create_ranker",
    "matches_category",
]
