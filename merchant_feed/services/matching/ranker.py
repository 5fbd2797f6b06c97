"""Search relevance scoring for merchant records.

This module implements the Strategy pattern for ranking, with a
rule-based signal ranker as the default strategy.

Signals (the name tier is exclusive, everything else adds up):
    - Name: exact 100, prefix 80, substring 60
    - Tag containing the query: +50
    - Description containing the query: +30
    - Query words (len > 2) found inside name words: +20 each
    - Fuzzy fallback, only when the above scored 0 and the query is
      long enough: +15 for a close name, +15 per close tag

Key Components:
    - RankerStrategy: Abstract base class for ranking algorithms
    - SignalRanker: Default additive/tiered signal implementation
    - ScoreResult: Score plus the reason codes that produced it
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from merchant_feed.config import get_settings
from merchant_feed.models.context import ALL_CATEGORIES
from merchant_feed.models.merchant import MerchantRecord
from merchant_feed.services.matching.distance import distance
from merchant_feed.services.matching.normalizer import normalize
from merchant_feed.utils.logger import get_logger

logger = get_logger(__name__)

NAME_EXACT_SCORE = 100
NAME_PREFIX_SCORE = 80
NAME_SUBSTRING_SCORE = 60
TAG_SCORE = 50
DESCRIPTION_SCORE = 30
WORD_MATCH_SCORE = 20
FUZZY_SCORE = 15

MIN_QUERY_WORD_LENGTH = 2  # words must be longer than this
FUZZY_MAX_EDITS = 2
FUZZY_RELATIVE_EDITS = 0.3


@dataclass
class ScoreResult:
    """Relevance of one record for one query.

    Attributes:
        merchant_id: Id of the scored record
        score: Non-negative relevance score, 0 means "not a match"
        signals: Stable reason codes, in evaluation order
    """
    merchant_id: str
    score: int = 0
    signals: List[str] = field(default_factory=list)

    @property
    def is_match(self) -> bool:
        return self.score > 0


class RankerStrategy(ABC):
    """Abstract base class for relevance strategies.

    All implementations must honor the contract:
        - scores are non-negative integers
        - an empty query scores 0
        - the record is never modified
    """

    @abstractmethod
    def score_with_signals(self, record: MerchantRecord, normalized_query: str) -> ScoreResult:
        """Score ``record`` against an already normalized query."""
        pass

    @abstractmethod
    def get_strategy_name(self) -> str:
        """Get the name of this ranking strategy."""
        pass

    def score(self, record: MerchantRecord, normalized_query: str) -> int:
        return self.score_with_signals(record, normalized_query).score


class SignalRanker(RankerStrategy):
    """Additive text-signal ranker with an edit-distance fallback.

    Attributes:
        fuzzy_min_query_length: Fuzzy fallback only runs for queries
            strictly longer than this
    """

    def __init__(self, fuzzy_min_query_length: Optional[int] = None):
        if fuzzy_min_query_length is None:
            fuzzy_min_query_length = get_settings().fuzzy_min_query_length
        self.fuzzy_min_query_length = fuzzy_min_query_length
        self._log = logger.bind(ranker="SignalRanker")

    def get_strategy_name(self) -> str:
        return "signals"

    def score_with_signals(self, record: MerchantRecord, normalized_query: str) -> ScoreResult:
        result = ScoreResult(merchant_id=record.id)
        query = normalized_query
        if not query:
            return result

        name = normalize(record.name)
        tags = [normalize(t) for t in record.tags]
        description = normalize(record.description)

        if name == query:
            result.score += NAME_EXACT_SCORE
            result.signals.append("NAME_EXACT")
        elif name.startswith(query):
            result.score += NAME_PREFIX_SCORE
            result.signals.append("NAME_PREFIX")
        elif query in name:
            result.score += NAME_SUBSTRING_SCORE
            result.signals.append("NAME_SUBSTRING")

        if any(query in tag for tag in tags):
            result.score += TAG_SCORE
            result.signals.append("TAG")

        if description and query in description:
            result.score += DESCRIPTION_SCORE
            result.signals.append("DESCRIPTION")

        word_matches = self._count_word_matches(name, query)
        if word_matches:
            result.score += word_matches * WORD_MATCH_SCORE
            result.signals.append(f"WORDS_{word_matches}")

        if result.score == 0 and len(query) > self.fuzzy_min_query_length:
            self._apply_fuzzy(result, name, tags, query)

        if result.score:
            self._log.debug(
                "record_scored",
                merchant_id=record.id,
                score=result.score,
                signals=result.signals,
            )
        return result

    @staticmethod
    def _count_word_matches(name: str, query: str) -> int:
        query_words = [w for w in query.split() if len(w) > MIN_QUERY_WORD_LENGTH]
        if not query_words:
            return 0
        name_words = name.split()
        return sum(1 for qw in query_words if any(qw in nw for nw in name_words))

    @staticmethod
    def _apply_fuzzy(result: ScoreResult, name: str, tags: List[str], query: str) -> None:
        relative_limit = FUZZY_RELATIVE_EDITS * len(query)
        # Nothing above this bound can satisfy either name condition
        cutoff = max(FUZZY_MAX_EDITS, int(relative_limit))

        name_distance = distance(name, query, score_cutoff=cutoff)
        if name_distance <= FUZZY_MAX_EDITS or name_distance < relative_limit:
            result.score += FUZZY_SCORE
            result.signals.append("FUZZY_NAME")

        for tag in tags:
            if distance(tag, query, score_cutoff=FUZZY_MAX_EDITS) <= FUZZY_MAX_EDITS:
                result.score += FUZZY_SCORE
                result.signals.append("FUZZY_TAG")


def create_ranker(strategy: str = "signals", **kwargs) -> RankerStrategy:
    """Factory function to create a ranker strategy.

    Args:
        strategy: Strategy name ("signals" for now)
        **kwargs: Additional arguments passed to the ranker

    Returns:
        RankerStrategy instance

    Raises:
        ValueError: If unknown strategy name
    """
    strategies = {
        "signals": SignalRanker,
    }

    if strategy not in strategies:
        raise ValueError(f"Unknown ranking strategy: {strategy}. Available: {list(strategies.keys())}")

    return strategies[strategy](**kwargs)


def matches_category(record: MerchantRecord, category_id: str) -> bool:
    """Browse filter: ``"all"`` matches everything, otherwise the id must be a tag."""
    if category_id == ALL_CATEGORIES:
        return True
    return category_id in record.tags
