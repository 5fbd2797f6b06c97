"""Feed assembly: gate, evaluate, filter or score, sort and annotate.

Pipeline for one evaluation:
    1. Visibility gate (subscription status, grace period)
    2. Open-now status for every visible merchant
    3. Browse: category filter / Search: relevance scoring, zero scores dropped
    4. Sort: open before closed, then score (search) or rating (browse)
    5. Delivery display for the consumer's neighborhood

Every call works on an immutable snapshot and keeps no state between
calls, so one assembler can serve concurrent evaluations.
"""
import time
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from merchant_feed.config import FeedSettings, get_settings
from merchant_feed.models.context import ConsumerContext, SortCriteria
from merchant_feed.models.feed import AvailabilityStatus, FeedResult, RankedResult
from merchant_feed.models.merchant import MerchantRecord
from merchant_feed.services.availability import availability_status
from merchant_feed.services.clock import Clock, SystemClock, resolve_zone, to_local
from merchant_feed.services.delivery import DeliveryLabels, resolve_delivery
from merchant_feed.services.matching import (
    RankerStrategy,
    ScoreResult,
    create_ranker,
    matches_category,
    normalize,
)
from merchant_feed.services.visibility import is_visible
from merchant_feed.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class _Candidate:
    record: MerchantRecord
    status: AvailabilityStatus
    match: Optional[ScoreResult] = None


class FeedAssembler:
    """Orchestrates visibility, availability, ranking and delivery resolution.

    Attributes:
        clock: Time source used when no explicit instant is passed
        zone: Merchants' zone; every instant is read in it before evaluation
        ranker: Relevance strategy for search queries
        settings: Engine configuration
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        ranker: Optional[RankerStrategy] = None,
        settings: Optional[FeedSettings] = None,
    ):
        self.settings = settings or get_settings()
        self.zone = resolve_zone(self.settings.timezone)
        self.clock = clock or SystemClock(self.settings.timezone)
        self.ranker = ranker or create_ranker(
            "signals",
            fuzzy_min_query_length=self.settings.fuzzy_min_query_length,
        )
        self._labels = DeliveryLabels.from_settings(self.settings)
        self._log = logger.bind(assembler=self.ranker.get_strategy_name())

    def assemble(
        self,
        records: Sequence[MerchantRecord],
        context: ConsumerContext,
        now: Optional[datetime] = None,
    ) -> FeedResult:
        """Build the ordered, annotated feed for one consumer.

        Args:
            records: Candidate snapshot (already filtered to approved merchants)
            context: Query, category, neighborhood and browse ordering
            now: Evaluation instant; defaults to the clock. Aware values are
                converted to the merchants' zone, naive values taken as local

        Returns:
            FeedResult with ordered results and the empty-state signal
        """
        started = time.perf_counter()
        now = to_local(now or self.clock.now(), self.zone)

        visible = [
            r for r in records
            if is_visible(r, now, grace_days=self.settings.grace_period_days)
        ]

        candidates = [
            _Candidate(
                record=r,
                status=availability_status(
                    r,
                    now,
                    absent_flag_open=self.settings.absent_open_flag_means_open,
                    carry_over=self.settings.overnight_carry_over,
                ),
            )
            for r in visible
        ]

        query = normalize(context.query)
        is_search = bool(query)

        if is_search:
            ordered = self._rank_search(candidates, query)
        else:
            ordered = self._rank_browse(candidates, context)

        results = [
            RankedResult(
                merchant=c.record,
                availability=c.status,
                delivery=resolve_delivery(c.record, context.neighborhood, self._labels),
                score=c.match.score if c.match else None,
                signals=list(c.match.signals) if c.match else [],
            )
            for c in ordered
        ]

        feed = FeedResult(
            results=results,
            is_search=is_search,
            total_candidates=len(records),
            visible_count=len(visible),
        )

        self._log.info(
            "feed_assembled",
            is_search=is_search,
            category_id=context.category_id,
            sort_by=context.sort_by.value,
            total_candidates=feed.total_candidates,
            visible_count=feed.visible_count,
            results_returned=len(results),
            open_count=sum(1 for r in results if r.is_open_now),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return feed

    def _rank_search(self, candidates: List[_Candidate], query: str) -> List[_Candidate]:
        matched: List[_Candidate] = []
        for c in candidates:
            match = self.ranker.score_with_signals(c.record, query)
            if match.is_match:
                c.match = match
                matched.append(c)
        # sorted() is stable: equal keys keep snapshot order
        return sorted(matched, key=lambda c: (not c.status.is_open, -c.match.score))

    def _rank_browse(self, candidates: List[_Candidate], context: ConsumerContext) -> List[_Candidate]:
        kept = [c for c in candidates if matches_category(c.record, context.category_id)]
        return sorted(
            kept,
            key=lambda c: (not c.status.is_open,) + self._browse_key(c.record, context.sort_by),
        )

    def _browse_key(self, record: MerchantRecord, sort_by: SortCriteria) -> Tuple[int, float]:
        """(unrated flag, negated score) so higher scores and rated merchants come first."""
        if sort_by == SortCriteria.GENERAL:
            if not record.is_new:
                return (0, -record.rating)
            if self.settings.unrated_rating is None:
                return (1, 0.0)
            return (0, -self.settings.unrated_rating)

        breakdown = record.rating_breakdown
        if breakdown is None:
            value = self.settings.missing_breakdown_value
        else:
            value = getattr(breakdown, sort_by.value)
        return (0, -value)


def assemble_feed(
    records: Sequence[MerchantRecord],
    context: ConsumerContext,
    *,
    now: Optional[datetime] = None,
    clock: Optional[Clock] = None,
    ranker: Optional[RankerStrategy] = None,
    settings: Optional[FeedSettings] = None,
) -> FeedResult:
    """One-shot helper around :class:`FeedAssembler`."""
    assembler = FeedAssembler(clock=clock, ranker=ranker, settings=settings)
    return assembler.assemble(records, context, now=now)
