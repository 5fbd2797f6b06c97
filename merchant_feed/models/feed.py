"""Derived annotations produced by a feed evaluation.

These are plain dataclasses: they are computed per evaluation, never
stored, and never validated from external input.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from merchant_feed.models.merchant import MerchantRecord


class AvailabilityReason(str, Enum):
    """Why a merchant is considered open or closed right now."""
    OPEN = "open"
    OPEN_NO_SCHEDULE = "open_no_schedule"
    CLOSED_MANUALLY = "closed_manually"
    CLOSED_TODAY = "closed_today"
    OUTSIDE_HOURS = "outside_hours"
    MALFORMED_SCHEDULE = "malformed_schedule"


@dataclass(frozen=True)
class AvailabilityStatus:
    """Open/closed decision with its reason.

    Attributes:
        is_open: Whether the merchant accepts orders now
        reason: Which rule decided
        closes_at: Raw ``HH:MM`` close time of the active window, if open by schedule
    """
    is_open: bool
    reason: AvailabilityReason
    closes_at: Optional[str] = None


class DeliveryKind(str, Enum):
    PRICED = "priced"
    FREE = "free"
    SELECT_LOCATION = "select_location"
    ON_REQUEST = "on_request"


@dataclass(frozen=True)
class DeliveryDisplay:
    """Delivery fee as shown to one consumer.

    ``price`` is only set when a concrete fee applies (PRICED or FREE).
    """
    text: str
    is_free: bool
    kind: DeliveryKind
    price: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "is_free": self.is_free,
            "kind": self.kind.value,
            "price": str(self.price) if self.price is not None else None,
        }


class EmptyReason(str, Enum):
    NO_SEARCH_MATCHES = "no_search_matches"
    NO_MERCHANTS_IN_CATEGORY = "no_merchants_in_category"


@dataclass
class RankedResult:
    """A visible merchant with its per-evaluation annotations.

    Attributes:
        merchant: The source record (never modified)
        availability: Open-now decision
        delivery: Delivery fee display for the consumer's neighborhood
        score: Relevance score, only set when a search query was given
        signals: Reason codes that contributed to ``score``
    """
    merchant: MerchantRecord
    availability: AvailabilityStatus
    delivery: DeliveryDisplay
    score: Optional[int] = None
    signals: List[str] = field(default_factory=list)

    @property
    def is_open_now(self) -> bool:
        return self.availability.is_open

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dictionary for the presentation layer."""
        result: Dict[str, Any] = {
            "id": self.merchant.id,
            "name": self.merchant.name,
            "rating": self.merchant.rating,
            "is_new": self.merchant.is_new,
            "is_open_now": self.is_open_now,
            "availability_reason": self.availability.reason.value,
            "delivery": self.delivery.to_dict(),
        }
        if self.availability.closes_at:
            result["closes_at"] = self.availability.closes_at
        if self.score is not None:
            result["score"] = self.score
            result["signals"] = list(self.signals)
        return result


@dataclass
class FeedResult:
    """Ordered feed plus the signal the presentation layer needs for empty states."""
    results: List[RankedResult]
    is_search: bool
    total_candidates: int = 0
    visible_count: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.results

    @property
    def empty_reason(self) -> Optional[EmptyReason]:
        if self.results:
            return None
        if self.is_search:
            return EmptyReason.NO_SEARCH_MATCHES
        return EmptyReason.NO_MERCHANTS_IN_CATEGORY

    @property
    def names(self) -> List[str]:
        return [r.merchant.name for r in self.results]

    def to_dict(self) -> Dict[str, Any]:
        reason = self.empty_reason
        return {
            "results": [r.to_dict() for r in self.results],
            "is_search": self.is_search,
            "is_empty": self.is_empty,
            "empty_reason": reason.value if reason else None,
            "total_candidates": self.total_candidates,
            "visible_count": self.visible_count,
        }
