"""Data models for merchant records, consumer context and feed output."""
from merchant_feed.models.merchant import (
    DayKey,
    DaySchedule,
    DeliveryConfig,
    FixedDelivery,
    MerchantRecord,
    NeighborhoodDelivery,
    RatingBreakdown,
    SubscriptionStatus,
    WeeklySchedule,
    coerce_due_date,
)
from merchant_feed.models.context import ALL_CATEGORIES, ConsumerContext, SortCriteria
from merchant_feed.models.feed import (
    AvailabilityReason,
    AvailabilityStatus,
    DeliveryDisplay,
    DeliveryKind,
    EmptyReason,
    FeedResult,
    RankedResult,
)

__all__ = [
    "DayKey",
    "DaySchedule",
    "DeliveryConfig",
    "FixedDelivery",
    "MerchantRecord",
    "NeighborhoodDelivery",
    "RatingBreakdown",
    "SubscriptionStatus",
    "WeeklySchedule",
    "coerce_due_date",
    "ALL_CATEGORIES",
    "ConsumerContext",
    "SortCriteria",
    "AvailabilityReason",
    "AvailabilityStatus",
    "DeliveryDisplay",
    "DeliveryKind",
    "EmptyReason",
    "FeedResult",
    "RankedResult",
]
