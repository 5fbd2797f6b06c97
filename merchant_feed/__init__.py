"""Merchant discovery engine.

Ranks, filters and annotates merchant records for a consumer: search
relevance, open-now status, subscription visibility and delivery fees.
"""
from merchant_feed.models import ConsumerContext, FeedResult, MerchantRecord, RankedResult
from merchant_feed.services.feed import FeedAssembler, assemble_feed

__version__ = "0.1.0"

__all__ = [
    "ConsumerContext",
    "FeedResult",
    "MerchantRecord",
    "RankedResult",
    "FeedAssembler",
    "assemble_feed",
]
