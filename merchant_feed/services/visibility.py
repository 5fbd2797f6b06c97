"""Subscription-based visibility gate.

A merchant is hidden when:
    - its subscription is suspended (always), or
    - it is not on trial and its due date passed more than the grace
      period ago (whole days, rounded up)
"""
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from merchant_feed.config import get_settings
from merchant_feed.models.merchant import MerchantRecord, SubscriptionStatus

ONE_DAY = timedelta(days=1)


def _aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def days_past_due(record: MerchantRecord, now: datetime) -> Optional[int]:
    """Whole days since the due date, rounded up; None without a due date.

    Negative or zero while the due date has not passed yet.
    """
    if record.next_due_date is None:
        return None
    elapsed = _aware(now) - _aware(record.next_due_date)
    return math.ceil(elapsed / ONE_DAY)


def is_visible(record: MerchantRecord, now: datetime, *, grace_days: Optional[int] = None) -> bool:
    """Whether ``record`` may appear in the consumer feed at ``now``.

    Args:
        record: Merchant to check
        now: Current instant
        grace_days: Days past due still shown (defaults to settings.grace_period_days)
    """
    if record.subscription_status == SubscriptionStatus.SUSPENDED:
        return False

    if record.subscription_status == SubscriptionStatus.TRIAL:
        return True

    diff_days = days_past_due(record, now)
    if diff_days is None:
        return True

    if grace_days is None:
        grace_days = get_settings().grace_period_days
    return diff_days <= grace_days
