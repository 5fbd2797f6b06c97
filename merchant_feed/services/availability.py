"""Open-now evaluation against the manual switch and the weekly schedule.

Decision order:
1. Manual switch off (or never set, when absent flags count as closed) → closed
2. No schedule → open
3. Today's window, crossing midnight when close < open → open if inside
4. Yesterday's window still running past midnight (carry-over) → open
5. Otherwise closed

Malformed schedule times close only the affected day; they are logged,
never raised to the caller.
"""
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from merchant_feed.config import get_settings
from merchant_feed.errors import ScheduleFormatError
from merchant_feed.models.feed import AvailabilityReason, AvailabilityStatus
from merchant_feed.models.merchant import DayKey, DaySchedule, MerchantRecord
from merchant_feed.utils.logger import get_logger

logger = get_logger(__name__)

MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"(\d{1,2}):(\d{2})")


def parse_hhmm(value: str, *, closing: bool = False) -> int:
    """Parse ``HH:MM`` into minutes since midnight.

    With ``closing`` set, ``24:00`` is accepted as the end of the day (1440).

    Raises:
        ScheduleFormatError: If the value is not a valid 24h time
    """
    match = _HHMM.fullmatch((value or "").strip())
    if not match:
        raise ScheduleFormatError(f"Invalid schedule time: {value!r}", details={"value": value})
    hours, minutes = int(match.group(1)), int(match.group(2))
    if closing and hours == 24 and minutes == 0:
        return MINUTES_PER_DAY
    if hours > 23 or minutes > 59:
        raise ScheduleFormatError(f"Schedule time out of range: {value!r}", details={"value": value})
    return hours * 60 + minutes


@dataclass(frozen=True)
class OpeningWindow:
    """One day's window in minutes; ``close`` reaches 1440 or more when it runs past midnight."""
    open: int
    close: int

    @property
    def crosses_midnight(self) -> bool:
        return self.close >= MINUTES_PER_DAY

    def contains(self, minutes: int) -> bool:
        return self.open <= minutes <= self.close

    def spills_into_next_day(self, minutes: int) -> bool:
        """True if ``minutes`` (on the following day) is still inside this window."""
        return self.crosses_midnight and minutes + MINUTES_PER_DAY <= self.close

    @classmethod
    def from_entry(cls, entry: DaySchedule) -> "OpeningWindow":
        open_minutes = parse_hhmm(entry.open)
        close_minutes = parse_hhmm(entry.close, closing=True)
        if close_minutes < open_minutes:
            close_minutes += MINUTES_PER_DAY
        return cls(open=open_minutes, close=close_minutes)


def _load_window(record: MerchantRecord, day: DayKey) -> Optional[OpeningWindow]:
    """Window for an open day, or None if the entry cannot be parsed."""
    entry = record.schedule[day]
    try:
        return OpeningWindow.from_entry(entry)
    except ScheduleFormatError as e:
        logger.warning(
            "schedule_entry_malformed",
            merchant_id=record.id,
            day_key=day.value,
            open=entry.open,
            close=entry.close,
            error=e.message,
        )
        return None


def _is_open_day(record: MerchantRecord, day: DayKey) -> bool:
    entry = record.schedule.get(day)
    return entry is not None and entry.is_open


def availability_status(
    record: MerchantRecord,
    now: datetime,
    *,
    absent_flag_open: Optional[bool] = None,
    carry_over: Optional[bool] = None,
) -> AvailabilityStatus:
    """Decide whether ``record`` is open at ``now``.

    Args:
        record: Merchant to evaluate
        now: Current instant; its own wall-clock fields are used
        absent_flag_open: Treat a never-set manual switch as open
            (defaults to settings.absent_open_flag_means_open)
        carry_over: Also check yesterday's window crossing midnight
            (defaults to settings.overnight_carry_over)

    Returns:
        AvailabilityStatus with the deciding reason
    """
    if absent_flag_open is None or carry_over is None:
        settings = get_settings()
        if absent_flag_open is None:
            absent_flag_open = settings.absent_open_flag_means_open
        if carry_over is None:
            carry_over = settings.overnight_carry_over

    if record.is_open is False:
        return AvailabilityStatus(is_open=False, reason=AvailabilityReason.CLOSED_MANUALLY)
    if record.is_open is None and not absent_flag_open:
        return AvailabilityStatus(is_open=False, reason=AvailabilityReason.CLOSED_MANUALLY)

    if record.schedule is None:
        return AvailabilityStatus(is_open=True, reason=AvailabilityReason.OPEN_NO_SCHEDULE)

    minutes = now.hour * 60 + now.minute
    today = DayKey.for_datetime(now)
    reason = AvailabilityReason.CLOSED_TODAY

    if _is_open_day(record, today):
        window = _load_window(record, today)
        if window is None:
            reason = AvailabilityReason.MALFORMED_SCHEDULE
        elif window.contains(minutes):
            return AvailabilityStatus(
                is_open=True,
                reason=AvailabilityReason.OPEN,
                closes_at=record.schedule[today].close,
            )
        else:
            reason = AvailabilityReason.OUTSIDE_HOURS

    yesterday = today.previous()
    if carry_over and _is_open_day(record, yesterday):
        window = _load_window(record, yesterday)
        if window is not None and window.spills_into_next_day(minutes):
            return AvailabilityStatus(
                is_open=True,
                reason=AvailabilityReason.OPEN,
                closes_at=record.schedule[yesterday].close,
            )

    return AvailabilityStatus(is_open=False, reason=reason)


def is_open_now(
    record: MerchantRecord,
    now: datetime,
    *,
    absent_flag_open: Optional[bool] = None,
    carry_over: Optional[bool] = None,
) -> bool:
    """Boolean shortcut for :func:`availability_status`."""
    return availability_status(
        record,
        now,
        absent_flag_open=absent_flag_open,
        carry_over=carry_over,
    ).is_open
