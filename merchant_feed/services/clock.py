"""Time source collaborators.

Availability and visibility depend on wall-clock time, so the feed
takes a clock instead of reading the current time ad hoc. Schedules are
always read in the merchants' zone (``settings.timezone``), whatever
zone an instant arrives in.
"""
from datetime import datetime
from typing import Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from merchant_feed.config import get_settings
from merchant_feed.errors import ConfigurationError


def resolve_zone(tz_name: Optional[str] = None) -> ZoneInfo:
    """ZoneInfo for ``tz_name`` (defaults to settings.timezone).

    Raises:
        ConfigurationError: If the zone is unknown
    """
    if tz_name is None:
        tz_name = get_settings().timezone
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(
            f"Unknown timezone: {tz_name}", details={"timezone": tz_name}
        ) from exc


def to_local(moment: datetime, zone: ZoneInfo) -> datetime:
    """Express ``moment`` in ``zone``; naive values are taken as already local."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=zone)
    return moment.astimezone(zone)


class Clock(Protocol):
    """Anything that can tell the current instant."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock time in the merchants' local zone."""

    def __init__(self, tz_name: Optional[str] = None):
        self._zone = resolve_zone(tz_name)

    @property
    def zone(self) -> ZoneInfo:
        return self._zone

    def now(self) -> datetime:
        return datetime.now(self._zone)


class FixedClock:
    """Clock frozen at one instant (tests, replays).

    A naive instant is read as wall-clock time in ``tz_name``
    (defaults to settings.timezone), the same way the CLI reads ``--at``.
    """

    def __init__(self, instant: datetime, tz_name: Optional[str] = None):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=resolve_zone(tz_name))
        self._instant = instant

    def now(self) -> datetime:
        return self._instant
