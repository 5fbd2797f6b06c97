"""Pydantic models for merchant catalog records.

Records arrive from the document store with camelCase keys
(``isOpen``, ``deliveryConfig``, ``nextDueDate`` ...). Every field also
accepts its snake_case name so tests and internal callers can build
records directly.
"""
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from merchant_feed.utils.logger import get_logger

logger = get_logger(__name__)

_RECORD_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

NonNegativePrice = Annotated[Decimal, Field(ge=Decimal("0"))]

# Legacy fee keys, in fallback order
_FEE_KEYS = ("delivery_fee", "deliveryFee", "deliveryPrice")


class DayKey(str, Enum):
    """Schedule keys as stored by the merchant dashboard (pt-BR abbreviations)."""
    SUN = "Dom"
    MON = "Seg"
    TUE = "Ter"
    WED = "Qua"
    THU = "Qui"
    FRI = "Sex"
    SAT = "Sáb"

    @classmethod
    def for_datetime(cls, moment: datetime) -> "DayKey":
        """Day key for the weekday of ``moment`` in its own wall-clock zone."""
        return _BY_WEEKDAY[moment.weekday()]

    @classmethod
    def parse(cls, raw: Any) -> Optional["DayKey"]:
        """Resolve a stored key or an English abbreviation; None if unknown."""
        if isinstance(raw, DayKey):
            return raw
        if not isinstance(raw, str):
            return None
        return _ALIASES.get(raw.strip().lower())

    def previous(self) -> "DayKey":
        members = list(DayKey)
        return members[members.index(self) - 1]


# datetime.weekday(): Monday == 0
_BY_WEEKDAY = (
    DayKey.MON,
    DayKey.TUE,
    DayKey.WED,
    DayKey.THU,
    DayKey.FRI,
    DayKey.SAT,
    DayKey.SUN,
)

_ALIASES: Dict[str, DayKey] = {}
for _key in DayKey:
    _ALIASES[_key.value.lower()] = _key
    _ALIASES[_key.name.lower()] = _key
_ALIASES["sab"] = DayKey.SAT


class SubscriptionStatus(str, Enum):
    """Merchant subscription state.

    Visibility rules:
        - suspended: never visible
        - trial: always visible (due date ignored)
        - active / overdue: visible until the grace period after the due date ends
    """
    ACTIVE = "active"
    OVERDUE = "overdue"
    TRIAL = "trial"
    SUSPENDED = "suspended"


class DaySchedule(BaseModel):
    """Opening window for one weekday.

    ``open`` and ``close`` stay as raw strings; they are parsed when the
    schedule is evaluated so a malformed entry only closes its own day.
    """
    model_config = _RECORD_CONFIG

    is_open: bool = Field(default=False, alias="isOpen")
    open: str = ""
    close: str = ""

    @field_validator("is_open", mode="before")
    @classmethod
    def _none_is_closed(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator("open", "close", mode="before")
    @classmethod
    def _stringify_time(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)


WeeklySchedule = Dict[DayKey, DaySchedule]


class RatingBreakdown(BaseModel):
    """Per-dimension averages from consumer reviews."""
    model_config = _RECORD_CONFIG

    product: float = Field(default=0.0, ge=0.0, le=5.0)
    delivery: float = Field(default=0.0, ge=0.0, le=5.0)
    service: float = Field(default=0.0, ge=0.0, le=5.0)
    count: int = Field(default=0, ge=0)


class FixedDelivery(BaseModel):
    """One delivery price for the whole city."""
    model_config = _RECORD_CONFIG

    type: Literal["fixed"] = "fixed"
    price: NonNegativePrice = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("price", "fixedPrice", "fixed_price"),
    )

    @field_validator("price", mode="before")
    @classmethod
    def _missing_price_is_zero(cls, v: Any) -> Any:
        return Decimal("0") if v is None else v


class NeighborhoodDelivery(BaseModel):
    """Delivery price keyed by the consumer's neighborhood."""
    model_config = _RECORD_CONFIG

    type: Literal["neighborhood"] = "neighborhood"
    prices: Dict[str, NonNegativePrice] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("prices", "neighborhoodPrices", "neighborhood_prices"),
    )

    @field_validator("prices", mode="before")
    @classmethod
    def _drop_unpriced(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {k: p for k, p in v.items() if p is not None}
        return v


DeliveryConfig = Annotated[
    Union[FixedDelivery, NeighborhoodDelivery],
    Field(discriminator="type"),
]

_DATETIME = TypeAdapter(datetime)


def coerce_due_date(value: Any) -> Optional[datetime]:
    """Best-effort conversion of a stored due date into an aware datetime.

    Accepts datetimes, dates, ISO strings, unix timestamps and document
    store timestamp mappings (``{"seconds": ..., "nanoseconds": ...}``).
    Naive values are taken as UTC. Anything else yields None.
    """
    if value is None or value == "":
        return None

    parsed: Optional[datetime] = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
        if isinstance(seconds, (int, float)) and isinstance(nanos, (int, float)):
            try:
                parsed = datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                # NaN, infinity or outside the platform's time_t range
                parsed = None
    else:
        try:
            parsed = _DATETIME.validate_python(value)
        except ValidationError:
            parsed = None

    if parsed is None:
        logger.warning("due_date_unparseable", raw_value=repr(value)[:100])
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class MerchantRecord(BaseModel):
    """Snapshot of a merchant's catalog entry.

    Attributes:
        id: Store document id
        name: Display name
        description: Optional free-text description
        tags: Category ids and free tags
        category_id: Primary category id
        rating: Overall rating 0-5; None or 0 means "new"
        rating_breakdown: Product/delivery/service averages
        is_open: Manual open switch (True / False / None when never set)
        schedule: Weekly opening windows
        delivery_config: Fixed or per-neighborhood delivery pricing
        delivery_fee: Legacy single delivery price, used without delivery_config
        subscription_status: Billing state gating visibility
        next_due_date: Next subscription due date
    """
    model_config = _RECORD_CONFIG

    id: str
    name: str
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    rating_breakdown: Optional[RatingBreakdown] = Field(default=None, alias="ratingBreakdown")
    is_open: Optional[bool] = Field(default=None, alias="isOpen")
    schedule: Optional[WeeklySchedule] = None
    delivery_config: Optional[DeliveryConfig] = Field(default=None, alias="deliveryConfig")
    delivery_fee: NonNegativePrice = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("delivery_fee", "deliveryFee", "deliveryPrice"),
    )
    subscription_status: SubscriptionStatus = Field(
        default=SubscriptionStatus.ACTIVE, alias="subscriptionStatus"
    )
    next_due_date: Optional[datetime] = Field(default=None, alias="nextDueDate")

    @model_validator(mode="before")
    @classmethod
    def _first_non_null_fee(cls, data: Any) -> Any:
        """Use the first legacy fee key holding a value, not merely the first present."""
        if not isinstance(data, dict) or not any(k in data for k in _FEE_KEYS):
            return data
        fee = next((data[k] for k in _FEE_KEYS if data.get(k) is not None), None)
        data = {k: v for k, v in data.items() if k not in _FEE_KEYS}
        data["delivery_fee"] = fee
        return data

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, (list, tuple, set)):
            return [str(t) for t in v if t is not None]
        return v

    @field_validator("schedule", mode="before")
    @classmethod
    def _resolve_day_keys(cls, v: Any) -> Any:
        """Map stored day keys onto DayKey, dropping unknown or non-object entries."""
        if v is None or not isinstance(v, dict):
            return v
        resolved: Dict[DayKey, Any] = {}
        for raw_key, entry in v.items():
            key = DayKey.parse(raw_key)
            if key is None:
                logger.warning("schedule_day_key_unknown", day_key=str(raw_key))
                continue
            if not isinstance(entry, (dict, DaySchedule)):
                logger.warning(
                    "schedule_entry_malformed",
                    day_key=key.value,
                    reason="entry_not_an_object",
                )
                continue
            resolved[key] = entry
        return resolved

    @field_validator("delivery_fee", mode="before")
    @classmethod
    def _missing_fee_is_zero(cls, v: Any) -> Any:
        return Decimal("0") if v is None else v

    @field_validator("subscription_status", mode="before")
    @classmethod
    def _default_status(cls, v: Any) -> Any:
        if v is None or v == "":
            return SubscriptionStatus.ACTIVE
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("next_due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, v: Any) -> Optional[datetime]:
        return coerce_due_date(v)

    @property
    def is_new(self) -> bool:
        """True when the merchant has no rating yet."""
        return not self.rating
