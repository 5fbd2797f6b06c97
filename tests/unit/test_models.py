"""Unit tests for record, context and result models."""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from merchant_feed.models import (
    AvailabilityReason,
    AvailabilityStatus,
    ConsumerContext,
    DayKey,
    DeliveryDisplay,
    DeliveryKind,
    EmptyReason,
    FeedResult,
    FixedDelivery,
    MerchantRecord,
    NeighborhoodDelivery,
    RankedResult,
    SortCriteria,
    SubscriptionStatus,
)
from merchant_feed.models.merchant import coerce_due_date


class TestDayKey:
    """Tests for DayKey lookups."""

    @pytest.mark.parametrize(
        "moment,expected",
        [
            (datetime(2023, 12, 31), DayKey.SUN),
            (datetime(2024, 1, 1), DayKey.MON),
            (datetime(2024, 1, 3), DayKey.WED),
            (datetime(2024, 1, 6), DayKey.SAT),
        ],
    )
    def test_for_datetime(self, moment, expected):
        assert DayKey.for_datetime(moment) == expected

    @pytest.mark.parametrize("raw", ["Sáb", "sáb", "SAB", "sat", "SAT"])
    def test_parse_saturday_spellings(self, raw):
        assert DayKey.parse(raw) == DayKey.SAT

    def test_parse_unknown(self):
        assert DayKey.parse("Funday") is None
        assert DayKey.parse(3) is None

    def test_previous_wraps(self):
        assert DayKey.MON.previous() == DayKey.SUN
        assert DayKey.SUN.previous() == DayKey.SAT


class TestMerchantRecord:
    """Tests for MerchantRecord validation."""

    def test_document_keys(self):
        record = MerchantRecord.model_validate({
            "id": 42,
            "name": "Pizzaria Dona Rosa",
            "tags": ["pizzaria", None],
            "categoryId": "pizza",
            "rating": 4.7,
            "ratingBreakdown": {"product": 4.9, "delivery": 4.1, "service": 4.5, "count": 12},
            "isOpen": True,
            "schedule": {"Seg": {"isOpen": True, "open": "18:00", "close": "23:00"}},
            "deliveryConfig": {"type": "neighborhood", "neighborhoodPrices": {"Centro": 5, "Meireles": None}},
            "subscriptionStatus": "Trial",
            "nextDueDate": {"seconds": 1704067200, "nanoseconds": 0},
        })

        assert record.id == "42"
        assert record.tags == ["pizzaria"]
        assert record.category_id == "pizza"
        assert record.rating_breakdown.delivery == 4.1
        assert record.schedule[DayKey.MON].open == "18:00"
        assert isinstance(record.delivery_config, NeighborhoodDelivery)
        assert record.delivery_config.prices == {"Centro": Decimal("5")}
        assert record.subscription_status == SubscriptionStatus.TRIAL
        assert record.next_due_date == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_minimal_document_defaults(self):
        record = MerchantRecord.model_validate({"id": "m1", "name": "Loja"})

        assert record.tags == []
        assert record.is_open is None
        assert record.schedule is None
        assert record.delivery_config is None
        assert record.delivery_fee == Decimal("0")
        assert record.subscription_status == SubscriptionStatus.ACTIVE
        assert record.next_due_date is None
        assert record.is_new

    def test_legacy_delivery_price_alias(self):
        record = MerchantRecord.model_validate({"id": "m1", "name": "Loja", "deliveryPrice": 3.5})

        assert record.delivery_fee == Decimal("3.5")

    def test_null_status_is_active(self):
        record = MerchantRecord.model_validate({"id": "m1", "name": "Loja", "subscriptionStatus": None})

        assert record.subscription_status == SubscriptionStatus.ACTIVE

    def test_fixed_delivery_variant(self):
        record = MerchantRecord.model_validate({
            "id": "m1",
            "name": "Loja",
            "deliveryConfig": {"type": "fixed", "fixedPrice": None},
        })

        assert isinstance(record.delivery_config, FixedDelivery)
        assert record.delivery_config.price == Decimal("0")

    def test_schedule_english_keys_and_unknown_entries(self):
        record = MerchantRecord.model_validate({
            "id": "m1",
            "name": "Loja",
            "schedule": {
                "mon": {"isOpen": True, "open": "08:00", "close": "12:00"},
                "Holiday": {"isOpen": True, "open": "08:00", "close": "12:00"},
                "Ter": "closed",
                "Qua": {"isOpen": None},
            },
        })

        assert set(record.schedule) == {DayKey.MON, DayKey.WED}
        assert record.schedule[DayKey.WED].is_open is False
        assert record.schedule[DayKey.WED].open == ""

    def test_rating_zero_is_new(self, make_record):
        assert make_record(rating=0).is_new
        assert not make_record(rating=3.2).is_new

    @pytest.mark.parametrize(
        "field,value",
        [
            ("rating", 5.5),
            ("deliveryFee", -1),
            ("subscriptionStatus", "banned"),
            ("deliveryConfig", {"type": "zone", "price": 3}),
        ],
    )
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            MerchantRecord.model_validate({"id": "m1", "name": "Loja", field: value})

    def test_name_is_required(self):
        with pytest.raises(ValidationError):
            MerchantRecord.model_validate({"id": "m1"})

    def test_records_are_immutable(self, make_record):
        record = make_record(name="Loja")

        with pytest.raises(ValidationError):
            record.name = "Outra"


class TestCoerceDueDate:
    """Tests for coerce_due_date()."""

    def test_naive_datetime_is_utc(self):
        assert coerce_due_date(datetime(2024, 1, 1, 10)) == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)

    def test_date_is_midnight_utc(self):
        assert coerce_due_date(date(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_iso_string(self):
        assert coerce_due_date("2024-01-01T03:00:00-03:00") == datetime(2024, 1, 1, 6, tzinfo=timezone.utc)

    def test_unix_seconds(self):
        assert coerce_due_date(1704067200) == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_private_timestamp_keys(self):
        value = {"_seconds": 1704067200, "_nanoseconds": 500_000_000}

        assert coerce_due_date(value) == datetime(2024, 1, 1, 0, 0, 0, 500_000, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "not a date", {"foo": 1}, [2024, 1, 1]])
    def test_unusable_values(self, value):
        assert coerce_due_date(value) is None


class TestConsumerContext:
    """Tests for ConsumerContext normalization."""

    def test_defaults(self):
        context = ConsumerContext()

        assert context.query == ""
        assert context.browses_all_categories
        assert context.neighborhood is None
        assert context.sort_by == SortCriteria.GENERAL

    def test_blank_values(self):
        context = ConsumerContext(query=None, categoryId="  ", neighborhood=" ")

        assert context.query == ""
        assert context.category_id == "all"
        assert context.neighborhood is None

    def test_aliases(self):
        context = ConsumerContext.model_validate({"categoryId": "lanches", "sortBy": "delivery"})

        assert context.category_id == "lanches"
        assert context.sort_by == SortCriteria.DELIVERY

    def test_unknown_sort_rejected(self):
        with pytest.raises(ValidationError):
            ConsumerContext(sort_by="price")


class TestFeedResult:
    """Tests for result dataclasses."""

    def _ranked(self, record, score=None):
        return RankedResult(
            merchant=record,
            availability=AvailabilityStatus(is_open=True, reason=AvailabilityReason.OPEN, closes_at="22:00"),
            delivery=DeliveryDisplay(text="Grátis", is_free=True, kind=DeliveryKind.FREE, price=Decimal("0")),
            score=score,
            signals=["NAME_EXACT"] if score else [],
        )

    def test_empty_search(self):
        feed = FeedResult(results=[], is_search=True)

        assert feed.is_empty
        assert feed.empty_reason == EmptyReason.NO_SEARCH_MATCHES

    def test_empty_browse(self):
        feed = FeedResult(results=[], is_search=False)

        assert feed.empty_reason == EmptyReason.NO_MERCHANTS_IN_CATEGORY

    def test_non_empty_has_no_reason(self, make_record):
        feed = FeedResult(results=[self._ranked(make_record(name="Loja"))], is_search=False)

        assert feed.empty_reason is None
        assert feed.names == ["Loja"]

    def test_ranked_to_dict(self, make_record):
        record = make_record(id="m9", name="Pizza", rating=4.0)

        data = self._ranked(record, score=120).to_dict()

        assert data == {
            "id": "m9",
            "name": "Pizza",
            "rating": 4.0,
            "is_new": False,
            "is_open_now": True,
            "availability_reason": "open",
            "delivery": {"text": "Grátis", "is_free": True, "kind": "free", "price": "0"},
            "closes_at": "22:00",
            "score": 120,
            "signals": ["NAME_EXACT"],
        }

    def test_browse_result_omits_score(self, make_record):
        data = self._ranked(make_record()).to_dict()

        assert "score" not in data
        assert "signals" not in data

    def test_feed_to_dict(self):
        data = FeedResult(results=[], is_search=True, total_candidates=3, visible_count=2).to_dict()

        assert data == {
            "results": [],
            "is_search": True,
            "is_empty": True,
            "empty_reason": "no_search_matches",
            "total_candidates": 3,
            "visible_count": 2,
        }
