"""Delivery fee resolution for one consumer neighborhood.

Resolution order:
    1. No delivery config → legacy single fee (0 when absent)
    2. FixedDelivery → the fixed price
    3. NeighborhoodDelivery →
         unknown consumer neighborhood → "select location" placeholder
         priced neighborhood → that price
         unpriced neighborhood → "on request" label
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from merchant_feed.config import FeedSettings, get_settings
from merchant_feed.models.feed import DeliveryDisplay, DeliveryKind
from merchant_feed.models.merchant import FixedDelivery, MerchantRecord, NeighborhoodDelivery
from merchant_feed.services.matching.normalizer import normalize
from merchant_feed.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeliveryLabels:
    """Texts used for delivery displays."""
    currency_symbol: str = "R$"
    free: str = "Grátis"
    select_location: str = "Ver Taxa"
    on_request: str = "A Consultar"

    @classmethod
    def from_settings(cls, settings: Optional[FeedSettings] = None) -> "DeliveryLabels":
        settings = settings or get_settings()
        return cls(
            currency_symbol=settings.currency_symbol,
            free=settings.free_label,
            select_location=settings.select_location_label,
            on_request=settings.on_request_label,
        )

    def format_price(self, price: Decimal) -> str:
        return f"{self.currency_symbol} {price:.2f}"


def priced_display(price: Decimal, labels: DeliveryLabels) -> DeliveryDisplay:
    """Display for a concrete fee: the free label at zero, the formatted price otherwise."""
    if price == 0:
        return DeliveryDisplay(text=labels.free, is_free=True, kind=DeliveryKind.FREE, price=price)
    return DeliveryDisplay(
        text=labels.format_price(price),
        is_free=False,
        kind=DeliveryKind.PRICED,
        price=price,
    )


def lookup_neighborhood_price(config: NeighborhoodDelivery, neighborhood: str) -> Optional[Decimal]:
    """Price for ``neighborhood``: exact key first, then a case/accent-insensitive match."""
    price = config.prices.get(neighborhood)
    if price is not None:
        return price
    wanted = normalize(neighborhood)
    for name, candidate in config.prices.items():
        if normalize(name) == wanted:
            return candidate
    return None


def resolve_delivery(
    record: MerchantRecord,
    neighborhood: Optional[str],
    labels: Optional[DeliveryLabels] = None,
) -> DeliveryDisplay:
    """Delivery display for ``record`` as seen from ``neighborhood``.

    Args:
        record: Merchant whose pricing applies
        neighborhood: Consumer neighborhood, None while no address is chosen
        labels: Display texts (defaults to settings)

    Returns:
        DeliveryDisplay; ``price`` is None unless a concrete fee applies
    """
    labels = labels or DeliveryLabels.from_settings()
    config = record.delivery_config

    if config is None:
        return priced_display(record.delivery_fee, labels)

    if isinstance(config, FixedDelivery):
        return priced_display(config.price, labels)

    if not neighborhood:
        return DeliveryDisplay(
            text=labels.select_location,
            is_free=False,
            kind=DeliveryKind.SELECT_LOCATION,
        )

    price = lookup_neighborhood_price(config, neighborhood)
    if price is None:
        logger.debug(
            "neighborhood_not_priced",
            merchant_id=record.id,
            neighborhood=neighborhood,
        )
        return DeliveryDisplay(text=labels.on_request, is_free=False, kind=DeliveryKind.ON_REQUEST)
    return priced_display(price, labels)
