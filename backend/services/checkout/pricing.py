from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, List

from schemas import Item, Money

from .constants import STATIC_CATALOG_ITEM

CENTS = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


def format_amount(value: Decimal) -> str:
    return str(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def items_total(items: List[Item]) -> Decimal:
    return sum(
        (to_decimal(item.unit_amount.value) * int(item.quantity) for item in items),
        Decimal("0"),
    )


class PricingService(ABC):
    """Turns a cart into priced line items."""

    @abstractmethod
    def price_cart(self, cart: Any, currency: str) -> List[Item]:
        ...


class StaticCatalogPricing(PricingService):
    """Always sells the one catalog product, whatever the cart holds."""

    def __init__(self, catalog_item: dict | None = None) -> None:
        self.catalog_item = catalog_item or STATIC_CATALOG_ITEM

    def price_cart(self, cart: Any, currency: str) -> List[Item]:
        entry = self.catalog_item
        return [
            Item(
                name=entry["name"],
                unit_amount=Money(
                    currency_code=currency,
                    value=format_amount(to_decimal(entry["unit_amount"])),
                ),
                quantity=str(entry["quantity"]),
                description=entry.get("description"),
                sku=entry.get("sku"),
            )
        ]
