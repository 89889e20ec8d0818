"""
Order payload builder.

Maps a cart and a contact preference to the order-creation request sent to the
payment processor. Pure: no I/O, no logging, fresh objects on every call.

Rules:
- shipping block present only when the preference is not NO_CONTACT_INFO;
  it carries the buyer contact and the shipping-option catalog with exactly
  one option selected.
- the experience context always echoes the contact preference.
- item-total breakdown always equals the order amount.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from schemas import (
    AmountBreakdown,
    AmountWithBreakdown,
    ContactPreference,
    ExperienceContext,
    Item,
    Money,
    OrderRequest,
    PaymentSource,
    PayPalWallet,
    PhoneNumber,
    PurchaseUnit,
    ShippingDetails,
    ShippingName,
)
from services.checkout.constants import (
    DEFAULT_CONTACT_FULL_NAME,
    DEFAULT_CONTACT_PHONE_COUNTRY_CODE,
    DEFAULT_CONTACT_PHONE_NATIONAL_NUMBER,
    INTENT_CAPTURE,
    USER_ACTION_PAY_NOW,
)
from services.checkout.pricing import (
    CENTS,
    PricingService,
    StaticCatalogPricing,
    format_amount,
    items_total,
    to_decimal,
)
from services.checkout.shipping_options import (
    build_shipping_options,
    load_shipping_options,
)

DEFAULT_CURRENCY = "GBP"


class PayloadValidationError(ValueError):
    """Raised when the inputs cannot produce a valid order request."""


@dataclass(frozen=True)
class ShippingContact:
    full_name: str = DEFAULT_CONTACT_FULL_NAME
    phone_country_code: str = DEFAULT_CONTACT_PHONE_COUNTRY_CODE
    phone_national_number: str = DEFAULT_CONTACT_PHONE_NATIONAL_NUMBER


def parse_contact_preference(value: Any) -> ContactPreference:
    if isinstance(value, ContactPreference):
        return value
    try:
        return ContactPreference(value)
    except ValueError as exc:
        allowed = ", ".join(pref.value for pref in ContactPreference)
        raise PayloadValidationError(
            f"Unrecognized contact preference {value!r}; expected one of {allowed}"
        ) from exc


def includes_shipping(preference: ContactPreference) -> bool:
    return preference is not ContactPreference.NO_CONTACT_INFO


def _normalize_item(item: Item, currency: str) -> Item:
    if item.unit_amount.currency_code != currency:
        raise PayloadValidationError(f"All line items must be priced in {currency}")
    try:
        amount = to_decimal(item.unit_amount.value)
        quantity = int(item.quantity)
    except ValueError as exc:
        raise PayloadValidationError(f"Invalid line item {item.name!r}: {exc}") from exc
    if amount != amount.quantize(CENTS):
        raise PayloadValidationError(
            f"Line item {item.name!r} is priced below cent precision: {item.unit_amount.value}"
        )
    if quantity < 1:
        raise PayloadValidationError(f"Line item {item.name!r} needs a positive quantity")
    return item.model_copy(
        update={
            "unit_amount": Money(currency_code=currency, value=format_amount(amount)),
            "quantity": str(quantity),
        }
    )


def _build_shipping(
    contact: ShippingContact,
    option_entries: List[Dict[str, Any]],
    currency: str,
) -> ShippingDetails:
    options = build_shipping_options(option_entries, currency)
    if sum(1 for option in options if option.selected) != 1:
        raise PayloadValidationError("Exactly one shipping option must be selected")
    return ShippingDetails(
        phone_number=PhoneNumber(
            country_code=contact.phone_country_code,
            national_number=contact.phone_national_number,
        ),
        name=ShippingName(full_name=contact.full_name),
        options=options,
    )


def build_order_request(
    cart: Any,
    contact_preference: Any,
    *,
    currency: str = DEFAULT_CURRENCY,
    pricing: Optional[PricingService] = None,
    shipping_options: Optional[List[Dict[str, Any]]] = None,
    contact: Optional[ShippingContact] = None,
) -> OrderRequest:
    preference = parse_contact_preference(contact_preference)
    pricing = pricing or StaticCatalogPricing()

    items = pricing.price_cart(cart, currency)
    if not items:
        raise PayloadValidationError("Cart produced no line items")
    items = [_normalize_item(item, currency) for item in items]
    total = format_amount(items_total(items))

    shipping = None
    if includes_shipping(preference):
        entries = shipping_options if shipping_options is not None else load_shipping_options()
        shipping = _build_shipping(contact or ShippingContact(), entries, currency)

    unit = PurchaseUnit(
        amount=AmountWithBreakdown(
            currency_code=currency,
            value=total,
            breakdown=AmountBreakdown(item_total=Money(currency_code=currency, value=total)),
        ),
        items=items,
        shipping=shipping,
    )
    return OrderRequest(
        intent=INTENT_CAPTURE,
        purchase_units=[unit],
        payment_source=PaymentSource(
            paypal=PayPalWallet(
                experience_context=ExperienceContext(
                    user_action=USER_ACTION_PAY_NOW,
                    contact_preference=preference,
                )
            )
        ),
    )
