from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class ContactPreference(str, Enum):
    NO_CONTACT_INFO = "NO_CONTACT_INFO"
    RETAIN_CONTACT_INFO = "RETAIN_CONTACT_INFO"
    UPDATE_CONTACT_INFO = "UPDATE_CONTACT_INFO"


class ShippingOptionType(str, Enum):
    SHIPPING = "SHIPPING"
    PICKUP = "PICKUP"


class CreateOrderRequest(BaseModel):
    cart: Any = Field(default=None, description="Opaque cart reference from the storefront")
    pref: ContactPreference = Field(..., description="Contact preference for the checkout")


class ErrorResponse(BaseModel):
    error: str
    code: Optional[str] = None


# Processor payload, serialized with the Orders v2 wire names.


class Money(BaseModel):
    currency_code: str
    value: str


class AmountBreakdown(BaseModel):
    item_total: Money


class AmountWithBreakdown(BaseModel):
    currency_code: str
    value: str
    breakdown: AmountBreakdown


class Item(BaseModel):
    name: str
    unit_amount: Money
    quantity: str
    description: Optional[str] = None
    sku: Optional[str] = None


class PhoneNumber(BaseModel):
    country_code: str
    national_number: str


class ShippingName(BaseModel):
    full_name: str


class ShippingOption(BaseModel):
    id: str
    label: str
    type: ShippingOptionType
    selected: bool = False
    amount: Money


class ShippingDetails(BaseModel):
    phone_number: PhoneNumber
    name: ShippingName
    options: List[ShippingOption]


class PurchaseUnit(BaseModel):
    amount: AmountWithBreakdown
    items: List[Item]
    shipping: Optional[ShippingDetails] = None


class ExperienceContext(BaseModel):
    user_action: str = "PAY_NOW"
    contact_preference: ContactPreference


class PayPalWallet(BaseModel):
    experience_context: ExperienceContext


class PaymentSource(BaseModel):
    paypal: PayPalWallet


class OrderRequest(BaseModel):
    intent: str = "CAPTURE"
    purchase_units: List[PurchaseUnit]
    payment_source: PaymentSource

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
