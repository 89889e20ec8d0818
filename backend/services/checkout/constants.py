# Built-in shipping-option catalog; SHIPPING_OPTIONS_FILE replaces it.
DEFAULT_SHIPPING_OPTIONS = [
    {
        "id": "SHIP1",
        "type": "SHIPPING",
        "label": "Free Shipping",
        "selected": False,
        "amount": "0.00",
    },
    {
        "id": "SHIP2",
        "type": "SHIPPING",
        "label": "2-Day Shipping",
        "selected": False,
        "amount": "4.00",
    },
    {
        "id": "PICKUP0",
        "type": "PICKUP",
        "label": "Collect from Glasgow Store",
        "selected": True,
        "amount": "0.00",
    },
    {
        "id": "PICKUP1",
        "type": "PICKUP",
        "label": "Collect from London Store",
        "selected": False,
        "amount": "0.00",
    },
]

# Stand-ins until buyer profiles exist.
DEFAULT_CONTACT_PHONE_COUNTRY_CODE = "44"
DEFAULT_CONTACT_PHONE_NATIONAL_NUMBER = "4081111111"
DEFAULT_CONTACT_FULL_NAME = "Hans Muller"

STATIC_CATALOG_ITEM = {
    "name": "T-Shirt",
    "unit_amount": "100.00",
    "quantity": 1,
    "description": "Super Fresh Shirt",
    "sku": "sku01",
}

USER_ACTION_PAY_NOW = "PAY_NOW"
INTENT_CAPTURE = "CAPTURE"
