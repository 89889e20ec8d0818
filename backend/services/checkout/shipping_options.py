import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from schemas import Money, ShippingOption, ShippingOptionType

from .constants import DEFAULT_SHIPPING_OPTIONS
from .pricing import format_amount, to_decimal


def _parse_selected(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {"1", "true", "yes", "on"}:
            return True
        if text in {"", "0", "false", "no", "off"}:
            return False
    raise ValueError(f"Shipping option \"selected\" must be a boolean, got {value!r}")


def validate_shipping_options(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not isinstance(entries, list) or not entries:
        raise ValueError("Shipping option catalog must be a non-empty list")
    seen = set()
    normalized: List[Dict[str, Any]] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"Shipping option must be an object, got {entry!r}")
        option_id = str(entry.get("id") or "").strip()
        label = str(entry.get("label") or "").strip()
        if not option_id or not label:
            raise ValueError(f"Shipping option needs an id and a label: {entry!r}")
        if option_id in seen:
            raise ValueError(f"Duplicate shipping option id: {option_id}")
        seen.add(option_id)
        normalized.append(
            {
                "id": option_id,
                "type": ShippingOptionType(str(entry.get("type", "")).upper()).value,
                "label": label,
                "selected": _parse_selected(entry.get("selected", False)),
                "amount": format_amount(to_decimal(entry.get("amount", "0.00"))),
            }
        )
    selected = sum(1 for entry in normalized if entry["selected"])
    if selected != 1:
        raise ValueError(
            f"Exactly one shipping option must be selected, found {selected}"
        )
    return normalized


def load_shipping_options(path: Optional[str] = None) -> List[Dict[str, Any]]:
    if not path:
        return validate_shipping_options(DEFAULT_SHIPPING_OPTIONS)
    source = Path(path)
    with source.open("r", encoding="utf-8") as fh:
        entries = json.load(fh)
    return validate_shipping_options(entries)


def build_shipping_options(entries: List[Dict[str, Any]], currency: str) -> List[ShippingOption]:
    return [
        ShippingOption(
            id=entry["id"],
            label=entry["label"],
            type=ShippingOptionType(entry["type"]),
            selected=entry["selected"],
            amount=Money(currency_code=currency, value=entry["amount"]),
        )
        for entry in entries
    ]
