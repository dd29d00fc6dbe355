from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Tuple

D = Decimal


def _clean(s: object) -> str:
    # messages are shown in cart/checkout: keep them on one line
    return str(s).replace("\r", "").replace("\n", " ").replace("\t", " ").strip()


def whole_units(savings: D) -> D:
    return D(str(savings)).quantize(D("1"), rounding=ROUND_HALF_UP)


def format_discount_message(
    quantity: int, category: str, savings: D, currency_symbol: str = "R"
) -> str:
    """
    Per-line message, e.g. "6x 500g Bundle Deal - Save R24".
    Savings are shown in whole currency units.
    """
    return (
        f"{quantity}x {_clean(category)} Bundle Deal - "
        f"Save {currency_symbol}{whole_units(savings)}"
    )


def format_order_message(parts: Iterable[Tuple[int, str]]) -> str:
    """
    Order-level message, e.g. "Bundle Deal: 6x 500g, 12x 1kg".
    """
    items = [f"{qty}x {_clean(category)}" for qty, category in parts]
    return "Bundle Deal: " + ", ".join(items)
