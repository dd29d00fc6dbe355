from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from .context import money
from .pricing_table import PricingTable

D = Decimal


@dataclass(frozen=True)
class TierDiscount:
    amount: D
    full_price: D
    tier_price: D
    # full_price - tier_price before rounding, for the message
    savings: D


def calc_bundle_discount(
    table: PricingTable, category: Optional[str], quantity: int
) -> Tuple[Optional[TierDiscount], Dict[str, Any]]:
    """
    Exact-match tiers only: a quantity one above or below a listed tier gets
    nothing, never a prorated amount.

    Returns (discount, meta). discount is None when nothing applies and
    meta["reason"] says why.
    """
    tier = table.lookup(category)
    if tier is None:
        return None, {"reason": "unknown_category", "category": category}

    tier_price = tier.tier_totals.get(quantity)
    if tier_price is None:
        return None, {"reason": "no_tier_for_quantity", "qty": quantity}

    full_price = tier.full_price(quantity)
    discount = full_price - tier_price

    # misconfigured tier (bundle >= full price, or savings below one cent)
    if money(discount) <= 0:
        return None, {
            "reason": "no_savings",
            "qty": quantity,
            "full_price": str(full_price),
            "tier_price": str(tier_price),
        }

    result = TierDiscount(
        amount=money(discount),
        full_price=money(full_price),
        tier_price=money(tier_price),
        savings=discount,
    )
    return result, {"qty": quantity, "amount": str(result.amount)}


def evaluate_discount(
    table: PricingTable, category: Optional[str], quantity: int
) -> Optional[TierDiscount]:
    discount, _ = calc_bundle_discount(table, category, quantity)
    return discount
