from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, FrozenSet, Optional, Tuple

D = Decimal

PRODUCT_VARIANT = "ProductVariant"

# Selection strategies (avoid string typos)
SELECT_ALL = "ALL"
SELECT_FIRST = "FIRST"

KIND_PRODUCT = "product"
KIND_ORDER = "order"


def money(x: D) -> D:
    return x.quantize(D("0.01"), rounding=ROUND_HALF_UP)


def money_str(x: D) -> str:
    return f"{money(x):.2f}"


# -----------------------------
# Input (snapshot, read-only)
# -----------------------------


@dataclass(frozen=True)
class SizeSignals:
    title: Optional[str] = None
    sku: Optional[str] = None
    metafield_value: Optional[str] = None


@dataclass(frozen=True)
class CartLineSnapshot:
    line_id: str
    quantity: int
    merchandise_kind: Optional[str]
    signals: SizeSignals = field(default_factory=SizeSignals)

    @property
    def is_product_variant(self) -> bool:
        return self.merchandise_kind == PRODUCT_VARIANT


# -----------------------------
# Output
# -----------------------------


@dataclass(frozen=True)
class DiscountDecision:
    """
    One qualifying line. Only built for strictly positive amounts;
    "no discount" is the absence of a decision.
    """

    line_id: str
    quantity: int
    category: str
    amount: D
    full_price: D
    tier_price: D
    message: str
    source: str  # signal that classified the line: metafield | title | sku

    @property
    def amount_str(self) -> str:
        return money_str(self.amount)


@dataclass(frozen=True)
class DiscountInstruction:
    """
    Batched, platform-facing result of one evaluation.

    kind=product: one candidate per decision, all applied (ALL).
    kind=order: one order-subtotal candidate carrying the summed amount (FIRST).
    """

    kind: str
    selection_strategy: str
    decisions: Tuple[DiscountDecision, ...]
    message: Optional[str] = None

    @property
    def total(self) -> D:
        total = D("0.00")
        for d in self.decisions:
            total += d.amount
        return money(total)


# -----------------------------
# Runtime (per evaluation)
# -----------------------------


@dataclass
class EvaluationContext:
    """
    Per-evaluation bookkeeping, never shared between evaluations.
    Only counters and skip reasons for logging; outputs never depend on it.
    """

    discount_classes: FrozenSet[str] = frozenset()
    lines_seen: int = 0
    skipped: Dict[str, int] = field(default_factory=dict)

    def skip(self, reason: str) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + 1

    def summary(self) -> Dict[str, Any]:
        return {"lines": self.lines_seen, "skipped": dict(sorted(self.skipped.items()))}
