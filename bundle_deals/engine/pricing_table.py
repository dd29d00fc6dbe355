from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from bundle_deals.core.logging_config import logger

from .classifier import normalize_text

D = Decimal


class PricingConfigError(ValueError):
    """Raised when a pricing config cannot be loaded deterministically."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


def _to_decimal(value: Any, field_name: str) -> D:
    try:
        return D(str(value))
    except (InvalidOperation, ValueError):
        raise PricingConfigError(f"{field_name} is not a valid decimal: {value!r}")


# -----------------------
# Config models
# -----------------------


@dataclass(frozen=True)
class PricingTier:
    category: str
    unit_price: D
    tier_totals: Mapping[int, D]

    def full_price(self, quantity: int) -> D:
        return self.unit_price * quantity

    def savings(self, quantity: int) -> Optional[D]:
        total = self.tier_totals.get(quantity)
        if total is None:
            return None
        return self.full_price(quantity) - total


@dataclass(frozen=True)
class SizeSpec:
    tier: PricingTier
    keywords: Tuple[str, ...]

    @property
    def category(self) -> str:
        return self.tier.category

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "SizeSpec":
        category = str(d["category"]).strip()
        if not category:
            raise PricingConfigError("size category must be non-empty")

        unit_price = _to_decimal(d["unitPrice"], f"{category}.unitPrice")
        if unit_price <= 0:
            raise PricingConfigError(f"{category}.unitPrice must be > 0")

        totals: Dict[int, D] = {}
        for t in d.get("tiers") or []:
            qty = int(t["quantity"])
            if qty < 1:
                raise PricingConfigError(f"{category}: tier quantity must be >= 1, got {qty}")
            if qty in totals:
                raise PricingConfigError(f"{category}: duplicate tier quantity {qty}")
            totals[qty] = _to_decimal(t["bundleTotal"], f"{category}.tiers[{qty}].bundleTotal")

        keywords = tuple(str(k) for k in (d.get("keywords") or []))
        if not any(normalize_text(k) for k in keywords):
            raise PricingConfigError(f"{category}: at least one keyword is required")

        tier = PricingTier(
            category=category,
            unit_price=unit_price,
            tier_totals=MappingProxyType(dict(sorted(totals.items()))),
        )
        return SizeSpec(tier=tier, keywords=keywords)


@dataclass(frozen=True)
class PricingConfig:
    config_version: str
    currency_symbol: str
    product_discount_class: str
    order_discount_class: str
    sizes: Tuple[SizeSpec, ...]

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "PricingConfig":
        sizes = tuple(SizeSpec.from_dict(x) for x in d.get("sizes") or [])
        if not sizes:
            raise PricingConfigError("sizes must contain at least one size category")

        # Cross-validation
        cats = [s.category for s in sizes]
        if len(cats) != len(set(cats)):
            seen, dups = set(), []
            for c in cats:
                if c in seen and c not in dups:
                    dups.append(c)
                seen.add(c)
            raise PricingConfigError(f"Duplicate size categories: {dups}")

        _check_keyword_overlap(sizes)

        return PricingConfig(
            config_version=str(d.get("configVersion") or "v1"),
            currency_symbol=str(d.get("currencySymbol", "R")),
            product_discount_class=str(d.get("productDiscountClass") or "PRODUCT"),
            order_discount_class=str(d.get("orderDiscountClass") or "ORDER"),
            sizes=sizes,
        )

    @property
    def keywords(self) -> Dict[str, Tuple[str, ...]]:
        return {s.category: s.keywords for s in self.sizes}


def _check_keyword_overlap(sizes: Tuple[SizeSpec, ...]) -> None:
    """
    Substring matching makes "kg" shadow "1kg", so a keyword of one category
    may not be equal to or contained in a keyword of another category.
    """
    conflicts: List[str] = []
    for i, a in enumerate(sizes):
        for b in sizes[i + 1 :]:
            for ka in (normalize_text(k) for k in a.keywords):
                for kb in (normalize_text(k) for k in b.keywords):
                    if ka and kb and (ka in kb or kb in ka):
                        conflicts.append(f"{a.category}:{ka!r} <> {b.category}:{kb!r}")
    if conflicts:
        raise PricingConfigError(f"Keywords overlap between size categories: {conflicts}")


# -----------------------
# Table
# -----------------------


class PricingTable:
    """Read-only lookup of size category -> PricingTier."""

    def __init__(self, tiers: Mapping[str, PricingTier]):
        self._tiers: Mapping[str, PricingTier] = MappingProxyType(dict(tiers))

    @classmethod
    def from_config(cls, config: PricingConfig) -> "PricingTable":
        for size in config.sizes:
            tier = size.tier
            for qty, total in tier.tier_totals.items():
                if total >= tier.full_price(qty):
                    # kept but never applied (evaluator returns None)
                    logger.warning(
                        "bundle_deals_inert_tier",
                        category=tier.category,
                        quantity=qty,
                        bundle_total=str(total),
                        full_price=str(tier.full_price(qty)),
                    )
        return cls({s.category: s.tier for s in config.sizes})

    @property
    def categories(self) -> List[str]:
        return list(self._tiers.keys())

    def lookup(self, category: Optional[str]) -> Optional[PricingTier]:
        if category is None:
            return None
        return self._tiers.get(category)
