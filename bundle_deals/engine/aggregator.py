from __future__ import annotations

from typing import Any, Iterator, List, Mapping, Optional, Union

from pydantic import ValidationError

from bundle_deals.core.logging_config import logger
from bundle_deals.explain.formatter import format_discount_message, format_order_message
from bundle_deals.schemas.cart_input_v1 import CartInputV1, CartLineV1

from .classifier import SizeClassifier
from .context import (
    KIND_ORDER,
    KIND_PRODUCT,
    SELECT_ALL,
    SELECT_FIRST,
    CartLineSnapshot,
    DiscountDecision,
    DiscountInstruction,
    EvaluationContext,
)
from .evaluator import calc_bundle_discount
from .pricing_table import PricingTable

CartPayload = Union[CartInputV1, Mapping[str, Any]]


def parse_cart_input(payload: CartPayload) -> CartInputV1:
    """
    Never raises: a payload that does not even look like a cart is treated
    as an empty cart without discount classes.
    """
    if isinstance(payload, CartInputV1):
        return payload
    try:
        return CartInputV1.model_validate(payload)
    except ValidationError as e:
        logger.warning(
            "bundle_deals_input_malformed", errors=e.error_count(), detail=_first_error(e)
        )
        return CartInputV1()


def _first_error(e: ValidationError) -> str:
    errs = e.errors()
    if not errs:
        return str(e)
    first = errs[0]
    loc = ".".join(str(p) for p in first.get("loc", ()))
    return f"{loc}: {first.get('msg')}"


def _iter_lines(cart: CartInputV1, ectx: EvaluationContext) -> Iterator[CartLineSnapshot]:
    for index, raw in enumerate(cart.raw_lines):
        ectx.lines_seen += 1
        try:
            line = CartLineV1.model_validate(raw)
        except ValidationError as e:
            ectx.skip("malformed")
            logger.warning(
                "bundle_deals_line_malformed", index=index, detail=_first_error(e)
            )
            continue
        yield line.to_snapshot()


class CartAggregator:
    """
    Single linear pass over the cart lines:
    classify -> evaluate -> format -> collect.

    Lines never influence each other; any number of lines (different sizes,
    or the same size on separate lines) can qualify in one evaluation.
    """

    def __init__(
        self,
        table: PricingTable,
        classifier: SizeClassifier,
        *,
        currency_symbol: str = "R",
        product_discount_class: str = "PRODUCT",
        order_discount_class: str = "ORDER",
    ):
        self.table = table
        self.classifier = classifier
        self.currency_symbol = currency_symbol
        self.product_discount_class = product_discount_class
        self.order_discount_class = order_discount_class

    def decide(
        self, line: CartLineSnapshot, ectx: Optional[EvaluationContext] = None
    ) -> Optional[DiscountDecision]:
        ectx = ectx if ectx is not None else EvaluationContext()

        if not line.is_product_variant:
            ectx.skip("not_product_variant")
            logger.debug(
                "bundle_deals_line_skipped",
                line_id=line.line_id,
                reason="not_product_variant",
                kind=line.merchandise_kind,
            )
            return None

        size = self.classifier.match(line.signals)
        if size is None:
            ectx.skip("unknown_size")
            logger.debug(
                "bundle_deals_line_skipped", line_id=line.line_id, reason="unknown_size"
            )
            return None

        discount, meta = calc_bundle_discount(self.table, size.category, line.quantity)
        if discount is None:
            ectx.skip(meta.get("reason", "no_discount"))
            logger.debug(
                "bundle_deals_line_skipped",
                line_id=line.line_id,
                **{"category": size.category, **meta},
            )
            return None

        return DiscountDecision(
            line_id=line.line_id,
            quantity=line.quantity,
            category=size.category,
            amount=discount.amount,
            full_price=discount.full_price,
            tier_price=discount.tier_price,
            message=format_discount_message(
                line.quantity, size.category, discount.savings, self.currency_symbol
            ),
            source=size.source,
        )

    def _collect(self, cart: CartInputV1, ectx: EvaluationContext) -> List[DiscountDecision]:
        decisions: List[DiscountDecision] = []
        for line in _iter_lines(cart, ectx):
            decision = self.decide(line, ectx)
            if decision is not None:
                decisions.append(decision)
        return decisions

    def aggregate(self, payload: CartPayload) -> List[DiscountInstruction]:
        cart = parse_cart_input(payload)
        ectx = EvaluationContext(discount_classes=cart.discount_classes)

        if self.product_discount_class not in ectx.discount_classes:
            logger.info(
                "bundle_deals_ineligible",
                required=self.product_discount_class,
                classes=sorted(ectx.discount_classes),
            )
            return []

        decisions = self._collect(cart, ectx)
        logger.info(
            "bundle_deals_evaluated",
            mode=KIND_PRODUCT,
            candidates=len(decisions),
            **ectx.summary(),
        )

        if not decisions:
            return []

        return [
            DiscountInstruction(
                kind=KIND_PRODUCT,
                selection_strategy=SELECT_ALL,
                decisions=tuple(decisions),
            )
        ]

    def aggregate_order(self, payload: CartPayload) -> List[DiscountInstruction]:
        """
        Alternative mode: one order-subtotal discount carrying the sum of all
        qualifying line discounts.
        """
        cart = parse_cart_input(payload)
        ectx = EvaluationContext(discount_classes=cart.discount_classes)

        if self.order_discount_class not in ectx.discount_classes:
            logger.info(
                "bundle_deals_ineligible",
                required=self.order_discount_class,
                classes=sorted(ectx.discount_classes),
            )
            return []

        decisions = self._collect(cart, ectx)
        instruction = DiscountInstruction(
            kind=KIND_ORDER,
            selection_strategy=SELECT_FIRST,
            decisions=tuple(decisions),
            message=format_order_message((d.quantity, d.category) for d in decisions),
        )
        logger.info(
            "bundle_deals_evaluated",
            mode=KIND_ORDER,
            candidates=len(decisions),
            total=str(instruction.total),
            **ectx.summary(),
        )

        if instruction.total <= 0:
            return []
        return [instruction]
