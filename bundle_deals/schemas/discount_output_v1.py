# bundle_deals/schemas/discount_output_v1.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from bundle_deals.engine.context import (
    KIND_ORDER,
    KIND_PRODUCT,
    DiscountInstruction,
    money_str,
)


class _WireModel(BaseModel):
    # platform contract: camelCase on the wire, no extra keys
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class CartLineTargetV1(_WireModel):
    id: str


class OrderSubtotalTargetV1(_WireModel):
    excluded_cart_line_ids: List[str] = Field(
        default_factory=list, alias="excludedCartLineIds"
    )


class TargetV1(_WireModel):
    cart_line: Optional[CartLineTargetV1] = Field(None, alias="cartLine")
    order_subtotal: Optional[OrderSubtotalTargetV1] = Field(None, alias="orderSubtotal")


class FixedAmountV1(_WireModel):
    amount: str  # two-decimal string, e.g. "24.00"


class DiscountValueV1(_WireModel):
    fixed_amount: FixedAmountV1 = Field(alias="fixedAmount")


class CandidateV1(_WireModel):
    targets: List[TargetV1]
    message: str
    value: DiscountValueV1


class DiscountsAddV1(_WireModel):
    selection_strategy: Literal["ALL", "FIRST"] = Field(alias="selectionStrategy")
    candidates: List[CandidateV1]


class OperationV1(_WireModel):
    product_discounts_add: Optional[DiscountsAddV1] = Field(
        None, alias="productDiscountsAdd"
    )
    order_discounts_add: Optional[DiscountsAddV1] = Field(
        None, alias="orderDiscountsAdd"
    )


class FunctionRunResultV1(_WireModel):
    operations: List[OperationV1] = Field(default_factory=list)

    @classmethod
    def from_instructions(
        cls, instructions: Sequence[DiscountInstruction]
    ) -> "FunctionRunResultV1":
        ops: List[OperationV1] = []
        for ins in instructions:
            if ins.kind == KIND_PRODUCT:
                ops.append(OperationV1(product_discounts_add=_product_add(ins)))
            elif ins.kind == KIND_ORDER:
                ops.append(OperationV1(order_discounts_add=_order_add(ins)))
            else:
                raise ValueError(f"Unknown instruction kind: {ins.kind}")
        return cls(operations=ops)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def _product_add(ins: DiscountInstruction) -> DiscountsAddV1:
    return DiscountsAddV1(
        selection_strategy=ins.selection_strategy,
        candidates=[
            CandidateV1(
                targets=[TargetV1(cart_line=CartLineTargetV1(id=d.line_id))],
                message=d.message,
                value=DiscountValueV1(fixed_amount=FixedAmountV1(amount=d.amount_str)),
            )
            for d in ins.decisions
        ],
    )


def _order_add(ins: DiscountInstruction) -> DiscountsAddV1:
    return DiscountsAddV1(
        selection_strategy=ins.selection_strategy,
        candidates=[
            CandidateV1(
                targets=[TargetV1(order_subtotal=OrderSubtotalTargetV1())],
                message=ins.message or "",
                value=DiscountValueV1(
                    fixed_amount=FixedAmountV1(amount=money_str(ins.total))
                ),
            )
        ],
    )
