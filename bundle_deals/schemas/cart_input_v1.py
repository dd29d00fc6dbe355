# bundle_deals/schemas/cart_input_v1.py
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, conint, constr, field_validator

from bundle_deals.engine.context import CartLineSnapshot, SizeSignals


class BoxSizeMetafieldV1(BaseModel):
    model_config = ConfigDict(extra="ignore")

    value: Optional[str] = None


class MerchandiseV1(BaseModel):
    """
    Only the fields we read. Everything else the platform sends is ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    typename: Optional[str] = Field(None, alias="__typename")
    title: Optional[str] = None
    sku: Optional[str] = None
    box_size: Optional[BoxSizeMetafieldV1] = Field(None, alias="boxSize")


class CartLineV1(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: constr(min_length=1)  # type: ignore
    quantity: conint(strict=True, ge=1)  # type: ignore
    merchandise: MerchandiseV1

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, v: str) -> str:
        # checked, never rewritten: the id is echoed back as the discount target
        if not v.strip():
            raise ValueError("line id is blank")
        return v

    def to_snapshot(self) -> CartLineSnapshot:
        m = self.merchandise
        return CartLineSnapshot(
            line_id=self.id,
            quantity=int(self.quantity),
            merchandise_kind=m.typename,
            signals=SizeSignals(
                title=m.title,
                sku=m.sku,
                metafield_value=m.box_size.value if m.box_size else None,
            ),
        )


class CartV1(BaseModel):
    # Lines stay raw here: each one is validated on its own so that one
    # malformed line does not reject the whole cart.
    model_config = ConfigDict(extra="ignore")

    lines: Optional[List[Any]] = None


class DiscountV1(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    discount_classes: Optional[List[str]] = Field(None, alias="discountClasses")


class CartInputV1(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cart: Optional[CartV1] = None
    discount: Optional[DiscountV1] = None

    @property
    def raw_lines(self) -> List[Any]:
        if self.cart is None:
            return []
        return list(self.cart.lines or [])

    @property
    def discount_classes(self) -> frozenset:
        if self.discount is None:
            return frozenset()
        return frozenset(self.discount.discount_classes or [])
