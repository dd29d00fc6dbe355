# bundle_deals/explain/__init__.py
from __future__ import annotations

from .formatter import format_discount_message, format_order_message

__all__ = [
    "format_discount_message",
    "format_order_message",
]
