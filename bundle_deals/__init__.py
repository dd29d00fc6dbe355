"""Exact-quantity bundle discounts for cart lines, keyed by product size."""

__version__ = "0.1.0"
