from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import yaml
from jsonschema import ValidationError as SchemaValidationError
from jsonschema import validate

from bundle_deals.core.logging_config import logger
from bundle_deals.core.settings import get_settings
from bundle_deals.schemas.discount_output_v1 import FunctionRunResultV1

from .aggregator import CartAggregator, CartPayload
from .classifier import SizeClassifier
from .context import DiscountInstruction
from .pricing_table import PricingConfig, PricingConfigError, PricingTable

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "schemas" / "pricing_config.schema.json"


class BundleDiscountEngine:
    def __init__(self, config_dict: Dict[str, Any]):
        self.config = PricingConfig.from_dict(config_dict)
        self.table = PricingTable.from_config(self.config)
        self.classifier = SizeClassifier(self.config.keywords)
        self.aggregator = CartAggregator(
            self.table,
            self.classifier,
            currency_symbol=self.config.currency_symbol,
            product_discount_class=self.config.product_discount_class,
            order_discount_class=self.config.order_discount_class,
        )

    @classmethod
    def from_yaml_file(cls, path: str) -> "BundleDiscountEngine":
        config_path = Path(path)
        if not config_path.exists():
            raise PricingConfigError("pricing config not found", source=str(config_path))

        with config_path.open("r", encoding="utf-8") as f:
            d = yaml.safe_load(f) or {}

        with SCHEMA_PATH.open("r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            validate(instance=d, schema=schema)
            engine = cls(d)
        except SchemaValidationError as e:
            raise PricingConfigError(e.message, source=str(config_path)) from e
        except PricingConfigError as e:
            raise PricingConfigError(str(e), source=str(config_path)) from e

        logger.info(
            "bundle_deals_config_loaded",
            path=str(config_path),
            config_version=engine.config.config_version,
            categories=engine.table.categories,
        )
        return engine

    def instructions(self, payload: CartPayload, *, mode: str = "product") -> List[DiscountInstruction]:
        if mode == "order":
            return self.aggregator.aggregate_order(payload)
        if mode == "product":
            return self.aggregator.aggregate(payload)
        raise ValueError(f"Unknown discount mode: {mode}")

    def run(self, payload: CartPayload, *, mode: str = "product") -> FunctionRunResultV1:
        return FunctionRunResultV1.from_instructions(self.instructions(payload, mode=mode))

    def describe(self) -> Dict[str, Any]:
        """Active tiers, for inspection (no evaluation)."""
        sizes = []
        for size in self.config.sizes:
            tier = size.tier
            sizes.append(
                {
                    "category": tier.category,
                    "unitPrice": f"{tier.unit_price:.2f}",
                    "keywords": list(size.keywords),
                    "tiers": [
                        {
                            "quantity": qty,
                            "bundleTotal": f"{total:.2f}",
                            "savings": f"{tier.savings(qty):.2f}",
                        }
                        for qty, total in tier.tier_totals.items()
                    ],
                }
            )
        return {
            "configVersion": self.config.config_version,
            "currencySymbol": self.config.currency_symbol,
            "productDiscountClass": self.config.product_discount_class,
            "orderDiscountClass": self.config.order_discount_class,
            "sizes": sizes,
        }


@lru_cache(maxsize=1)
def get_engine() -> BundleDiscountEngine:
    """Process-wide engine, loaded once from settings.pricing_config_path."""
    return BundleDiscountEngine.from_yaml_file(get_settings().pricing_config_path)


def cart_lines_discounts_generate_run(payload: CartPayload) -> Dict[str, Any]:
    """
    Function entrypoint: cart snapshot in, {"operations": [...]} out,
    in the mode configured by settings.discount_mode.
    """
    engine = get_engine()
    return engine.run(payload, mode=get_settings().discount_mode).to_payload()
