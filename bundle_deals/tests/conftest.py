from __future__ import annotations

import copy
import json
from pathlib import Path

import pytest
import yaml

from bundle_deals.core.settings import DEFAULT_PRICING_CONFIG, get_settings
from bundle_deals.engine.aggregator import CartAggregator
from bundle_deals.engine.classifier import SizeClassifier
from bundle_deals.engine.discount_engine import BundleDiscountEngine, get_engine
from bundle_deals.engine.pricing_table import PricingConfig, PricingTable

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(scope="session")
def _default_config_dict():
    with DEFAULT_PRICING_CONFIG.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def config_dict(_default_config_dict):
    # fresh copy per test: tests may mutate it
    return copy.deepcopy(_default_config_dict)


@pytest.fixture
def pricing_config(config_dict):
    return PricingConfig.from_dict(config_dict)


@pytest.fixture
def table(pricing_config):
    return PricingTable.from_config(pricing_config)


@pytest.fixture
def classifier(pricing_config):
    return SizeClassifier(pricing_config.keywords)


@pytest.fixture
def aggregator(table, classifier):
    return CartAggregator(table, classifier)


@pytest.fixture
def engine():
    # Uses the real packaged YAML config (also validates it against the schema)
    return BundleDiscountEngine.from_yaml_file(str(DEFAULT_PRICING_CONFIG))


@pytest.fixture
def sample_input():
    return json.loads((FIXTURES / "input.v1.sample.json").read_text(encoding="utf-8"))


@pytest.fixture
def make_line():
    def _make(
        line_id="gid://shopify/CartLine/1",
        quantity=6,
        title=None,
        sku=None,
        box_size=None,
        typename="ProductVariant",
    ):
        merchandise = {"__typename": typename, "title": title, "sku": sku}
        if box_size is not None:
            merchandise["boxSize"] = {"value": box_size}
        return {"id": line_id, "quantity": quantity, "merchandise": merchandise}

    return _make


@pytest.fixture
def make_cart():
    def _make(*lines, classes=("PRODUCT",)):
        return {
            "discount": {"discountClasses": list(classes)},
            "cart": {"lines": list(lines)},
        }

    return _make


@pytest.fixture
def clear_caches():
    get_settings.cache_clear()
    get_engine.cache_clear()
    yield
    get_settings.cache_clear()
    get_engine.cache_clear()
