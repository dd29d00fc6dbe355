from decimal import Decimal

import pytest

from bundle_deals.engine.pricing_table import PricingConfig, PricingConfigError, PricingTable


def test_lookup_known_categories(table):
    tier = table.lookup("500g")

    assert tier.unit_price == Decimal("59.00")
    assert dict(tier.tier_totals) == {6: Decimal("330.00"), 12: Decimal("600.00")}
    assert table.lookup("1kg").tier_totals[12] == Decimal("1020.00")


def test_lookup_absent_category_is_none(table):
    assert table.lookup("2kg") is None
    assert table.lookup(None) is None


def test_categories_keep_declaration_order(table):
    assert table.categories == ["500g", "1kg"]


def test_tier_totals_are_read_only(table):
    with pytest.raises(TypeError):
        table.lookup("500g").tier_totals[7] = Decimal("1.00")


def test_savings(table):
    tier = table.lookup("1kg")
    assert tier.savings(6) == Decimal("54.00")
    assert tier.savings(7) is None


def test_duplicate_category_fails_fast(config_dict):
    config_dict["sizes"].append(dict(config_dict["sizes"][0], keywords=["half kilo"]))

    with pytest.raises(PricingConfigError, match="Duplicate size categories"):
        PricingConfig.from_dict(config_dict)


def test_duplicate_tier_quantity_fails_fast(config_dict):
    config_dict["sizes"][0]["tiers"].append({"quantity": 6, "bundleTotal": "300.00"})

    with pytest.raises(PricingConfigError, match="duplicate tier quantity 6"):
        PricingConfig.from_dict(config_dict)


def test_overlapping_keywords_fail_fast(config_dict):
    config_dict["sizes"][1]["keywords"].append("500g")

    with pytest.raises(PricingConfigError, match="overlap"):
        PricingConfig.from_dict(config_dict)


def test_keyword_contained_in_other_category_fails_fast(config_dict):
    # "kg" would also match every "1kg" title
    config_dict["sizes"][0]["keywords"].append("KG")

    with pytest.raises(PricingConfigError, match="overlap"):
        PricingConfig.from_dict(config_dict)


def test_non_positive_unit_price_fails_fast(config_dict):
    config_dict["sizes"][0]["unitPrice"] = "0"

    with pytest.raises(PricingConfigError, match="unitPrice"):
        PricingConfig.from_dict(config_dict)


def test_invalid_decimal_fails_fast(config_dict):
    config_dict["sizes"][0]["tiers"][0]["bundleTotal"] = "abc"

    with pytest.raises(PricingConfigError, match="not a valid decimal"):
        PricingConfig.from_dict(config_dict)


def test_empty_sizes_fails_fast():
    with pytest.raises(PricingConfigError):
        PricingConfig.from_dict({"configVersion": "v1", "sizes": []})


def test_inert_tier_is_loaded(config_dict):
    # bundle price above full price: allowed in config, never applied
    config_dict["sizes"][0]["tiers"].append({"quantity": 3, "bundleTotal": "200.00"})
    table = PricingTable.from_config(PricingConfig.from_dict(config_dict))

    assert table.lookup("500g").tier_totals[3] == Decimal("200.00")


def test_defaults_for_optional_fields(config_dict):
    for key in ("currencySymbol", "productDiscountClass", "orderDiscountClass"):
        config_dict.pop(key)
    cfg = PricingConfig.from_dict(config_dict)

    assert cfg.currency_symbol == "R"
    assert cfg.product_discount_class == "PRODUCT"
    assert cfg.order_discount_class == "ORDER"
