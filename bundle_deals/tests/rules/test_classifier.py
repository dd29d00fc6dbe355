import pytest

from bundle_deals.engine.classifier import SignalSource, SizeClassifier, normalize_text
from bundle_deals.engine.context import SizeSignals


@pytest.mark.parametrize(
    "title",
    ["Cookie Box 500g", "COOKIE BOX 500 G", "cookie box 500gr", "Cookie Box 0.5kg", "box   500  g  "],
)
def test_title_variants_resolve_to_500g(classifier, title):
    assert classifier.classify(SizeSignals(title=title)) == "500g"


@pytest.mark.parametrize("title", ["Cookie Box 1kg", "Cookie Box 1 KG", "1000g tin", "1000 g"])
def test_title_variants_resolve_to_1kg(classifier, title):
    assert classifier.classify(SizeSignals(title=title)) == "1kg"


def test_metafield_wins_over_conflicting_title(classifier):
    signals = SizeSignals(title="Cookie Box 500g", sku="CB-500G", metafield_value="1kg")
    m = classifier.match(signals)

    assert m.category == "1kg"
    assert m.source == "metafield"


def test_metafield_only_1000g_is_1kg(classifier):
    assert classifier.classify(SizeSignals(metafield_value="1000g")) == "1kg"


def test_blank_metafield_falls_through_to_title(classifier):
    m = classifier.match(SizeSignals(title="Box 500g", metafield_value="   "))

    assert m.category == "500g"
    assert m.source == "title"


def test_unmatched_metafield_falls_through_to_title(classifier):
    m = classifier.match(SizeSignals(title="Box 1kg", metafield_value="large"))

    assert m.category == "1kg"
    assert m.source == "title"


def test_sku_is_last_resort(classifier):
    m = classifier.match(SizeSignals(title="Mixed Box", sku="MB-0.5KG"))

    assert m.category == "500g"
    assert m.source == "sku"


def test_title_beats_sku(classifier):
    assert classifier.classify(SizeSignals(title="Box 1kg", sku="B-500G")) == "1kg"


def test_no_signals_is_unknown(classifier):
    assert classifier.classify(SizeSignals()) is None
    assert classifier.match(SizeSignals(title="Gift card", sku="GC-01")) is None


def test_classification_is_idempotent(classifier):
    signals = SizeSignals(title="Cookie Box 500 g")
    assert classifier.match(signals) == classifier.match(signals)


def test_first_declared_category_wins_within_a_source():
    c = SizeClassifier({"small": ["box"], "large": ["big box"]})
    assert c.classify(SizeSignals(title="big box")) == "small"


def test_custom_source_order():
    c = SizeClassifier(
        {"500g": ["500g"], "1kg": ["1kg"]},
        sources=[SignalSource("sku", lambda s: s.sku), SignalSource("title", lambda s: s.title)],
    )
    m = c.match(SizeSignals(title="Box 500g", sku="B-1KG"))

    assert m.category == "1kg"
    assert m.source == "sku"


def test_normalize_text():
    assert normalize_text("  500\t G \n") == "500 g"
    assert normalize_text(None) == ""
