import pytest

from bureau_resolver.config import NormalizationConfig
from bureau_resolver.normalizer import CreditorNormalizer, normalize_creditor_name


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("JPMCB CARD SERVICES", "chase"),
        ("AMEX", "american express"),
        ("Capital One Bank USA, N.A.", "capital one"),
        ("CITI CARDS CBNA", "citi"),
        ("  Discover  ", "discover"),
    ],
)
def test_known_aliases_map_to_canonical_names(raw, expected):
    assert normalize_creditor_name(raw) == expected


def test_unknown_creditor_returns_cleaned_name():
    assert normalize_creditor_name("SYNCB/AMAZON") == "syncbamazon"


def test_name_contained_in_alias_uses_that_alias():
    assert normalize_creditor_name("DISC") == "discover"


@pytest.mark.parametrize("raw", [None, "", "!!!", " - "])
def test_empty_or_punctuation_only_names_normalize_to_empty(raw):
    assert normalize_creditor_name(raw) == ""


def test_custom_alias_table_is_cleaned_and_used():
    normalizer = CreditorNormalizer(
        NormalizationConfig(creditor_aliases=[(" Foo Bank ", "FOO")])
    )
    assert normalizer.normalize("The Foo Bank of Springfield") == "foo"
    assert normalizer.normalize("Bar Credit Union") == "bar credit union"


def test_first_alias_in_table_order_wins_containment():
    normalizer = CreditorNormalizer(
        NormalizationConfig(creditor_aliases=[("alpha", "first"), ("beta", "second")])
    )
    assert normalizer.normalize("beta alpha lending") == "first"


def test_duplicate_alias_is_rejected():
    with pytest.raises(ValueError):
        NormalizationConfig(creditor_aliases=[("amex", "american express"), ("AMEX", "amex")])
