"""Tests for category canonicalization and default allowances."""

import pytest

from wic_assistant.models.category import (
    DEFAULT_ALLOWANCE,
    PAID_CATEGORY,
    canonicalize,
    derive_allowed,
)


class TestCanonicalize:
    """Tests for canonical category keys."""

    @pytest.mark.parametrize("raw,expected", [
        ("Milk", "MILK"),
        ("  milk  ", "MILK"),
        ("Whole   Grain\tBread", "WHOLE GRAIN BREAD"),
        ("", ""),
    ])
    def test_canonical_form(self, raw, expected):
        assert canonicalize(raw) == expected

    def test_is_idempotent(self):
        once = canonicalize(" fresh  Fruit ")
        assert canonicalize(once) == once


class TestDeriveAllowed:
    """Tests for the default allowance table."""

    @pytest.mark.parametrize("category,expected", [
        ("CVB", None),
        ("Fresh Fruit", None),
        ("Frozen Vegetables", None),
        ("Milk", 3),
        ("Cheese", 3),
        ("Yogurt", 3),
        ("Whole Grain Bread", 2),
        ("Breakfast Cereal", 2),
        ("Canned Meat", 1),
        ("Dry Beans", 1),
        ("Peanut Butter", 1),
        ("100% Juice", 1),
        ("Infant Formula", DEFAULT_ALLOWANCE),
    ])
    def test_allowance(self, category, expected):
        assert derive_allowed(category) == expected

    def test_paid_is_unlimited(self):
        assert derive_allowed(PAID_CATEGORY) is None
        assert derive_allowed(" paid ") is None

    def test_first_matching_rule_wins(self):
        """Fruit beats juice because the unlimited rule comes first."""
        assert derive_allowed("Fruit Juice") is None
        assert derive_allowed("Bean and Cheese Dip") == 3

    def test_canonicalizes_before_matching(self):
        assert derive_allowed("  low fat   milk ") == 3
