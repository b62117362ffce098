"""
Tests for WIC Shopping Assistant models

Test strategy:
1. Unit tests for individual components (models, rules)
2. Integration tests for flows (with in-memory stores)
3. No real API calls in tests
"""

import json
from uuid import uuid4

import pytest

from wic_assistant.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from wic_assistant.models.catalog import FoodNutrient, Product, ScoredProduct
from wic_assistant.models.ledger import BasketLine, CategoryBalance, UserDocument


class TestCategoryBalance:
    """Tests for CategoryBalance."""

    def test_for_category_uses_default_allowance(self):
        """Test that a fresh balance gets the derived cap."""
        balance = CategoryBalance.for_category("  milk  ")
        assert balance.category == "MILK"
        assert balance.allowed == 3
        assert balance.used == 0

    def test_unlimited_balance_always_has_capacity(self):
        """Test that allowed=None never runs out."""
        balance = CategoryBalance(category="CVB", allowed=None, used=50)
        assert balance.is_unlimited
        assert balance.has_capacity
        assert balance.remaining is None

    def test_capped_balance_capacity(self):
        """Test capacity at and below the cap."""
        balance = CategoryBalance(category="JUICE", allowed=1, used=0)
        assert balance.has_capacity
        assert balance.remaining == 1

        balance.used = 1
        assert not balance.has_capacity
        assert balance.remaining == 0

    def test_rejects_negative_used(self):
        """Test that negative usage is rejected."""
        with pytest.raises(ValueError):
            CategoryBalance(category="MILK", allowed=3, used=-1)

    def test_rejects_zero_allowed(self):
        """Test that a zero cap is rejected."""
        with pytest.raises(ValueError):
            CategoryBalance(category="MILK", allowed=0)


class TestBasketLine:
    """Tests for BasketLine."""

    def test_rejects_zero_quantity(self):
        with pytest.raises(ValueError):
            BasketLine(upc="1", category="MILK", qty=0)

    def test_matches_on_upc_and_category(self):
        line = BasketLine(upc="1", category="MILK")
        assert line.matches("1", "MILK")
        assert not line.matches("1", "PAID")
        assert not line.matches("2", "MILK")


class TestUserDocument:
    """Tests for store-boundary parsing of the user document."""

    def test_empty_data_gives_empty_document(self):
        document = UserDocument.from_store(None)
        assert document.balances == {}
        assert document.basket == []

    def test_round_trip_through_store_format(self):
        """Test that to_store output parses back to the same state."""
        document = UserDocument(
            balances={
                "MILK": CategoryBalance(category="MILK", allowed=3, used=2),
                "PAID": CategoryBalance(category="PAID", allowed=None, used=1),
            },
            basket=[
                BasketLine(upc="1", name="Milk", category="MILK", qty=2, nutrition={"sugar": 12.0}),
                BasketLine(upc="1", name="Milk", category="PAID", qty=1),
            ],
        )
        restored = UserDocument.from_store(document.to_store())

        assert restored.balances == document.balances
        assert restored.basket == document.basket

    def test_to_store_is_json_serializable(self):
        document = UserDocument(
            balances={"MILK": CategoryBalance(category="MILK", allowed=3, used=1)},
            basket=[BasketLine(upc="1", category="MILK")],
        )
        data = json.loads(json.dumps(document.to_store()))
        assert data["balances"]["MILK"] == {"allowed": 3, "used": 1}
        assert data["basket"][0]["upc"] == "1"
        assert "nutrition" not in data["basket"][0]

    def test_keys_are_canonicalized(self):
        document = UserDocument.from_store({
            "balances": {" whole  grain bread ": {"allowed": 2, "used": 1}},
            "basket": [{"upc": "9", "category": "whole grain bread", "qty": 1}],
        })
        assert "WHOLE GRAIN BREAD" in document.balances
        assert document.basket[0].category == "WHOLE GRAIN BREAD"

    def test_malformed_values_are_coerced(self):
        """Test lenient parsing of bad counters."""
        document = UserDocument.from_store({
            "balances": {
                "MILK": {"allowed": "three", "used": "x"},
                "JUICE": {"used": -4},
                "CVB": {"allowed": None, "used": True},
            },
            "basket": [
                {"upc": "1", "category": "MILK", "qty": 0},
                "not a line",
                {"upc": "2", "category": "JUICE", "qty": 2.5, "nutrition": {"sugar": 10, "label": "x"}},
            ],
        })
        assert document.balances["MILK"].allowed is None
        assert document.balances["MILK"].used == 0
        assert document.balances["JUICE"].allowed is None
        assert document.balances["JUICE"].used == 0
        assert document.balances["CVB"].allowed is None
        assert document.balances["CVB"].used == 0

        assert len(document.basket) == 2
        assert document.basket[0].qty == 1
        assert document.basket[1].qty == 1
        assert document.basket[1].nutrition == {"sugar": 10.0}

    @pytest.mark.parametrize("raw", [
        {"used": 2},
        {"allowed": None, "used": 2},
        {"allowed": "3", "used": 2},
        {"allowed": 2.5, "used": 2},
        {"allowed": 0, "used": 2},
        {"allowed": -1, "used": 2},
        {"allowed": True, "used": 2},
    ])
    def test_absent_or_invalid_allowed_means_unlimited(self, raw):
        """Test that only a positive integer cap is kept."""
        balance = UserDocument.from_store({"balances": {"MILK": raw}}).balances["MILK"]
        assert balance.allowed is None
        assert balance.used == 2
        assert balance.has_capacity

    def test_positive_integer_allowed_is_kept(self):
        document = UserDocument.from_store({"balances": {"MILK": {"allowed": 1, "used": 0}}})
        assert document.balances["MILK"].allowed == 1

    def test_empty_category_keys_are_skipped(self):
        document = UserDocument.from_store({"balances": {"   ": {"allowed": 2, "used": 0}}})
        assert document.balances == {}


class TestCatalogModels:
    """Tests for APL catalog models."""

    def test_product_accepts_api_alias(self):
        product = Product(
            upc="011110000001",
            name="Milk",
            category="Milk",
            foodNutrients=[{"name": "Protein", "amount": 8, "units": "G"}],
        )
        assert product.has_nutrients
        assert product.food_nutrients[0] == FoodNutrient(name="Protein", amount=8, units="G")

    def test_product_defaults(self):
        product = Product(upc="  123  ")
        assert product.upc == "123"
        assert product.name == "Unknown"
        assert product.eligible
        assert not product.has_nutrients

    def test_product_requires_upc(self):
        with pytest.raises(ValueError):
            Product(upc="")

    def test_scored_product_keeps_product_fields(self):
        scored = ScoredProduct(upc="1", name="Skim", category="Milk", health_score=-1.5)
        assert scored.name == "Skim"
        assert scored.health_score == -1.5


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.ITEM_ADDED,
            user_id="user-1",
            description="Added item",
        )
        assert event.event_type == AuditEventType.ITEM_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.PRODUCT_LOOKUP,
            description="Lookup",
            correlation_id=correlation_id,
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "product_lookup"
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_audit_event_to_sheets_row(self):
        """Test conversion to Google Sheets row."""
        event = AuditEventBuilder.item_rejected(
            user_id="user-1",
            upc="011110000001",
            category="MILK",
            reason="category limit reached",
        )
        row = event.to_sheets_row()
        assert len(row) == 12
        assert row[2] == "item_rejected"
        assert row[3] == "warning"
        assert row[4] == "user-1"

    def test_builder_product_lookup_not_found(self):
        event = AuditEventBuilder.product_lookup(user_id=None, upc="999", found=False)
        assert event.event_type == AuditEventType.PRODUCT_NOT_FOUND
        assert event.entity_id == "999"

    def test_builder_save_failed_is_error(self):
        event = AuditEventBuilder.save_failed("user-1", "quota exceeded")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "quota exceeded"
