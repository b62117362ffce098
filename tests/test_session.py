"""
Integration tests for the shopping session flows.

Uses in-memory stores for the ledger, APL and audit log.
"""

import pytest

from wic_assistant.models.audit import AuditEventType
from wic_assistant.session import ShoppingSession, create_app_components
from wic_assistant.services.storage import InMemoryDocumentStore


RECEIPT = """
011110000001  WHOLE MILK      3.49
011110000001  WHOLE MILK      3.49
044440000001  SODA            1.99
"""


def event_types(audit_storage):
    return [e.event_type for e in audit_storage.events]


@pytest.fixture
async def signed_in(session, audit_storage):
    await session.on_auth_changed("user-1")
    audit_storage.events.clear()
    return session


class TestAuthFlow:
    """Tests for identity changes."""

    async def test_sign_in_loads_and_audits(self, session, audit_storage):
        await session.on_auth_changed("user-1")

        assert session.user_id == "user-1"
        assert session.ledger.balances_loaded
        assert event_types(audit_storage) == [
            AuditEventType.USER_SIGNED_IN,
            AuditEventType.STATE_LOADED,
        ]

    async def test_sign_out_clears_and_audits(self, signed_in, audit_storage):
        await signed_in.on_auth_changed(None)

        assert signed_in.user_id is None
        assert signed_in.ledger.basket == ()
        [event] = audit_storage.events
        assert event.event_type == AuditEventType.USER_SIGNED_OUT
        assert event.user_id == "user-1"


class TestEligibilityFlow:
    """Tests for scan-and-check."""

    async def test_eligible_product(self, signed_in, audit_storage):
        result = await signed_in.check_eligibility("011110000001")

        assert result.found
        assert result.eligible
        assert result.can_add
        assert result.message == "Whole Milk (Milk) - Eligible!"
        assert event_types(audit_storage) == [AuditEventType.PRODUCT_LOOKUP]

    async def test_unknown_product(self, signed_in, audit_storage):
        result = await signed_in.check_eligibility("999999999999")

        assert not result.found
        assert not result.can_add
        assert result.message == "UPC 999999999999 not found in APL"
        assert event_types(audit_storage) == [AuditEventType.PRODUCT_NOT_FOUND]

    async def test_blank_code(self, signed_in):
        assert await signed_in.check_eligibility("   ") is None

    async def test_ineligible_product(self, signed_in):
        result = await signed_in.check_eligibility("044440000001")
        assert result.found
        assert not result.eligible
        assert not result.can_add

    async def test_full_category(self, signed_in):
        for upc in ("011110000002", "011110000003", "011110000004"):
            product = await signed_in._catalog.find_by_upc(upc)
            assert await signed_in.add_product(product)

        result = await signed_in.check_eligibility("011110000001")
        assert result.eligible
        assert not result.can_add
        assert result.message.endswith("Category limit reached")

    async def test_lookup_never_touches_basket(self, signed_in):
        await signed_in.check_eligibility("011110000001")
        assert signed_in.ledger.basket == ()


class TestAddFlow:
    """Tests for adding looked-up products."""

    async def test_add_product_with_nutrition(self, signed_in, products, audit_storage):
        assert await signed_in.add_product(products[0])

        [line] = signed_in.ledger.basket
        assert line.category == "MILK"
        assert line.nutrition["protein"] == 8.0
        [event] = audit_storage.events
        assert event.event_type == AuditEventType.ITEM_ADDED
        assert event.details["new_line"] is True

    async def test_adding_again_bumps_quantity(self, signed_in, products):
        await signed_in.add_product(products[0])
        assert await signed_in.add_product(products[0])
        assert signed_in.ledger.basket[0].qty == 2

    async def test_ineligible_is_rejected(self, signed_in, products, audit_storage):
        assert not await signed_in.add_product(products[7])

        assert signed_in.ledger.basket == ()
        [event] = audit_storage.events
        assert event.event_type == AuditEventType.ITEM_REJECTED
        assert event.details["reason"] == "not eligible"

    async def test_add_without_user_is_rejected(self, session, products):
        assert not await session.add_product(products[0])


class TestAlternatives:
    """Tests for substitutes and healthier suggestions."""

    async def test_substitutes_exclude_the_product(self, signed_in, products):
        substitutes = await signed_in.substitutes_for(products[0])
        assert [p.upc for p in substitutes] == [
            "011110000002",
            "011110000003",
            "011110000004",
        ]

    async def test_healthier_alternatives(self, signed_in, products):
        healthier = await signed_in.healthier_alternatives(products[0])
        assert [p.name for p in healthier] == ["Skim Milk", "Lowfat Milk"]


class TestReceiptFlow:
    """Tests for receipt import."""

    async def test_scan_counts_every_code(self, signed_in):
        scan = await signed_in.scan_receipt_text(RECEIPT)

        assert scan.codes_found == 3
        assert [p.upc for p in scan.products] == ["011110000001"]
        assert scan.status == "Found 3 codes, 1 valid WIC items."

    async def test_import_adds_products(self, signed_in, audit_storage):
        scan, added = await signed_in.import_receipt(RECEIPT)

        assert added == 1
        assert signed_in.ledger.balance_for("MILK").used == 1
        [event] = audit_storage.events
        assert event.event_type == AuditEventType.RECEIPT_IMPORTED
        assert event.details == {"codes_found": 3, "products": 1, "added": 1}

    async def test_import_of_text_without_codes(self, signed_in):
        scan, added = await signed_in.import_receipt("THANK YOU")
        assert scan.status == "No UPCs found."
        assert added == 0


class TestBasketCompletion:
    """Tests for checkout and abandon."""

    async def test_checkout(self, signed_in, products, store, audit_storage):
        await signed_in.add_product(products[0])
        await signed_in.add_product(products[0])
        audit_storage.events.clear()

        await signed_in.checkout()

        assert signed_in.ledger.basket == ()
        assert store.documents["user-1"]["basket"] == []
        [event] = audit_storage.events
        assert event.event_type == AuditEventType.BASKET_CHECKED_OUT
        assert event.details == {"lines": 1, "units": 2}

    async def test_abandon_releases_units(self, signed_in, products, store):
        await signed_in.add_product(products[0])
        await signed_in.abandon_basket()

        assert signed_in.ledger.balance_for("MILK").used == 0
        assert store.documents["user-1"]["balances"]["MILK"]["used"] == 0


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_without_storage(self):
        session, sheets_client = create_app_components(use_storage=False)

        assert isinstance(session, ShoppingSession)
        assert sheets_client is None
        assert isinstance(session.ledger._store, InMemoryDocumentStore)
