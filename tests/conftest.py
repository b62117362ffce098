"""
Shared fixtures.

All tests run against the in-memory stores; no Google API calls.
"""

import pytest

from wic_assistant.audit import AuditLogger
from wic_assistant.config import AppSettings, HealthScoreSettings
from wic_assistant.ledger import BenefitLedger, DocumentWriter
from wic_assistant.models.catalog import Product
from wic_assistant.services.catalog import CatalogService
from wic_assistant.services.storage import (
    InMemoryAuditStorage,
    InMemoryCatalog,
    InMemoryDocumentStore,
)
from wic_assistant.session import ShoppingSession


def make_product(upc, name, category, eligible=True, **nutrients):
    """Build an APL product; nutrient kwargs use FDC names via the map below."""
    names = {
        "calories": ("Energy", "KCAL"),
        "fat": ("Total lipid (fat)", "G"),
        "saturated_fat": ("Fatty acids, total saturated", "G"),
        "sodium": ("Sodium, Na", "MG"),
        "sugar": ("Total Sugars", "G"),
        "protein": ("Protein", "G"),
        "fiber": ("Fiber, total dietary", "G"),
    }
    rows = [
        {"name": names[key][0], "amount": amount, "units": names[key][1]}
        for key, amount in nutrients.items()
    ]
    return Product(
        upc=upc,
        name=name,
        category=category,
        eligible=eligible,
        foodNutrients=rows,
    )


@pytest.fixture
def products():
    return [
        make_product("011110000001", "Whole Milk", "Milk", calories=150, sugar=12, sodium=120, saturated_fat=4.5, protein=8),
        make_product("011110000002", "Skim Milk", "Milk", calories=80, sugar=12, sodium=130, protein=8),
        make_product("011110000003", "Lowfat Milk", " milk ", calories=100, sugar=12, sodium=125, saturated_fat=1.5, protein=8),
        make_product("011110000004", "Chocolate Milk", "Milk", calories=210, sugar=26, sodium=200, saturated_fat=3, protein=8),
        make_product("011110000005", "Plain Milk No Label", "Milk"),
        make_product("022220000001", "Whole Wheat Bread", "Whole Grain Bread", calories=70, fiber=2, protein=4, sodium=110),
        make_product("033330000001", "Apples", "Fresh Fruit"),
        make_product("044440000001", "Soda", "Beverage", eligible=False),
    ]


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def ledger(store, audit_logger):
    return BenefitLedger(store, writer=DocumentWriter(store, audit_logger), audit_logger=audit_logger)


@pytest.fixture
async def signed_in_ledger(ledger):
    await ledger.update_user("user-1")
    return ledger


@pytest.fixture
def catalog(products):
    return CatalogService(InMemoryCatalog(products), weights=HealthScoreSettings())


@pytest.fixture
def session(ledger, catalog, audit_logger):
    return ShoppingSession(
        ledger=ledger,
        catalog=catalog,
        audit_logger=audit_logger,
        settings=AppSettings(),
    )
