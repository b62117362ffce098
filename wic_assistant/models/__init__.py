"""
Data Models Package

This package contains all Pydantic models used by the WIC Shopping Assistant,
plus the category canonicalization rules the models key on.
"""

from wic_assistant.models.category import (
    ALLOWANCE_RULES,
    DEFAULT_ALLOWANCE,
    PAID_CATEGORY,
    canonicalize,
    derive_allowed,
)
from wic_assistant.models.ledger import (
    BasketLine,
    CategoryBalance,
    UserDocument,
)
from wic_assistant.models.catalog import (
    FoodNutrient,
    NutritionFacts,
    Product,
    ScoredProduct,
)
from wic_assistant.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Category rules
    "ALLOWANCE_RULES",
    "DEFAULT_ALLOWANCE",
    "PAID_CATEGORY",
    "canonicalize",
    "derive_allowed",
    # Ledger models
    "BasketLine",
    "CategoryBalance",
    "UserDocument",
    # Catalog models
    "FoodNutrient",
    "NutritionFacts",
    "Product",
    "ScoredProduct",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
