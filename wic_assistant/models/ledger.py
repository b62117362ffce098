"""
Benefit Ledger Models

These models define the per-user state persisted to the document store:
- CategoryBalance: consumption against one WIC category's allowance
- BasketLine: one product entry in the active basket
- UserDocument: the whole persisted document (balances + basket)

DESIGN DECISION: The store holds untyped maps. We deserialize and
validate ONCE at the store boundary (UserDocument.from_store) so the
ledger only ever works with typed records.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from wic_assistant.models.category import canonicalize, derive_allowed


class CategoryBalance(BaseModel):
    """
    Usage counter for one canonical WIC category.

    allowed=None means unlimited (CVB, fruits/vegetables, PAID).
    """

    category: str = Field(
        ...,
        description="Canonical category key"
    )
    allowed: Optional[int] = Field(
        default=None,
        gt=0,
        description="Maximum units allowed (None = unlimited)"
    )
    used: int = Field(
        default=0,
        ge=0,
        description="Units currently charged to this category"
    )

    @classmethod
    def for_category(cls, category: str) -> "CategoryBalance":
        """Fresh balance with the default allowance for this category."""
        canon = canonicalize(category)
        return cls(category=canon, allowed=derive_allowed(canon), used=0)

    @property
    def is_unlimited(self) -> bool:
        return self.allowed is None

    @property
    def has_capacity(self) -> bool:
        """True if another unit can be charged to this category."""
        return self.allowed is None or self.used < self.allowed

    @property
    def remaining(self) -> Optional[int]:
        """Units left before the cap, None when unlimited."""
        if self.allowed is None:
            return None
        return max(self.allowed - self.used, 0)


class BasketLine(BaseModel):
    """
    One product entry in the basket.

    A UPC may have two lines at once: one under its WIC category and
    one under PAID for units bought past the category cap.
    """

    upc: str
    name: str = ""
    category: str = Field(
        ...,
        description="Canonical category key"
    )
    qty: int = Field(
        default=1,
        ge=1,
        description="Quantity; the line is removed instead of reaching 0"
    )
    nutrition: Optional[dict[str, float]] = Field(
        default=None,
        description="Nutrient name -> amount snapshot taken at add-time"
    )

    def matches(self, upc: str, category: str) -> bool:
        return self.upc == upc and self.category == category


class UserDocument(BaseModel):
    """
    The ledger document stored per user.

    The ledger is the sole writer of `balances` and `basket`.
    Other fields on the stored document are preserved by the store's
    merge semantics.
    """

    model_config = ConfigDict(validate_assignment=False)

    balances: dict[str, CategoryBalance] = Field(default_factory=dict)
    basket: list[BasketLine] = Field(default_factory=list)
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When this snapshot was taken"
    )

    @classmethod
    def from_store(cls, data: Optional[dict[str, Any]]) -> "UserDocument":
        """
        Build a document from raw store data.

        Lenient: malformed entries are coerced (bad `used` -> 0,
        bad `qty` -> 1, absent or bad `allowed` -> unlimited) or
        skipped, never raised.
        """
        if not data:
            return cls()

        balances: dict[str, CategoryBalance] = {}
        raw_balances = data.get("balances")
        if isinstance(raw_balances, dict):
            for key, value in raw_balances.items():
                canon = canonicalize(key)
                if not canon:
                    continue
                value = value if isinstance(value, dict) else {}
                balances[canon] = CategoryBalance(
                    category=canon,
                    allowed=_parse_allowed(value.get("allowed")),
                    used=_parse_int(value.get("used"), minimum=0, default=0),
                )

        basket: list[BasketLine] = []
        raw_basket = data.get("basket")
        if isinstance(raw_basket, list):
            for entry in raw_basket:
                if not isinstance(entry, dict):
                    continue
                basket.append(BasketLine(
                    upc=str(entry.get("upc") or ""),
                    name=str(entry.get("name") or ""),
                    category=canonicalize(entry.get("category") or ""),
                    qty=_parse_int(entry.get("qty"), minimum=1, default=1),
                    nutrition=_parse_nutrition(entry.get("nutrition")),
                ))

        return cls(balances=balances, basket=basket)

    def to_store(self) -> dict[str, Any]:
        """Plain mapping written to the document store."""
        return {
            "balances": {
                key: {"allowed": balance.allowed, "used": balance.used}
                for key, balance in self.balances.items()
            },
            "basket": [
                line.model_dump(mode="json", exclude_none=True)
                for line in self.basket
            ],
            "updated_at": self.updated_at.isoformat(),
        }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_int(value: Any, minimum: int, default: int) -> int:
    if _is_int(value) and value >= minimum:
        return value
    return default


def _parse_allowed(value: Any) -> Optional[int]:
    # Absent, null, non-integer and non-positive caps all mean unlimited
    if _is_int(value) and value > 0:
        return value
    return None


def _parse_nutrition(value: Any) -> Optional[dict[str, float]]:
    if not isinstance(value, dict):
        return None
    parsed = {
        str(k): float(v)
        for k, v in value.items()
        if isinstance(v, (int, float)) and not isinstance(v, bool)
    }
    return parsed or None
