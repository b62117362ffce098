"""
Catalog (Approved Product List) Models

The APL is an external catalog keyed by UPC. Records carry a
name, a free-text WIC category, an eligibility flag, and optional
FoodData Central style nutrient rows.

Note: APL records do NOT carry benefit caps. Caps live in the ledger.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FoodNutrient(BaseModel):
    """A single nutrient row, e.g. {'name': 'Sodium, Na', 'amount': 100, 'units': 'mg'}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    amount: float = Field(default=0.0)
    units: Optional[str] = None


class Product(BaseModel):
    """An APL product."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    upc: str = Field(
        ...,
        min_length=1,
        description="Universal Product Code (catalog key)"
    )
    name: str = Field(default="Unknown")
    category: str = Field(
        default="",
        description="Category as written in the APL (not canonicalized)"
    )
    eligible: bool = Field(
        default=True,
        description="Whether the product may be bought with benefits"
    )
    food_nutrients: list[FoodNutrient] = Field(
        default_factory=list,
        alias="foodNutrients",
    )

    @property
    def has_nutrients(self) -> bool:
        return bool(self.food_nutrients)


class ScoredProduct(Product):
    """A product ranked by health score (lower = healthier)."""

    health_score: float = Field(
        ...,
        alias="healthScore",
    )


class NutritionFacts(BaseModel):
    """
    Per-serving nutrition summary used for badges and scoring.

    Units: calories in kcal, sodium in mg, everything else in grams.
    """

    calories: float = 0.0
    total_fat: float = 0.0
    saturated_fat: float = 0.0
    trans_fat: float = 0.0
    sodium: float = 0.0
    sugar: float = 0.0
    added_sugar: float = 0.0
    protein: float = 0.0
    fiber: float = 0.0
