"""
Nutrition facts from APL nutrient rows.

APL products carry FoodData Central style rows such as
{'name': 'Sodium, Na', 'amount': 100, 'units': 'mg'}. Basket lines keep
a flat {field: amount} snapshot keyed by NutritionFacts field names.
"""

from typing import Iterable, Mapping, Optional, Union

from wic_assistant.models.catalog import FoodNutrient, NutritionFacts, Product

# FDC nutrient name (lower-cased) -> NutritionFacts field
NUTRIENT_FIELDS: dict[str, str] = {
    "energy": "calories",
    "total lipid (fat)": "total_fat",
    "fatty acids, total saturated": "saturated_fat",
    "fatty acids, total trans": "trans_fat",
    "sodium, na": "sodium",
    "total sugars": "sugar",
    "sugars, total including nlea": "sugar",
    "sugars, added": "added_sugar",
    "protein": "protein",
    "fiber, total dietary": "fiber",
}

NutrientRows = Iterable[Union[FoodNutrient, Mapping]]


def _rows(source: Union[Product, NutrientRows]) -> list[FoodNutrient]:
    if isinstance(source, Product):
        return list(source.food_nutrients)
    rows = []
    for row in source:
        if isinstance(row, FoodNutrient):
            rows.append(row)
        elif isinstance(row, Mapping) and row.get("name"):
            try:
                rows.append(FoodNutrient.model_validate(row))
            except ValueError:
                continue
    return rows


def build_nutrition(source: Union[Product, NutrientRows]) -> Optional[dict[str, float]]:
    """
    Flatten nutrient rows into a {field: amount} snapshot.

    Unknown nutrients are ignored. Energy rows in kJ are skipped so
    calories stay in kcal. Returns None when nothing was recognized.
    """
    nutrition: dict[str, float] = {}
    for row in _rows(source):
        field = NUTRIENT_FIELDS.get(row.name.strip().lower())
        if field is None:
            continue
        if field == "calories" and (row.units or "").lower() == "kj":
            continue
        # First matching row wins (e.g. "Total Sugars" before the NLEA variant)
        nutrition.setdefault(field, float(row.amount))
    return nutrition or None


def to_facts(nutrition: Optional[Mapping[str, float]]) -> NutritionFacts:
    """NutritionFacts from a snapshot; missing values count as zero."""
    if not nutrition:
        return NutritionFacts()
    known = set(NutritionFacts.model_fields)
    return NutritionFacts(**{k: v for k, v in nutrition.items() if k in known})
