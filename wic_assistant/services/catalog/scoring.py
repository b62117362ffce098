"""
Nutrition health score.

score = energy*w_energy + sugar*w_sugar + sodium*w_sodium
        + (saturated + trans fat)*w_fat
        - fiber*w_fiber - protein*w_protein

Lower (more negative) is healthier.
"""

from typing import Optional

from wic_assistant.config import HealthScoreSettings
from wic_assistant.models.catalog import NutritionFacts, Product
from wic_assistant.nutrition import build_nutrition, to_facts


def score_facts(
    facts: NutritionFacts,
    weights: Optional[HealthScoreSettings] = None,
) -> float:
    w = weights or HealthScoreSettings()
    penalty = (
        facts.calories * w.energy_weight
        + facts.sugar * w.sugar_weight
        + facts.sodium * w.sodium_weight
        + (facts.saturated_fat + facts.trans_fat) * w.fat_weight
    )
    bonus = facts.fiber * w.fiber_weight + facts.protein * w.protein_weight
    return round(penalty - bonus, 4)


def health_score(
    product: Product,
    weights: Optional[HealthScoreSettings] = None,
) -> float:
    """Score a product; one with no recognized nutrients scores 0.0."""
    return score_facts(to_facts(build_nutrition(product)), weights)
