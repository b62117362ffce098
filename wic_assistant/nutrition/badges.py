"""
Nutritional badges shown next to basket items.

Thresholds are per serving.
"""

from enum import Enum
from typing import Mapping, Optional, Union

from wic_assistant.models.catalog import NutritionFacts
from wic_assistant.nutrition.facts import to_facts

LOW_FAT_THRESHOLD = 3  # grams
LOW_SODIUM_THRESHOLD = 140  # mg
LOW_SUGAR_THRESHOLD = 5  # grams
HIGH_PROTEIN_THRESHOLD = 10  # grams
LOW_CALORIE_THRESHOLD = 120  # calories
HEART_HEALTHY_MAX_SATURATED_FAT = 1  # grams
HEART_HEALTHY_MAX_SODIUM = 140  # mg


class NutritionalBadge(str, Enum):
    LOW_FAT = "low_fat"
    LOW_SODIUM = "low_sodium"
    LOW_SUGAR = "low_sugar"
    HIGH_PROTEIN = "high_protein"
    LOW_CALORIE = "low_calorie"
    HEART_HEALTHY = "heart_healthy"

    @property
    def label(self) -> str:
        """Display label, e.g. 'Heart Healthy'."""
        return self.value.replace("_", " ").title()


def get_badges(
    nutrition: Union[NutritionFacts, Mapping[str, float], None],
) -> list[NutritionalBadge]:
    """Badges earned by a product, in display order."""
    if nutrition is None:
        return []
    facts: NutritionFacts = (
        nutrition if isinstance(nutrition, NutritionFacts) else to_facts(nutrition)
    )

    badges = []
    if facts.total_fat <= LOW_FAT_THRESHOLD:
        badges.append(NutritionalBadge.LOW_FAT)
    if facts.sodium <= LOW_SODIUM_THRESHOLD:
        badges.append(NutritionalBadge.LOW_SODIUM)
    if facts.sugar <= LOW_SUGAR_THRESHOLD:
        badges.append(NutritionalBadge.LOW_SUGAR)
    if facts.protein >= HIGH_PROTEIN_THRESHOLD:
        badges.append(NutritionalBadge.HIGH_PROTEIN)
    if facts.calories <= LOW_CALORIE_THRESHOLD:
        badges.append(NutritionalBadge.LOW_CALORIE)
    if (
        facts.saturated_fat <= HEART_HEALTHY_MAX_SATURATED_FAT
        and facts.sodium <= HEART_HEALTHY_MAX_SODIUM
    ):
        badges.append(NutritionalBadge.HEART_HEALTHY)
    return badges


def badge_labels(nutrition: Optional[Mapping[str, float]]) -> list[str]:
    return [badge.label for badge in get_badges(nutrition)]
