"""Nutrition facts and badges."""

from wic_assistant.nutrition.facts import NUTRIENT_FIELDS, build_nutrition, to_facts
from wic_assistant.nutrition.badges import NutritionalBadge, badge_labels, get_badges

__all__ = [
    "NUTRIENT_FIELDS",
    "NutritionalBadge",
    "badge_labels",
    "build_nutrition",
    "get_badges",
    "to_facts",
]
