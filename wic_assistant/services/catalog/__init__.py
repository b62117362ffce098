"""APL catalog services package."""

from wic_assistant.services.catalog.scoring import health_score, score_facts
from wic_assistant.services.catalog.service import CatalogService

__all__ = [
    "CatalogService",
    "health_score",
    "score_facts",
]
