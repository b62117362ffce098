"""
APL Catalog Service

Looks up products by UPC and suggests alternatives in the same
category: plain eligible substitutes (when a category cap is hit)
and healthier substitutes ranked by health score.

Lookups never mutate the ledger. An unknown UPC is a normal
outcome (None), not an error.
"""

from typing import Optional

import structlog

from wic_assistant.config import HealthScoreSettings, get_settings
from wic_assistant.models.catalog import Product, ScoredProduct
from wic_assistant.nutrition import build_nutrition
from wic_assistant.services.catalog.scoring import health_score
from wic_assistant.services.storage import CatalogStorageInterface


logger = structlog.get_logger(__name__)


class CatalogService:
    """Read-side API over the Approved Product List."""

    def __init__(
        self,
        storage: CatalogStorageInterface,
        weights: Optional[HealthScoreSettings] = None,
    ):
        self._storage = storage
        self._weights = weights or get_settings().health_score

    async def find_by_upc(self, upc: str) -> Optional[Product]:
        """
        Look up a product by UPC.

        Returns None for blank or unknown codes.
        """
        upc = upc.strip()
        if not upc:
            return None
        product = await self._storage.get_product(upc)
        if product is None:
            logger.info("upc_not_found", upc=upc)
        return product

    async def substitutes(
        self,
        category: str,
        eligible: bool = True,
        limit: int = 3,
    ) -> list[Product]:
        """Products in the same category, in catalog order, up to `limit`."""
        if limit <= 0:
            return []
        products = await self._storage.list_products(category=category, eligible=eligible)
        return products[:limit]

    async def healthier_substitutes(
        self,
        category: str,
        base_product: Product,
        limit: int = 5,
    ) -> list[ScoredProduct]:
        """
        Eligible products in `category` that score strictly better than
        `base_product`, healthiest first, up to `limit`.

        Candidates without nutrient data cannot be ranked and are skipped.
        """
        if limit <= 0:
            return []

        base_score = health_score(base_product, self._weights)
        candidates = await self._storage.list_products(category=category, eligible=True)

        scored = []
        for candidate in candidates:
            if candidate.upc == base_product.upc:
                continue
            if build_nutrition(candidate) is None:
                continue
            score = health_score(candidate, self._weights)
            if score < base_score:
                scored.append(ScoredProduct(
                    **candidate.model_dump(),
                    health_score=score,
                ))

        scored.sort(key=lambda p: p.health_score)
        logger.debug(
            "healthier_substitutes",
            category=category,
            base_upc=base_product.upc,
            base_score=base_score,
            found=len(scored),
        )
        return scored[:limit]
