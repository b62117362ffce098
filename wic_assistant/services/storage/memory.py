"""
In-Memory Storage Implementation

Used by tests and for local runs without Google credentials.
Documents are deep-copied on the way in and out so callers never
share mutable state with the store.
"""

import copy
from typing import Any, Iterable, Optional

from wic_assistant.models.audit import AuditEvent
from wic_assistant.models.catalog import Product
from wic_assistant.models.category import canonicalize
from wic_assistant.services.storage.interface import (
    AuditStorageInterface,
    CatalogStorageInterface,
    DocumentStoreInterface,
)


class InMemoryDocumentStore(DocumentStoreInterface):
    """Dict-backed document store with merge-on-save."""

    def __init__(self, documents: Optional[dict[str, dict[str, Any]]] = None):
        self.documents: dict[str, dict[str, Any]] = copy.deepcopy(documents or {})
        self.save_count = 0

    async def load(self, user_id: str) -> Optional[dict[str, Any]]:
        document = self.documents.get(user_id)
        return copy.deepcopy(document) if document is not None else None

    async def save(self, user_id: str, data: dict[str, Any]) -> bool:
        self.documents.setdefault(user_id, {}).update(copy.deepcopy(data))
        self.save_count += 1
        return True


class InMemoryCatalog(CatalogStorageInterface):
    """List-backed APL catalog."""

    def __init__(self, products: Iterable[Product] = ()):
        self._products: dict[str, Product] = {}
        for product in products:
            self.add(product)

    def add(self, product: Product) -> None:
        self._products[product.upc] = product

    async def get_product(self, upc: str) -> Optional[Product]:
        return self._products.get(upc)

    async def list_products(
        self,
        category: Optional[str] = None,
        eligible: Optional[bool] = None,
    ) -> list[Product]:
        canon = canonicalize(category) if category is not None else None
        return [
            product
            for product in self._products.values()
            if (canon is None or canonicalize(product.category) == canon)
            and (eligible is None or product.eligible == eligible)
        ]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_for_user(self, user_id: str) -> list[AuditEvent]:
        events = [e for e in self.events if e.user_id == user_id]
        events.sort(key=lambda e: e.timestamp)
        return events
