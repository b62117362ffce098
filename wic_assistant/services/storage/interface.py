"""
Abstract Storage Interfaces

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Swap Google Sheets for a hosted document database later
2. Use in-memory storage for testing
3. Keep the ledger decoupled from storage implementation

Three collaborators sit behind these interfaces:
- Document store: one ledger document per user
- Catalog: the Approved Product List (APL), read-only
- Audit log: append-only event log
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from wic_assistant.models.audit import AuditEvent
from wic_assistant.models.catalog import Product


class DocumentStoreInterface(ABC):
    """
    Abstract interface for per-user document storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def load(self, user_id: str) -> Optional[dict[str, Any]]:
        """
        Load the document for a user.

        Args:
            user_id: The authenticated user's identity

        Returns:
            The stored mapping, or None if the user has no document yet

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def save(self, user_id: str, data: dict[str, Any]) -> bool:
        """
        Save a document with MERGE semantics.

        Top-level fields in `data` replace stored ones; stored fields
        not present in `data` are preserved.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass


class CatalogStorageInterface(ABC):
    """
    Abstract interface for the Approved Product List.

    The catalog is read-only from this application's point of view.
    """

    @abstractmethod
    async def get_product(self, upc: str) -> Optional[Product]:
        """
        Look up a product by UPC.

        Returns:
            The product if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_products(
        self,
        category: Optional[str] = None,
        eligible: Optional[bool] = None,
    ) -> list[Product]:
        """
        List products with optional filters.

        Args:
            category: Filter by category (compared in canonical form)
            eligible: Filter by eligibility flag

        Returns:
            Matching products in catalog order
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_for_user(self, user_id: str) -> list[AuditEvent]:
        """
        Get all events for a user in chronological order.
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class CatalogError(StorageError):
    """The catalog backend could not be queried."""
    pass
