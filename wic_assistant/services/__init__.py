"""Services package."""

from wic_assistant.services.catalog import CatalogService, health_score
from wic_assistant.services.storage import (
    AuditStorageInterface,
    CatalogError,
    CatalogStorageInterface,
    ConnectionError,
    DocumentStoreInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsCatalog,
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
    InMemoryAuditStorage,
    InMemoryCatalog,
    InMemoryDocumentStore,
    StorageError,
)

__all__ = [
    # Catalog services
    "CatalogService",
    "health_score",
    # Storage services
    "AuditStorageInterface",
    "CatalogError",
    "CatalogStorageInterface",
    "ConnectionError",
    "DocumentStoreInterface",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsCatalog",
    "GoogleSheetsClient",
    "GoogleSheetsDocumentStore",
    "InMemoryAuditStorage",
    "InMemoryCatalog",
    "InMemoryDocumentStore",
    "StorageError",
]
