"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the hosted backend; in-memory stores back tests and local runs.
"""

from wic_assistant.services.storage.interface import (
    AuditStorageInterface,
    CatalogError,
    CatalogStorageInterface,
    ConnectionError,
    DocumentStoreInterface,
    StorageError,
)
from wic_assistant.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryCatalog,
    InMemoryDocumentStore,
)
from wic_assistant.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsCatalog,
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "CatalogStorageInterface",
    "DocumentStoreInterface",
    # Exceptions
    "CatalogError",
    "ConnectionError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryCatalog",
    "InMemoryDocumentStore",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsCatalog",
    "GoogleSheetsClient",
    "GoogleSheetsDocumentStore",
]
