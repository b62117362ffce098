"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the hosted backend because:
1. Program staff can view the APL and user balances directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (one row per user is fine)
- No transactions (last write wins, which matches the single-writer ledger)
- Limited query capabilities (we filter in Python)

Documents are stored one row per user. The ledger-owned fields get
their own JSON columns; any other top-level fields are merged into
an `extra_json` column so merge semantics hold.
"""

import json
from datetime import datetime
from typing import Any, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from wic_assistant.config import get_settings
from wic_assistant.models.audit import AuditEvent, AuditEventType, AuditSeverity
from wic_assistant.models.catalog import FoodNutrient, Product
from wic_assistant.models.category import canonicalize
from wic_assistant.services.storage.interface import (
    AuditStorageInterface,
    CatalogError,
    CatalogStorageInterface,
    ConnectionError,
    DocumentStoreInterface,
    StorageError,
)


# Column mappings for Users sheet
USER_COLUMNS = [
    "user_id",
    "balances_json",
    "basket_json",
    "updated_at",
    "extra_json",
]

# Column mappings for APL sheet
APL_COLUMNS = [
    "upc",
    "name",
    "category",
    "eligible",
    "food_nutrients_json",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "user_id",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]

# Fields stored in dedicated columns; everything else goes to extra_json
_LEDGER_FIELDS = ("balances", "basket", "updated_at")


def _safe_get(row: list, index: int, default: str = "") -> str:
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_users_sheet(self) -> gspread.Worksheet:
        """Get or create the Users worksheet."""
        return self._get_or_create_sheet(
            self._settings.users_sheet_name, USER_COLUMNS, rows=1000
        )

    def get_apl_sheet(self) -> gspread.Worksheet:
        """Get or create the APL worksheet."""
        return self._get_or_create_sheet(
            self._settings.apl_sheet_name, APL_COLUMNS, rows=5000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


class GoogleSheetsDocumentStore(DocumentStoreInterface):
    """
    Google Sheets implementation of the per-user document store.

    One row per user. `balances` and `basket` are JSON-serialized.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _find_row(self, sheet: gspread.Worksheet, user_id: str) -> tuple[Optional[int], list]:
        """Return (1-based row index, row) for a user, or (None, [])."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
            if row and row[0] == user_id:
                return idx, row
        return None, []

    def _row_to_document(self, row: list) -> dict[str, Any]:
        document: dict[str, Any] = {}
        extra_json = _safe_get(row, 4)
        if extra_json:
            document.update(json.loads(extra_json))

        balances_json = _safe_get(row, 1)
        basket_json = _safe_get(row, 2)
        document["balances"] = json.loads(balances_json) if balances_json else {}
        document["basket"] = json.loads(basket_json) if basket_json else []
        if _safe_get(row, 3):
            document["updated_at"] = _safe_get(row, 3)
        return document

    def _document_to_row(self, user_id: str, document: dict[str, Any]) -> list:
        extra = {k: v for k, v in document.items() if k not in _LEDGER_FIELDS}
        return [
            user_id,
            json.dumps(document.get("balances", {})),
            json.dumps(document.get("basket", [])),
            str(document.get("updated_at") or datetime.utcnow().isoformat()),
            json.dumps(extra) if extra else "",
        ]

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def load(self, user_id: str) -> Optional[dict[str, Any]]:
        """Load a user's document."""
        try:
            sheet = self._client.get_users_sheet()
            _, row = self._find_row(sheet, user_id)
            if not row:
                return None
            return self._row_to_document(row)
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load document for {user_id}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save(self, user_id: str, data: dict[str, Any]) -> bool:
        """Save a user's document, merging with what is stored."""
        try:
            sheet = self._client.get_users_sheet()
            idx, row = self._find_row(sheet, user_id)

            merged = self._row_to_document(row) if row else {}
            merged.update(data)
            new_row = self._document_to_row(user_id, merged)

            if idx is None:
                sheet.append_row(new_row, value_input_option="RAW")
            else:
                sheet.update(
                    range_name=f"A{idx}:E{idx}",
                    values=[new_row],
                    value_input_option="RAW",
                )
            return True
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save document for {user_id}: {e}")


class GoogleSheetsCatalog(CatalogStorageInterface):
    """
    Google Sheets implementation of the APL catalog.

    Products are rows; nutrient rows are JSON-serialized.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_product(self, row: list) -> Product:
        nutrients_json = _safe_get(row, 4)
        nutrients = (
            [FoodNutrient(**n) for n in json.loads(nutrients_json)]
            if nutrients_json
            else []
        )
        eligible = _safe_get(row, 3, "true").strip().lower() not in ("false", "0", "no")
        return Product(
            upc=_safe_get(row, 0).strip(),
            name=_safe_get(row, 1, "Unknown"),
            category=_safe_get(row, 2),
            eligible=eligible,
            food_nutrients=nutrients,
        )

    def _all_products(self) -> list[Product]:
        sheet = self._client.get_apl_sheet()
        all_rows = sheet.get_all_values()[1:]  # Skip header

        products = []
        for row in all_rows:
            if not row or not row[0].strip():  # Skip empty rows
                continue
            try:
                products.append(self._row_to_product(row))
            except Exception:
                continue  # Skip malformed rows
        return products

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def get_product(self, upc: str) -> Optional[Product]:
        """Look up a product by UPC."""
        try:
            for product in self._all_products():
                if product.upc == upc:
                    return product
            return None
        except Exception as e:
            raise CatalogError(f"Failed to look up UPC {upc}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def list_products(
        self,
        category: Optional[str] = None,
        eligible: Optional[bool] = None,
    ) -> list[Product]:
        """List products with optional filters."""
        try:
            canon = canonicalize(category) if category is not None else None
            return [
                product
                for product in self._all_products()
                if (canon is None or canonicalize(product.category) == canon)
                and (eligible is None or product.eligible == eligible)
            ]
        except Exception as e:
            raise CatalogError(f"Failed to list products: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        return AuditEvent(
            event_id=_safe_get(row, 0),
            timestamp=datetime.fromisoformat(_safe_get(row, 1)),
            event_type=AuditEventType(_safe_get(row, 2)),
            severity=AuditSeverity(_safe_get(row, 3)),
            user_id=_safe_get(row, 4) or None,
            entity_type=_safe_get(row, 5) or None,
            entity_id=_safe_get(row, 6) or None,
            correlation_id=_safe_get(row, 7) or None,
            description=_safe_get(row, 8),
            details=json.loads(_safe_get(row, 9)) if _safe_get(row, 9) else {},
            error_message=_safe_get(row, 10) or None,
            is_user_action=_safe_get(row, 11).lower() == "true",
        )

    def _read_events(self) -> list[AuditEvent]:
        sheet = self._client.get_audit_sheet()
        events = []
        for row in sheet.get_all_values()[1:]:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except Exception:
                    continue
        return events

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    async def get_events_for_user(self, user_id: str) -> list[AuditEvent]:
        """Get events for a user, oldest first."""
        try:
            events = [e for e in self._read_events() if e.user_id == user_id]
            events.sort(key=lambda e: e.timestamp)
            return events
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
