"""
Shopping Session Orchestrator

This module ties together the ledger, the APL catalog and the audit
log, and defines the end-to-end flows screens call into:
1. Auth change (identity -> clear or load ledger)
2. Scan (UPC -> eligibility -> add to basket)
3. Alternatives (cap reached or healthier options)
4. Receipt import (OCR text -> UPCs -> APL -> basket)
5. Checkout / abandon

DESIGN DECISION: The session owns exactly one ledger for one user.
There is no global state; callers create a session per signed-in app.
"""

from typing import Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from wic_assistant.audit import AuditLogger, create_correlation_id
from wic_assistant.config import AppSettings, get_settings
from wic_assistant.ledger import BenefitLedger, DocumentWriter
from wic_assistant.models.catalog import Product, ScoredProduct
from wic_assistant.models.category import canonicalize
from wic_assistant.nutrition import build_nutrition
from wic_assistant.receipts import ReceiptScan, extract_upcs, find_upc_codes
from wic_assistant.services.catalog import CatalogService
from wic_assistant.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsCatalog,
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
    InMemoryCatalog,
    InMemoryDocumentStore,
)


logger = structlog.get_logger(__name__)


class EligibilityResult(BaseModel):
    """Outcome of checking one scanned or typed UPC."""

    upc: str
    found: bool
    product: Optional[Product] = None
    eligible: bool = False
    can_add: bool = False
    message: str = Field(
        ...,
        description="Short user-facing summary"
    )


class ShoppingSession:
    """
    Orchestrates the shopping flows for one signed-in user.

    Every flow is audited when an audit logger is configured.
    """

    def __init__(
        self,
        ledger: BenefitLedger,
        catalog: CatalogService,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self.ledger = ledger
        self._catalog = catalog
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().app

    @property
    def user_id(self) -> Optional[str]:
        return self.ledger.user_id

    async def on_auth_changed(self, user_id: Optional[str]) -> None:
        """
        Apply an identity change from the auth provider.

        Signing out clears all local state; signing in loads the
        user's document.
        """
        previous = self.ledger.user_id
        if user_id is None:
            await self.ledger.update_user(None)
            if self._audit_logger:
                await self._audit_logger.log_user_signed_out(previous)
            return

        if self._audit_logger:
            await self._audit_logger.log_user_signed_in(user_id)

        try:
            await self.ledger.update_user(user_id)
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_external_service_error(
                    service="document_store",
                    error_message=str(e),
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_state_loaded(
                user_id=user_id,
                categories=len(self.ledger.balances),
                lines=len(self.ledger.basket),
            )

    async def check_eligibility(
        self,
        code: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[EligibilityResult]:
        """
        Look up a scanned code in the APL.

        Returns None for a blank code. Never touches the basket.
        """
        upc = code.strip()
        if not upc:
            return None

        try:
            product = await self._catalog.find_by_upc(upc)
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_external_service_error(
                    service="catalog",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_product_lookup(
                user_id=self.user_id,
                upc=upc,
                found=product is not None,
                correlation_id=correlation_id,
            )

        if product is None:
            return EligibilityResult(
                upc=upc,
                found=False,
                message=f"UPC {upc} not found in APL",
            )

        can_add = product.eligible and self.ledger.can_add(product.category)
        if not product.eligible:
            message = f"{product.name} ({product.category}) - Not eligible"
        elif not can_add:
            message = f"{product.name} ({product.category}) - Category limit reached"
        else:
            message = f"{product.name} ({product.category}) - Eligible!"

        return EligibilityResult(
            upc=upc,
            found=True,
            product=product,
            eligible=product.eligible,
            can_add=can_add,
            message=message,
        )

    async def add_product(
        self,
        product: Product,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Add one unit of a looked-up product to the basket.

        Returns True if a unit was added (new line or quantity bump),
        False if the product is ineligible or its category is full.
        """
        reason = None
        if not product.eligible:
            reason = "not eligible"
        elif not self.ledger.can_add(product.category):
            reason = "category limit reached"
        elif self.user_id is None:
            reason = "no signed-in user"

        if reason is not None:
            if self._audit_logger:
                await self._audit_logger.log_item_rejected(
                    user_id=self.user_id,
                    upc=product.upc,
                    category=canonicalize(product.category),
                    reason=reason,
                    correlation_id=correlation_id,
                )
            return False

        new_line = self.ledger.add_item(
            upc=product.upc,
            name=product.name,
            category=product.category,
            nutrition=build_nutrition(product),
        )

        if self._audit_logger:
            await self._audit_logger.log_item_added(
                user_id=self.user_id,
                upc=product.upc,
                category=canonicalize(product.category),
                new_line=new_line,
                correlation_id=correlation_id,
            )
        return True

    async def substitutes_for(self, product: Product) -> list[Product]:
        """Other eligible products in the same category."""
        limit = self._settings.substitutes_limit
        # Ask for one extra in case the product itself comes back
        candidates = await self._catalog.substitutes(product.category, limit=limit + 1)
        return [p for p in candidates if p.upc != product.upc][:limit]

    async def healthier_alternatives(self, product: Product) -> list[ScoredProduct]:
        """Healthier eligible products in the same category."""
        return await self._catalog.healthier_substitutes(
            category=product.category,
            base_product=product,
            limit=self._settings.healthier_limit,
        )

    async def scan_receipt_text(self, text: str) -> ReceiptScan:
        """
        Match the UPCs on OCR'd receipt text against the APL.

        Only eligible APL products are kept, once each, in receipt order;
        an APL hit flagged ineligible is counted but never added.
        """
        length = self._settings.upc_length
        codes_found = len(find_upc_codes(text, length))

        products = []
        for upc in extract_upcs(text, length):
            product = await self._catalog.find_by_upc(upc)
            if product is not None and product.eligible:
                products.append(product)

        logger.info(
            "receipt_scanned",
            codes_found=codes_found,
            products=len(products),
        )
        return ReceiptScan(codes_found=codes_found, products=products)

    def add_receipt_items(self, scan: ReceiptScan) -> int:
        """
        Add every receipt product to the basket.

        Returns the number of new basket lines created.
        """
        added = 0
        for product in scan.products:
            if self.ledger.add_item(
                upc=product.upc,
                name=product.name,
                category=product.category,
                nutrition=build_nutrition(product),
            ):
                added += 1
        return added

    async def import_receipt(self, text: str) -> tuple[ReceiptScan, int]:
        """
        Scan receipt text and add what was found.

        Returns:
            (scan, number_of_new_lines)
        """
        correlation_id = create_correlation_id()
        scan = await self.scan_receipt_text(text)
        added = self.add_receipt_items(scan)

        if self._audit_logger:
            await self._audit_logger.log_receipt_imported(
                user_id=self.user_id,
                codes_found=scan.codes_found,
                products=len(scan.products),
                added=added,
                correlation_id=correlation_id,
            )
        return scan, added

    async def checkout(self) -> None:
        """Complete the purchase and start a fresh benefit period."""
        lines = self.ledger.basket
        await self.ledger.checkout()

        if self._audit_logger:
            await self._audit_logger.log_basket_checked_out(
                user_id=self.user_id,
                lines=len(lines),
                units=sum(line.qty for line in lines),
            )

    async def abandon_basket(self) -> None:
        """Drop the basket and release its units back to the balances."""
        lines = self.ledger.basket
        self.ledger.clear_basket()
        await self.ledger.flush()

        if self._audit_logger:
            await self._audit_logger.log_basket_cleared(
                user_id=self.user_id,
                lines=len(lines),
                units=sum(line.qty for line in lines),
            )


def create_app_components(
    use_storage: bool = True,
) -> tuple[ShoppingSession, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to run against in-memory stores.

    Returns:
        (shopping_session, sheets_client)
    """
    sheets_client = None

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            document_store = GoogleSheetsDocumentStore(sheets_client)
            catalog_storage = GoogleSheetsCatalog(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            use_storage = False

    if not use_storage:
        sheets_client = None
        document_store = InMemoryDocumentStore()
        catalog_storage = InMemoryCatalog()
        audit_logger = AuditLogger()  # Local-only logging

    writer = DocumentWriter(document_store, audit_logger)
    ledger = BenefitLedger(document_store, writer=writer, audit_logger=audit_logger)
    session = ShoppingSession(
        ledger=ledger,
        catalog=CatalogService(catalog_storage),
        audit_logger=audit_logger,
    )
    return session, sheets_client
