"""
Audit Logger

DESIGN DECISION: Every significant session action is logged.
This provides:
1. Traceability of basket and benefit changes
2. Debugging capability
3. A visible record of persistence failures

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from wic_assistant.models.audit import AuditEvent, AuditEventBuilder
from wic_assistant.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_user_signed_in(self, user_id: str) -> None:
        await self.log(AuditEventBuilder.user_signed_in(user_id))

    async def log_user_signed_out(self, user_id: Optional[str]) -> None:
        await self.log(AuditEventBuilder.user_signed_out(user_id))

    async def log_state_loaded(
        self,
        user_id: str,
        categories: int,
        lines: int,
    ) -> None:
        await self.log(AuditEventBuilder.state_loaded(user_id, categories, lines))

    async def log_product_lookup(
        self,
        user_id: Optional[str],
        upc: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.product_lookup(
            user_id=user_id,
            upc=upc,
            found=found,
            correlation_id=correlation_id,
        ))

    async def log_item_added(
        self,
        user_id: Optional[str],
        upc: str,
        category: str,
        new_line: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.item_added(
            user_id=user_id,
            upc=upc,
            category=category,
            new_line=new_line,
            correlation_id=correlation_id,
        ))

    async def log_item_rejected(
        self,
        user_id: Optional[str],
        upc: str,
        category: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.item_rejected(
            user_id=user_id,
            upc=upc,
            category=category,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_basket_checked_out(
        self,
        user_id: Optional[str],
        lines: int,
        units: int,
    ) -> None:
        await self.log(AuditEventBuilder.basket_checked_out(user_id, lines, units))

    async def log_basket_cleared(
        self,
        user_id: Optional[str],
        lines: int,
        units: int,
    ) -> None:
        await self.log(AuditEventBuilder.basket_cleared(user_id, lines, units))

    async def log_receipt_imported(
        self,
        user_id: Optional[str],
        codes_found: int,
        products: int,
        added: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.receipt_imported(
            user_id=user_id,
            codes_found=codes_found,
            products=products,
            added=added,
            correlation_id=correlation_id,
        ))

    async def log_save_failed(self, user_id: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.save_failed(user_id, error_message))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-step action (e.g., a receipt import).
    Pass it through all subsequent operations.
    """
    return uuid4()
