"""
Audit Models for the WIC Shopping Assistant

Significant session actions are logged for audit purposes:
sign-in/out, product lookups, basket changes, checkouts and
persistence failures.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Identity
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_OUT = "user_signed_out"
    STATE_LOADED = "state_loaded"

    # Catalog
    PRODUCT_LOOKUP = "product_lookup"
    PRODUCT_NOT_FOUND = "product_not_found"

    # Basket
    ITEM_ADDED = "item_added"
    ITEM_REJECTED = "item_rejected"
    BASKET_CHECKED_OUT = "basket_checked_out"
    BASKET_CLEARED = "basket_cleared"
    RECEIPT_IMPORTED = "receipt_imported"

    # Persistence
    SAVE_FAILED = "save_failed"

    # System events
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who and what
    user_id: Optional[str] = Field(
        default=None,
        description="Signed-in user the event belongs to"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'product', 'basket', 'receipt')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity (UPC, user id, ...)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one receipt import)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, user_id, entity_type,
         entity_id, correlation_id, description, details_json,
         error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.user_id or "",
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_signed_in(user_id)
        event = AuditEventBuilder.item_added(user_id, upc, category, correlation_id)
    """

    @staticmethod
    def user_signed_in(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_IN,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="User signed in",
            is_user_action=True,
        )

    @staticmethod
    def user_signed_out(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_OUT,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="User signed out; local state cleared",
            is_user_action=True,
        )

    @staticmethod
    def state_loaded(
        user_id: str,
        categories: int,
        lines: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"Loaded {categories} balances and {lines} basket lines",
            details={
                "categories": categories,
                "basket_lines": lines,
            },
        )

    @staticmethod
    def product_lookup(
        user_id: Optional[str],
        upc: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.PRODUCT_LOOKUP
                if found
                else AuditEventType.PRODUCT_NOT_FOUND
            ),
            user_id=user_id,
            entity_type="product",
            entity_id=upc,
            correlation_id=correlation_id,
            description=(
                f"UPC {upc} found in APL" if found else f"UPC {upc} not found in APL"
            ),
            is_user_action=True,
        )

    @staticmethod
    def item_added(
        user_id: Optional[str],
        upc: str,
        category: str,
        new_line: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_ADDED,
            user_id=user_id,
            entity_type="product",
            entity_id=upc,
            correlation_id=correlation_id,
            description=f"Added {upc} to basket ({category})",
            details={
                "category": category,
                "new_line": new_line,
            },
            is_user_action=True,
        )

    @staticmethod
    def item_rejected(
        user_id: Optional[str],
        upc: str,
        category: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_REJECTED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="product",
            entity_id=upc,
            correlation_id=correlation_id,
            description=f"Could not add {upc}: {reason}",
            details={
                "category": category,
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def basket_checked_out(
        user_id: Optional[str],
        lines: int,
        units: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BASKET_CHECKED_OUT,
            user_id=user_id,
            entity_type="basket",
            entity_id=user_id,
            description=f"Checked out {units} units on {lines} lines",
            details={
                "lines": lines,
                "units": units,
            },
            is_user_action=True,
        )

    @staticmethod
    def basket_cleared(
        user_id: Optional[str],
        lines: int,
        units: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BASKET_CLEARED,
            user_id=user_id,
            entity_type="basket",
            entity_id=user_id,
            description=f"Basket abandoned; released {units} units",
            details={
                "lines": lines,
                "units": units,
            },
            is_user_action=True,
        )

    @staticmethod
    def receipt_imported(
        user_id: Optional[str],
        codes_found: int,
        products: int,
        added: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_IMPORTED,
            user_id=user_id,
            entity_type="receipt",
            correlation_id=correlation_id,
            description=f"Receipt import: {codes_found} codes, {products} APL items, {added} added",
            details={
                "codes_found": codes_found,
                "products": products,
                "added": added,
            },
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        user_id: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="Failed to persist ledger document",
            error_message=error_message,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
