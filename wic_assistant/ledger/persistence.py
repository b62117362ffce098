"""
Write-Through Persistence for the Benefit Ledger

DESIGN DECISION: Ledger mutations are synchronous and the in-memory
state is authoritative for the session. Durable writes go through
this writer instead of unobserved background futures:

- submit() records the latest document per user (last write wins)
- if an event loop is running, a flush task is scheduled and tracked
- flush() drains pending writes one at a time under a lock

FAILURE POLICY: log-and-continue. A StorageError is logged and
audited, the in-memory mutation is NEVER rolled back, and the
backend's own tenacity retry is the only retry.
"""

import asyncio
from typing import Any, Optional

import structlog

from wic_assistant.audit import AuditLogger
from wic_assistant.services.storage import DocumentStoreInterface, StorageError


logger = structlog.get_logger(__name__)


class DocumentWriter:
    """Coalescing write queue in front of a DocumentStoreInterface."""

    def __init__(
        self,
        store: DocumentStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger
        self._pending: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self.last_error: Optional[str] = None

    @property
    def pending(self) -> int:
        """Number of users with an unwritten document."""
        return len(self._pending)

    def submit(self, user_id: str, document: dict[str, Any]) -> None:
        """
        Queue a document for writing.

        Never blocks. Outside a running event loop the write waits
        for an explicit flush().
        """
        # Re-insert so the newest submission is written last
        self._pending.pop(user_id, None)
        self._pending[user_id] = document

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return

        if self._task is None or self._task.done():
            self._task = loop.create_task(self.flush())
            self._task.add_done_callback(self._on_task_done)

    async def flush(self) -> bool:
        """
        Write every pending document.

        Returns True if all writes succeeded.
        """
        ok = True
        async with self._lock:
            while self._pending:
                user_id = next(iter(self._pending))
                document = self._pending.pop(user_id)
                if not await self._write(user_id, document):
                    ok = False
        return ok

    async def _write(self, user_id: str, document: dict[str, Any]) -> bool:
        try:
            await self._store.save(user_id, document)
        except StorageError as e:
            self.last_error = str(e)
            logger.error("ledger_save_failed", user_id=user_id, error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_save_failed(user_id, str(e))
            return False

        logger.debug("ledger_saved", user_id=user_id)
        return True

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.last_error = str(exc)
            logger.error(
                "ledger_flush_crashed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
