"""
Benefit Ledger

Holds one signed-in user's WIC benefit balances and shopping basket,
enforces category caps, and writes every change through to the
document store.

RULES:
1. Balances are created lazily with a default cap (see models.category)
2. add_item NEVER exceeds a cap - it rejects instead
3. increment_item past a cap charges the extra unit to PAID
4. decrement_item drains PAID units before benefit units
5. Mutations never raise for expected conditions and never wait on storage

Mutation methods are synchronous; the in-memory state is authoritative
for the session regardless of persistence outcome.
"""

from typing import Callable, Optional

import structlog

from wic_assistant.audit import AuditLogger
from wic_assistant.ledger.persistence import DocumentWriter
from wic_assistant.models.category import PAID_CATEGORY, canonicalize
from wic_assistant.models.ledger import BasketLine, CategoryBalance, UserDocument
from wic_assistant.services.storage import DocumentStoreInterface


logger = structlog.get_logger(__name__)

Listener = Callable[[], None]


class BenefitLedger:
    """
    Per-user benefit balances and basket.

    Wire identity changes from the auth provider into update_user().
    UIs observe changes through subscribe().
    """

    def __init__(
        self,
        store: DocumentStoreInterface,
        writer: Optional[DocumentWriter] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._writer = writer or DocumentWriter(store, audit_logger)
        self._user_id: Optional[str] = None
        self._balances: dict[str, CategoryBalance] = {}
        self._basket: list[BasketLine] = []
        self._balances_loaded = False
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def balances_loaded(self) -> bool:
        """True once load_user_state() has finished for the current user."""
        return self._balances_loaded

    @property
    def balances(self) -> dict[str, CategoryBalance]:
        """Copy of the balances, keyed by canonical category."""
        return {k: v.model_copy() for k, v in self._balances.items()}

    @property
    def basket(self) -> tuple[BasketLine, ...]:
        """Copy of the basket lines in insertion order."""
        return tuple(line.model_copy(deep=True) for line in self._basket)

    def balance_for(self, category: str) -> Optional[CategoryBalance]:
        balance = self._balances.get(canonicalize(category))
        return balance.model_copy() if balance else None

    def lines_for(self, upc: str) -> list[BasketLine]:
        """All basket lines for a UPC (benefit line and/or PAID line)."""
        return [line.model_copy(deep=True) for line in self._basket if line.upc == upc]

    def remaining(self, category: str) -> Optional[int]:
        """Units left in a category; None when unlimited or never seen."""
        balance = self._balances.get(canonicalize(category))
        return balance.remaining if balance else None

    def snapshot(self) -> UserDocument:
        return UserDocument(
            balances=self.balances,
            basket=list(self.basket),
        )

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called after every state change.

        Returns a function that unregisters it.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("ledger_listener_failed")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _clear(self) -> None:
        self._balances = {}
        self._basket = []
        self._balances_loaded = False

    def _ensure_category(self, canon: str) -> CategoryBalance:
        balance = self._balances.get(canon)
        if balance is None:
            balance = CategoryBalance.for_category(canon)
            self._balances[canon] = balance
        return balance

    def _find_line(self, upc: str, canon: str) -> Optional[BasketLine]:
        for line in self._basket:
            if line.matches(upc, canon):
                return line
        return None

    def _persist(self) -> None:
        if self._user_id is None:
            return
        self._writer.submit(self._user_id, self.snapshot().to_store())

    def _changed(self) -> None:
        self._persist()
        self._notify()

    # ------------------------------------------------------------------
    # Identity and loading
    # ------------------------------------------------------------------

    async def update_user(self, user_id: Optional[str]) -> None:
        """
        React to an auth identity change.

        None clears all local state. A new identity clears state and
        loads that user's document.
        """
        previous = self._user_id
        self._user_id = user_id
        self._clear()
        logger.info("user_changed", previous=previous, user_id=user_id)
        self._notify()

        if user_id is not None:
            await self.load_user_state()

    async def load_user_state(self) -> None:
        """
        Load balances and basket for the current user.

        First-time users get an empty document written as a scaffold.
        balances_loaded is set even when the load fails; the error
        then propagates to the caller.
        """
        user_id = self._user_id
        if user_id is None:
            self._clear()
            self._notify()
            return

        try:
            # Unsaved changes must land before the store is read back
            await self._writer.flush()
            data = await self._store.load(user_id)
            if self._user_id != user_id:
                # Identity changed while loading; drop the stale result
                return

            if data is None:
                self._balances = {}
                self._basket = []
                self._persist()
                await self._writer.flush()
            else:
                document = UserDocument.from_store(data)
                self._balances = document.balances
                self._basket = document.basket
            logger.info(
                "state_loaded",
                user_id=user_id,
                categories=len(self._balances),
                basket_lines=len(self._basket),
            )
        finally:
            if self._user_id == user_id:
                self._balances_loaded = True
                self._notify()

    async def flush(self) -> bool:
        """Wait for pending writes. Returns True if all succeeded."""
        return await self._writer.flush()

    # ------------------------------------------------------------------
    # Capacity
    # ------------------------------------------------------------------

    def can_add(self, category: str) -> bool:
        """
        True if another unit of this category fits under its cap.

        Unseen categories are addable; no balance is created here.
        """
        balance = self._balances.get(canonicalize(category))
        if balance is None:
            return True
        return balance.has_capacity

    # ------------------------------------------------------------------
    # Basket mutations
    # ------------------------------------------------------------------

    def add_item(
        self,
        upc: str,
        name: str,
        category: str,
        nutrition: Optional[dict[str, float]] = None,
    ) -> bool:
        """
        Add one unit of a product.

        Returns True if a new basket line was created. An existing
        (upc, category) line is incremented instead (returns False).
        A full category rejects the add (returns False, nothing changes).
        """
        if self._user_id is None:
            logger.warning("add_without_user", upc=upc)
            return False

        canon = canonicalize(category)
        balance = self._ensure_category(canon)

        if self._find_line(upc, canon) is not None:
            self.increment_item(upc, canon)
            return False

        if not balance.has_capacity:
            logger.info(
                "item_rejected_capacity",
                upc=upc,
                category=canon,
                allowed=balance.allowed,
                used=balance.used,
            )
            return False

        self._basket.append(BasketLine(
            upc=upc,
            name=name,
            category=canon,
            qty=1,
            nutrition=dict(nutrition) if nutrition else None,
        ))
        balance.used += 1
        logger.info("item_added", upc=upc, category=canon, used=balance.used)

        self._changed()
        return True

    def increment_item(self, upc: str, category: str) -> None:
        """
        Add one more unit of a product already in the basket.

        Past the category cap the unit is charged to PAID: the PAID
        line for this UPC is bumped, or created from the benefit line's
        name and nutrition.
        """
        if self._user_id is None:
            return

        canon = canonicalize(category)
        balance = self._ensure_category(canon)

        if balance.has_capacity:
            line = self._find_line(upc, canon)
            if line is None:
                return
            line.qty += 1
            balance.used += 1
            logger.info("item_incremented", upc=upc, category=canon, qty=line.qty)
            self._changed()
            return

        paid = self._ensure_category(PAID_CATEGORY)
        paid_line = self._find_line(upc, PAID_CATEGORY)
        if paid_line is not None:
            paid_line.qty += 1
        else:
            source = self._find_line(upc, canon)
            if source is None:
                return
            self._basket.append(BasketLine(
                upc=upc,
                name=source.name,
                category=PAID_CATEGORY,
                qty=1,
                nutrition=dict(source.nutrition) if source.nutrition else None,
            ))
        paid.used += 1
        logger.info("item_overflowed_to_paid", upc=upc, category=canon)
        self._changed()

    def decrement_item(self, upc: str, category: str) -> None:
        """
        Remove one unit of a product.

        PAID units are removed first. A line whose quantity reaches
        zero is removed; `used` never drops below zero.
        """
        if self._user_id is None:
            return

        line = self._find_line(upc, PAID_CATEGORY)
        if line is None:
            line = self._find_line(upc, canonicalize(category))
        if line is None:
            return

        balance = self._balances.get(line.category)
        if balance is not None:
            balance.used = max(balance.used - 1, 0)

        if line.qty - 1 <= 0:
            self._basket.remove(line)
        else:
            line.qty -= 1
        logger.info("item_decremented", upc=upc, category=line.category)

        self._changed()

    async def checkout(self) -> None:
        """
        Complete the purchase.

        Clears the basket and resets every category's usage to zero
        (a fresh benefit period), then waits for the write.
        """
        if self._user_id is None:
            return

        lines = len(self._basket)
        self._basket = []
        for balance in self._balances.values():
            balance.used = 0
        logger.info("basket_checked_out", user_id=self._user_id, lines=lines)

        self._changed()
        await self._writer.flush()

    def clear_basket(self) -> None:
        """
        Abandon the basket without buying.

        Every line's quantity is released back to its category.
        """
        if self._user_id is None:
            return

        for line in self._basket:
            balance = self._balances.get(line.category)
            if balance is not None:
                balance.used = max(balance.used - line.qty, 0)
        lines = len(self._basket)
        self._basket = []
        logger.info("basket_cleared", user_id=self._user_id, lines=lines)

        self._changed()
