from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from .catalog import ProductCatalog
from .errors import InvariantViolation
from .locks import IdSequence, KeyedLock
from .schemas import WishlistEntry, WishlistLine

logger = logging.getLogger(__name__)


class WishlistEngine:
    """Saved products per session; one entry per (session, product)."""

    def __init__(self, catalog: ProductCatalog, locks: Optional[KeyedLock] = None) -> None:
        self.catalog = catalog
        self._locks = locks or KeyedLock()
        self._ids = IdSequence()
        self._entries: Dict[int, WishlistEntry] = {}
        # session id -> product id -> entry
        self._by_session: Dict[str, Dict[int, WishlistEntry]] = {}

    def get(self, entry_id: int) -> Optional[WishlistEntry]:
        return self._entries.get(entry_id)

    def add(self, session_id: str, product_id: int) -> WishlistEntry:
        """Save a product; re-adding returns the entry already stored."""
        self.catalog.require(product_id)
        with self._locks.hold(session_id):
            saved = self._by_session.setdefault(session_id, {})
            existing = saved.get(product_id)
            if existing is not None:
                return existing
            entry = WishlistEntry(
                id=self._ids.next(),
                session_id=session_id,
                product_id=product_id,
                added_at=datetime.now(),
            )
            saved[product_id] = entry
            self._entries[entry.id] = entry
            logger.debug("Wishlist entry %d for session %s", entry.id, session_id)
            return entry

    def remove(self, entry_id: int) -> bool:
        entry = self._entries.get(entry_id)
        if entry is None:
            return False
        with self._locks.hold(entry.session_id):
            if self._entries.pop(entry_id, None) is None:
                return False
            self._by_session.get(entry.session_id, {}).pop(entry.product_id, None)
            return True

    def clear(self, session_id: str) -> int:
        with self._locks.hold(session_id):
            saved = self._by_session.pop(session_id, {})
            for entry in saved.values():
                self._entries.pop(entry.id, None)
        return len(saved)

    def contains(self, session_id: str, product_id: int) -> bool:
        return product_id in self._by_session.get(session_id, {})

    def list(self, session_id: str) -> List[WishlistLine]:
        with self._locks.hold(session_id):
            owned = sorted(self._by_session.get(session_id, {}).values(), key=lambda e: e.id)
        lines = []
        for entry in owned:
            product = self.catalog.get(entry.product_id)
            if product is None:
                logger.error("Wishlist entry %d references missing product %d", entry.id, entry.product_id)
                raise InvariantViolation(f"Product with id {entry.product_id} not found")
            lines.append(WishlistLine(**entry.model_dump(), product=product))
        return lines
