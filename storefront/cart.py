"""
Session-scoped shopping cart.

Lines are unique per (session, product, size, color): adding a combination
that is already in the cart grows its quantity instead of adding a row.
Totals are recomputed from the catalog on every read.
"""

from __future__ import annotations

import logging
from typing import ContextManager, Dict, List, Optional, Tuple

from .catalog import ProductCatalog
from .errors import InvariantViolation, ValidationError
from .locks import IdSequence, KeyedLock
from .schemas import CartLine, CartLineItem, CartView

logger = logging.getLogger(__name__)

LineKey = Tuple[str, int, Optional[str], Optional[str]]


def _line_key(line: CartLineItem) -> LineKey:
    return (line.session_id, line.product_id, line.size, line.color)


class CartEngine:
    def __init__(self, catalog: ProductCatalog, locks: Optional[KeyedLock] = None) -> None:
        self.catalog = catalog
        self._locks = locks or KeyedLock()
        self._ids = IdSequence()
        self._lines: Dict[int, CartLineItem] = {}
        self._by_session: Dict[str, Dict[int, CartLineItem]] = {}
        self._by_key: Dict[LineKey, int] = {}

    def hold(self, session_id: str) -> ContextManager[None]:
        """Lock a session's cart across several engine calls."""
        return self._locks.hold(session_id)

    def get(self, line_id: int) -> Optional[CartLineItem]:
        return self._lines.get(line_id)

    def add_item(
        self,
        session_id: str,
        product_id: int,
        quantity: Optional[int] = None,
        size: Optional[str] = None,
        color: Optional[str] = None,
    ) -> CartLineItem:
        """Add a product variant to the session's cart, merging with an identical line."""
        if quantity is None:
            quantity = 1
        if quantity < 1:
            raise ValidationError.for_field("quantity", "Quantity must be at least 1")
        self.catalog.require(product_id)

        key: LineKey = (session_id, product_id, size, color)
        with self._locks.hold(session_id):
            existing_id = self._by_key.get(key)
            if existing_id is not None:
                line = self._lines[existing_id]
                line.quantity += quantity
                logger.debug("Merged %d into cart line %d (now %d)", quantity, line.id, line.quantity)
                return line

            line = CartLineItem(
                id=self._ids.next(),
                session_id=session_id,
                product_id=product_id,
                quantity=quantity,
                size=size,
                color=color,
            )
            self._lines[line.id] = line
            self._by_session.setdefault(session_id, {})[line.id] = line
            self._by_key[key] = line.id
            logger.debug("New cart line %d for session %s", line.id, session_id)
            return line

    def update_quantity(self, line_id: int, quantity: int) -> Optional[CartLineItem]:
        """Set a line's quantity; zero or less removes it.

        Returns the updated line, or None when the line is unknown or was removed.
        """
        line = self._lines.get(line_id)
        if line is None:
            return None
        with self._locks.hold(line.session_id):
            if line_id not in self._lines:
                return None
            if quantity <= 0:
                self._drop(line)
                return None
            line.quantity = quantity
            return line

    def remove_item(self, line_id: int) -> bool:
        line = self._lines.get(line_id)
        if line is None:
            return False
        with self._locks.hold(line.session_id):
            if line_id not in self._lines:
                return False
            self._drop(line)
            return True

    def clear(self, session_id: str) -> int:
        with self._locks.hold(session_id):
            doomed = list(self._by_session.get(session_id, {}).values())
            for line in doomed:
                self._drop(line)
        return len(doomed)

    def list(self, session_id: str) -> List[CartLine]:
        with self._locks.hold(session_id):
            owned = list(self._by_session.get(session_id, {}).values())
        joined = []
        for line in owned:
            product = self.catalog.get(line.product_id)
            if product is None:
                logger.error("Cart line %d references missing product %d", line.id, line.product_id)
                raise InvariantViolation(f"Product with id {line.product_id} not found")
            joined.append(CartLine(**line.model_dump(), product=product))
        return joined

    def summary(self, session_id: str) -> CartView:
        items = self.list(session_id)
        subtotal = sum(item.quantity * item.product.effective_price for item in items)
        return CartView(
            session_id=session_id,
            items=items,
            item_count=sum(item.quantity for item in items),
            subtotal=round(subtotal, 2),
        )

    def _drop(self, line: CartLineItem) -> None:
        self._lines.pop(line.id, None)
        self._by_session.get(line.session_id, {}).pop(line.id, None)
        self._by_key.pop(_line_key(line), None)
        logger.debug("Removed cart line %d", line.id)
