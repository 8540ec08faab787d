"""Mocked checkout: prices the cart, clears it and hands back an order id.

No payment is taken and no order is kept.
"""

from __future__ import annotations

import logging
import time

from .cart import CartEngine
from .errors import ValidationError
from .schemas import CheckoutRequest, OrderConfirmation, OrderDetails

logger = logging.getLogger(__name__)


class Checkout:
    def __init__(self, cart: CartEngine, free_shipping_threshold: float = 75.0, flat_shipping_rate: float = 9.99) -> None:
        self.cart = cart
        self.free_shipping_threshold = free_shipping_threshold
        self.flat_shipping_rate = flat_shipping_rate

    def shipping_for(self, subtotal: float) -> float:
        return 0.0 if subtotal >= self.free_shipping_threshold else self.flat_shipping_rate

    def place_order(self, session_id: str, customer: CheckoutRequest) -> OrderConfirmation:
        with self.cart.hold(session_id):
            view = self.cart.summary(session_id)
            if not view.items:
                raise ValidationError("Cart is empty")

            shipping = self.shipping_for(view.subtotal)
            order = OrderConfirmation(
                success=True,
                order_id=f"ORD-{int(time.time() * 1000)}",
                order_details=OrderDetails(
                    customer=customer,
                    items=view.items,
                    subtotal=view.subtotal,
                    shipping=shipping,
                    total=round(view.subtotal + shipping, 2),
                ),
            )
            self.cart.clear(session_id)
        logger.info("Order %s placed for session %s (%.2f)", order.order_id, session_id, order.order_details.total)
        return order
