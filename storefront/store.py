from __future__ import annotations

from typing import Optional

from .cart import CartEngine
from .catalog import ProductCatalog
from .checkout import Checkout
from .config import Settings, load_catalog, load_settings
from .locks import KeyedLock
from .reviews import ReviewEngine
from .sessions import SessionResolver
from .wishlist import WishlistEngine


class Storefront:
    """Owns the catalog and every engine; one instance per process."""

    def __init__(self, catalog: ProductCatalog, settings: Optional[Settings] = None) -> None:
        self.settings = settings or load_settings()
        self.catalog = catalog
        # Carts and wishlists lock per session id, reviews per product id.
        session_locks = KeyedLock()
        self.cart = CartEngine(catalog, session_locks)
        self.wishlist = WishlistEngine(catalog, session_locks)
        self.reviews = ReviewEngine(catalog, KeyedLock())
        self.sessions = SessionResolver(self.settings.session_header)
        self.checkout = Checkout(
            self.cart,
            free_shipping_threshold=self.settings.free_shipping_threshold,
            flat_shipping_rate=self.settings.flat_shipping_rate,
        )


def create_store(settings: Optional[Settings] = None) -> Storefront:
    """Build a store seeded from the configured catalog file."""
    settings = settings or load_settings()
    records = load_catalog(settings.resolved_catalog_path())
    catalog = ProductCatalog.from_records(records, featured_limit=settings.featured_limit)
    return Storefront(catalog, settings)
