"""Product catalog: seeded once, read-mostly."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from .errors import ProductNotFound
from .locks import IdSequence
from .schemas import Product

logger = logging.getLogger(__name__)


class ProductCatalog:
    """In-memory product store keyed by id, in insertion order."""

    def __init__(self, featured_limit: int = 8) -> None:
        self.featured_limit = featured_limit
        self._products: Dict[int, Product] = {}
        self._ids = IdSequence()

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]], featured_limit: int = 8) -> "ProductCatalog":
        catalog = cls(featured_limit=featured_limit)
        for record in records:
            catalog.create(**record)
        logger.info("Catalog seeded with %d products", len(catalog))
        return catalog

    def __len__(self) -> int:
        return len(self._products)

    def create(self, **fields: Any) -> Product:
        """Add a product; the id is allocated here and any given id is ignored."""
        fields.pop("id", None)
        product = Product(id=self._ids.next(), **fields)
        self._products[product.id] = product
        return product

    def list(self) -> List[Product]:
        return list(self._products.values())

    def get(self, product_id: int) -> Optional[Product]:
        return self._products.get(product_id)

    def require(self, product_id: int) -> Product:
        product = self._products.get(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def by_category(self, category: str) -> List[Product]:
        wanted = category.lower()
        return [p for p in self._products.values() if p.category.lower() == wanted]

    def by_subcategory(self, subcategory: str) -> List[Product]:
        wanted = subcategory.lower()
        return [
            p for p in self._products.values()
            if p.subcategory is not None and p.subcategory.lower() == wanted
        ]

    def search(self, query: str) -> List[Product]:
        needle = query.lower()
        results = []
        for product in self._products.values():
            haystacks = [product.name, product.description, product.category, product.subcategory]
            if any(text and needle in text.lower() for text in haystacks):
                results.append(product)
        return results

    def featured(self) -> List[Product]:
        """Best sellers and new arrivals, in catalog order, capped."""
        picks = [p for p in self._products.values() if p.is_best_seller or p.is_new_arrival]
        return picks[: self.featured_limit]

    def new_arrivals(self) -> List[Product]:
        return [p for p in self._products.values() if p.is_new_arrival]

    def best_sellers(self) -> List[Product]:
        return [p for p in self._products.values() if p.is_best_seller]

    def on_sale(self) -> List[Product]:
        return [p for p in self._products.values() if p.is_on_sale]

    def categories(self) -> List[str]:
        seen: Dict[str, None] = {}
        for product in self._products.values():
            seen.setdefault(product.category, None)
        return list(seen)

    def apply_rating(self, product_id: int, rating: float, review_count: int) -> Product:
        """Swap in a copy carrying the new derived rating fields.

        Only the review engine calls this, while holding the product's lock.
        """
        product = self.require(product_id)
        updated = product.model_copy(update={"rating": rating, "review_count": review_count})
        self._products[product_id] = updated
        logger.debug("Product %s rating -> %.1f over %d reviews", product_id, rating, review_count)
        return updated
