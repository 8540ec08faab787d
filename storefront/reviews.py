from __future__ import annotations

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from .catalog import ProductCatalog
from .errors import ValidationError
from .locks import IdSequence, KeyedLock
from .schemas import DEFAULT_USERNAME, Review

logger = logging.getLogger(__name__)


def average_rating(ratings: Iterable[int]) -> float:
    """Mean rating to one decimal, exact halves rounded up (4.25 -> 4.3)."""
    values = list(ratings)
    average = Decimal(sum(values)) / Decimal(len(values))
    return float(average.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class ReviewEngine:
    """Append-only product reviews that keep each product's rating in step.

    The append and the rating recompute happen under the product's lock, and
    ``list`` reads under the same lock, so a reader never sees a review
    without the matching rating/review_count on the product.
    """

    def __init__(self, catalog: ProductCatalog, locks: Optional[KeyedLock] = None) -> None:
        self.catalog = catalog
        self._locks = locks or KeyedLock()
        self._ids = IdSequence()
        self._reviews: Dict[int, List[Review]] = {}

    def add(
        self,
        session_id: str,
        product_id: int,
        rating: int,
        title: str,
        comment: str,
        username: Optional[str] = None,
    ) -> Review:
        self._validate(rating, title, comment)
        self.catalog.require(product_id)

        with self._locks.hold(product_id):
            review = Review(
                id=self._ids.next(),
                session_id=session_id,
                product_id=product_id,
                rating=rating,
                title=title,
                comment=comment,
                username=username or DEFAULT_USERNAME,
                created_at=datetime.now(),
            )
            reviews = self._reviews.setdefault(product_id, [])
            reviews.append(review)
            self._recompute(product_id, reviews)
        logger.info("Review %d added for product %d (rating %d)", review.id, product_id, rating)
        return review

    def list(self, product_id: int) -> List[Review]:
        with self._locks.hold(product_id):
            return list(self._reviews.get(product_id, []))

    def _recompute(self, product_id: int, reviews: List[Review]) -> None:
        self.catalog.apply_rating(product_id, average_rating(r.rating for r in reviews), len(reviews))

    @staticmethod
    def _validate(rating: int, title: str, comment: str) -> None:
        errors = []
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            errors.append({"field": "rating", "message": "Rating must be an integer between 1 and 5"})
        if not title or not title.strip():
            errors.append({"field": "title", "message": "Review title is required"})
        if not comment or not comment.strip():
            errors.append({"field": "comment", "message": "Review comment is required"})
        if errors:
            raise ValidationError("Invalid review data", errors=errors)
