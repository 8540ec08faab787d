"""
Error taxonomy for the storefront.

Engines raise these; the HTTP layer maps them onto status codes:
- NotFound: 404
- ValidationError: 400, with field-level detail
- InternalError: 500
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class NotFound(StorefrontError):
    status_code = 404


class ProductNotFound(NotFound):
    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product with id {product_id} not found")
        self.product_id = product_id


class ValidationError(StorefrontError):
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(f"Invalid {field}", errors=[{"field": field, "message": message}])

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class InternalError(StorefrontError):
    status_code = 500


class InvariantViolation(InternalError):
    """Stored state broke an invariant, e.g. a cart line whose product is gone."""
