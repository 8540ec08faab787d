from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from .config import settings
from .errors import NotFound, StorefrontError, ValidationError


class StorefrontClient:
    """Call the storefront API over HTTP, carrying the session id between calls.

    The server hands out a session id on first contact; the client keeps it
    and sends it back so the cart and wishlist survive across requests.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session_id: str | None = None,
        timeout: float = 10.0,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.session_header = settings.session_header
        self.session_id = session_id
        self.timeout = timeout
        self._session = http or requests.Session()

    # Catalog

    def products(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/products")

    def product(self, product_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/api/products/{product_id}")

    def featured(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/featured-products")

    def search(self, query: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/products/search/{query}")

    # Cart

    def cart(self) -> Dict[str, Any]:
        return self._request("GET", "/api/cart")

    def add_to_cart(
        self, product_id: int, quantity: int = 1, size: str | None = None, color: str | None = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"productId": product_id, "quantity": quantity}
        if size is not None:
            body["size"] = size
        if color is not None:
            body["color"] = color
        return self._request("POST", "/api/cart/add", json=body)

    def update_quantity(self, line_id: int, quantity: int) -> Dict[str, Any]:
        return self._request("PUT", f"/api/cart/update/{line_id}", json={"quantity": quantity})

    def remove_from_cart(self, line_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/cart/remove/{line_id}")

    def clear_cart(self) -> Dict[str, Any]:
        return self._request("DELETE", "/api/cart/clear")

    def checkout(self, **customer: str) -> Dict[str, Any]:
        return self._request("POST", "/api/checkout", json=customer)

    # Wishlist

    def wishlist(self) -> Dict[str, Any]:
        return self._request("GET", "/api/wishlist")

    def add_to_wishlist(self, product_id: int) -> Dict[str, Any]:
        return self._request("POST", "/api/wishlist/add", json={"productId": product_id})

    def in_wishlist(self, product_id: int) -> bool:
        return self._request("GET", f"/api/wishlist/check/{product_id}")["inWishlist"]

    def remove_from_wishlist(self, entry_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/wishlist/remove/{entry_id}")

    def clear_wishlist(self) -> Dict[str, Any]:
        return self._request("DELETE", "/api/wishlist/clear")

    # Reviews

    def reviews(self, product_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/reviews/product/{product_id}")

    def add_review(
        self, product_id: int, rating: int, title: str, comment: str, username: str | None = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"productId": product_id, "rating": rating, "title": title, "comment": comment}
        if username:
            body["username"] = username
        return self._request("POST", "/api/reviews/add", json=body)

    def _build_url(self, target: str) -> str:
        if not target.startswith("/"):
            target = f"/{target}"
        return f"{self.base_url}{target}"

    def _request(self, method: str, target: str, json: Any = None) -> Any:
        headers = {}
        if self.session_id:
            headers[self.session_header] = self.session_id

        response = self._session.request(
            method=method,
            url=self._build_url(target),
            headers=headers,
            json=json,
            timeout=self.timeout,
        )

        returned = response.headers.get(self.session_header)
        if returned:
            self.session_id = returned

        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text[:500]}

        if response.status_code >= 400:
            message = body.get("message", "") if isinstance(body, dict) else str(body)
            if response.status_code == 404:
                raise NotFound(message)
            if response.status_code == 400:
                raise ValidationError(message, errors=body.get("errors", []) if isinstance(body, dict) else [])
            raise StorefrontError(message, status_code=response.status_code)
        return body
