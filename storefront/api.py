"""
Storefront REST API.

Run with:
    uvicorn storefront.api:app --reload --port 8000
or:
    storefront --port 8000
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from .config import Settings, load_settings
from .errors import NotFound, StorefrontError, ValidationError
from .schemas import (
    CartAddRequest,
    CartAddResponse,
    CartUpdateRequest,
    CartView,
    CheckoutRequest,
    OrderConfirmation,
    Product,
    Review,
    ReviewAddResponse,
    ReviewCreateRequest,
    WishlistAddRequest,
    WishlistAddResponse,
    WishlistCheck,
    WishlistView,
)
from .store import Storefront, create_store

logger = logging.getLogger(__name__)

# Message used for malformed bodies, by path prefix.
_INVALID_MESSAGES = {
    "/api/cart": "Invalid cart item data",
    "/api/wishlist": "Invalid wishlist data",
    "/api/reviews": "Invalid review data",
    "/api/checkout": "Invalid checkout data",
}


def get_store(request: Request) -> Storefront:
    return request.app.state.store


def session_id(request: Request, response: Response, store: Storefront = Depends(get_store)) -> str:
    """Read the caller's session header, or mint a new id, and echo it back."""
    header = store.sessions.header
    resolved = store.sessions.resolve(request.headers.get(header))
    request.state.session_id = resolved
    response.headers[header] = resolved
    return resolved


def _error_response(request: Request, status_code: int, content: Dict[str, Any]) -> JSONResponse:
    """JSON error body that still carries the caller's session id, once resolved."""
    response = JSONResponse(status_code=status_code, content=content)
    resolved = getattr(request.state, "session_id", None)
    if resolved:
        response.headers[request.app.state.store.sessions.header] = resolved
    return response


def _invalid_message(path: str) -> str:
    for prefix, message in _INVALID_MESSAGES.items():
        if path.startswith(prefix):
            return message
    return "Invalid request data"


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query")]
        errors.append({"field": ".".join(loc), "message": error.get("msg", "")})
    return errors


def create_app(store: Optional[Storefront] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or (store.settings if store else load_settings())
    store = store or create_store(settings)

    app = FastAPI(title=settings.app_title, version=settings.version)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.session_header],
    )

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error_response(request, exc.status_code, exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            request,
            400,
            {"message": _invalid_message(request.url.path), "errors": _field_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(request, 500, {"message": "Internal server error"})

    # Catalog

    @app.get("/api/products", response_model=List[Product])
    def list_products(store: Storefront = Depends(get_store)):
        return store.catalog.list()

    @app.get("/api/products/category/{category}", response_model=List[Product])
    def products_by_category(category: str, store: Storefront = Depends(get_store)):
        return store.catalog.by_category(category)

    @app.get("/api/products/subcategory/{subcategory}", response_model=List[Product])
    def products_by_subcategory(subcategory: str, store: Storefront = Depends(get_store)):
        return store.catalog.by_subcategory(subcategory)

    @app.get("/api/products/new-arrivals", response_model=List[Product])
    def new_arrivals(store: Storefront = Depends(get_store)):
        return store.catalog.new_arrivals()

    @app.get("/api/products/best-sellers", response_model=List[Product])
    def best_sellers(store: Storefront = Depends(get_store)):
        return store.catalog.best_sellers()

    @app.get("/api/products/on-sale", response_model=List[Product])
    def on_sale(store: Storefront = Depends(get_store)):
        return store.catalog.on_sale()

    @app.get("/api/products/search/{query}", response_model=List[Product])
    def search_products(query: str, store: Storefront = Depends(get_store)):
        return store.catalog.search(query)

    @app.get("/api/products/{product_id}", response_model=Product)
    def get_product(product_id: int, store: Storefront = Depends(get_store)):
        product = store.catalog.get(product_id)
        if product is None:
            raise NotFound("Product not found")
        return product

    @app.get("/api/featured-products", response_model=List[Product])
    def featured_products(store: Storefront = Depends(get_store)):
        return store.catalog.featured()

    @app.get("/api/categories", response_model=List[str])
    def categories(store: Storefront = Depends(get_store)):
        return store.catalog.categories()

    # Cart

    @app.get("/api/cart", response_model=CartView)
    def get_cart(sid: str = Depends(session_id), store: Storefront = Depends(get_store)):
        return store.cart.summary(sid)

    @app.post("/api/cart/add", response_model=CartAddResponse)
    def add_to_cart(item: CartAddRequest, sid: str = Depends(session_id), store: Storefront = Depends(get_store)):
        with store.cart.hold(sid):
            added = store.cart.add_item(sid, item.product_id, item.quantity, item.size, item.color)
            view = store.cart.summary(sid)
        return CartAddResponse(**view.model_dump(), added_item=added)

    @app.put("/api/cart/update/{line_id}", response_model=CartView)
    def update_cart_item(
        line_id: int,
        body: CartUpdateRequest,
        sid: str = Depends(session_id),
        store: Storefront = Depends(get_store),
    ):
        store.cart.update_quantity(line_id, body.quantity)
        return store.cart.summary(sid)

    @app.delete("/api/cart/remove/{line_id}", response_model=CartView)
    def remove_cart_item(line_id: int, sid: str = Depends(session_id), store: Storefront = Depends(get_store)):
        store.cart.remove_item(line_id)
        return store.cart.summary(sid)

    @app.delete("/api/cart/clear", response_model=CartView)
    def clear_cart(sid: str = Depends(session_id), store: Storefront = Depends(get_store)):
        store.cart.clear(sid)
        return CartView(session_id=sid)

    @app.post("/api/checkout", response_model=OrderConfirmation)
    def checkout(
        payload: Optional[Dict[str, Any]] = Body(None),
        sid: str = Depends(session_id),
        store: Storefront = Depends(get_store),
    ):
        # An empty cart is reported before the customer details are looked at.
        if not store.cart.list(sid):
            raise ValidationError("Cart is empty")
        try:
            customer = CheckoutRequest.model_validate(payload or {})
        except PydanticValidationError as exc:
            raise RequestValidationError(exc.errors()) from exc
        return store.checkout.place_order(sid, customer)

    # Wishlist

    @app.get("/api/wishlist", response_model=WishlistView)
    def get_wishlist(sid: str = Depends(session_id), store: Storefront = Depends(get_store)):
        return WishlistView(session_id=sid, items=store.wishlist.list(sid))

    @app.post("/api/wishlist/add", response_model=WishlistAddResponse)
    def add_to_wishlist(body: WishlistAddRequest, sid: str = Depends(session_id), store: Storefront = Depends(get_store)):
        added = store.wishlist.add(sid, body.product_id)
        return WishlistAddResponse(session_id=sid, items=store.wishlist.list(sid), added=added)

    @app.get("/api/wishlist/check/{product_id}", response_model=WishlistCheck)
    def check_wishlist(product_id: int, sid: str = Depends(session_id), store: Storefront = Depends(get_store)):
        return WishlistCheck(session_id=sid, product_id=product_id, in_wishlist=store.wishlist.contains(sid, product_id))

    @app.delete("/api/wishlist/remove/{entry_id}", response_model=WishlistView)
    def remove_from_wishlist(entry_id: int, sid: str = Depends(session_id), store: Storefront = Depends(get_store)):
        store.wishlist.remove(entry_id)
        return WishlistView(session_id=sid, items=store.wishlist.list(sid))

    @app.delete("/api/wishlist/clear", response_model=WishlistView)
    def clear_wishlist(sid: str = Depends(session_id), store: Storefront = Depends(get_store)):
        store.wishlist.clear(sid)
        return WishlistView(session_id=sid)

    # Reviews

    @app.get("/api/reviews/product/{product_id}", response_model=List[Review])
    def product_reviews(product_id: int, store: Storefront = Depends(get_store)):
        return store.reviews.list(product_id)

    @app.post("/api/reviews/add", response_model=ReviewAddResponse)
    def add_review(body: ReviewCreateRequest, sid: str = Depends(session_id), store: Storefront = Depends(get_store)):
        review = store.reviews.add(sid, body.product_id, body.rating, body.title, body.comment, body.username)
        return ReviewAddResponse(review=review, reviews=store.reviews.list(body.product_id))

    @app.get("/health")
    def health_check() -> Dict[str, Any]:
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}

    return app


app = create_app()
