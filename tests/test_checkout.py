import pytest

from storefront.errors import ValidationError
from storefront.schemas import CheckoutRequest

CUSTOMER = {
    "fullName": "Tom Cat",
    "email": "tom@example.com",
    "address": "1 Alley Way",
    "city": "Springfield",
    "state": "IL",
    "zipCode": "62701",
    "country": "US",
    "paymentMethod": "card",
}


def test_order_below_threshold_pays_shipping(store):
    store.cart.add_item("abc", 3, 1)

    order = store.checkout.place_order("abc", CheckoutRequest(**CUSTOMER))

    assert order.success is True
    assert order.order_id.startswith("ORD-")
    assert order.order_details.subtotal == pytest.approx(39.99)
    assert order.order_details.shipping == pytest.approx(9.99)
    assert order.order_details.total == pytest.approx(49.98)
    assert store.cart.list("abc") == []


def test_free_shipping_at_threshold(store):
    store.checkout.free_shipping_threshold = 79.99
    store.cart.add_item("abc", 7, 1)

    order = store.checkout.place_order("abc", CheckoutRequest(**CUSTOMER))
    assert order.order_details.shipping == 0.0
    assert order.order_details.total == pytest.approx(79.99)


def test_empty_cart_is_rejected(store):
    with pytest.raises(ValidationError, match="Cart is empty"):
        store.checkout.place_order("abc", CheckoutRequest(**CUSTOMER))


def test_checkout_endpoint(shopper):
    shopper.post("/api/cart/add", json={"productId": 1, "quantity": 2})

    response = shopper.post("/api/checkout", json=CUSTOMER)
    body = response.json()

    assert response.status_code == 200
    assert body["success"] is True
    details = body["orderDetails"]
    assert details["customer"]["zipCode"] == "62701"
    assert details["subtotal"] == pytest.approx(99.98)
    assert details["shipping"] == 0
    assert details["items"][0]["product"]["id"] == 1
    assert shopper.get("/api/cart").json()["items"] == []


def test_checkout_endpoint_errors(shopper):
    empty = shopper.post("/api/checkout", json=CUSTOMER)
    assert empty.status_code == 400
    assert empty.json()["message"] == "Cart is empty"

    shopper.post("/api/cart/add", json={"productId": 1})
    invalid = shopper.post("/api/checkout", json={**CUSTOMER, "email": "not-an-email"})
    assert invalid.status_code == 400
    assert invalid.json()["message"] == "Invalid checkout data"
    assert invalid.json()["errors"][0]["field"] == "email"
    assert len(shopper.get("/api/cart").json()["items"]) == 1


def test_empty_cart_is_reported_before_body_errors(shopper):
    response = shopper.post("/api/checkout", json={"email": "nope"})

    assert response.status_code == 400
    assert response.json()["message"] == "Cart is empty"
    assert response.headers["sessionid"] == "abc"


def test_missing_body_with_items_is_invalid(shopper):
    shopper.post("/api/cart/add", json={"productId": 1})

    response = shopper.post("/api/checkout")
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid checkout data"
    assert {e["field"] for e in response.json()["errors"]} >= {"fullName", "email"}
