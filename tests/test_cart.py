import threading

import pytest

from storefront.errors import InvariantViolation, ProductNotFound, ValidationError


@pytest.fixture
def cart(store):
    return store.cart


def test_same_variant_merges_into_one_line(cart):
    first = cart.add_item("abc", 1, 2, size="M", color="black")
    second = cart.add_item("abc", 1, 3, size="M", color="black")

    assert first.id == second.id
    lines = cart.list("abc")
    assert len(lines) == 1
    assert lines[0].quantity == 5


def test_distinct_variants_stay_separate(cart):
    cart.add_item("abc", 1, 1, size="M")
    cart.add_item("abc", 1, 1, size="L")
    cart.add_item("abc", 1, 1, size="L", color="red")
    cart.add_item("abc", 1, 1)

    assert len(cart.list("abc")) == 4


def test_sessions_do_not_share_lines(cart):
    cart.add_item("abc", 1, 1)
    cart.add_item("xyz", 1, 1)

    assert [line.quantity for line in cart.list("abc")] == [1]
    assert [line.quantity for line in cart.list("xyz")] == [1]


def test_quantity_defaults_to_one(cart):
    assert cart.add_item("abc", 3).quantity == 1


def test_add_rejects_bad_input_without_writing(cart):
    with pytest.raises(ValidationError) as excinfo:
        cart.add_item("abc", 1, 0)
    assert excinfo.value.errors[0]["field"] == "quantity"

    with pytest.raises(ProductNotFound):
        cart.add_item("abc", 999, 1)

    assert cart.list("abc") == []


def test_scenario_subtotal_with_sale_price(cart):
    cart.add_item("abc", 1, 2)
    cart.add_item("abc", 4, 1)

    view = cart.summary("abc")
    assert view.subtotal == pytest.approx(145.97)
    assert view.item_count == 3
    assert view.session_id == "abc"


def test_subtotal_tracks_every_mutation(cart):
    a = cart.add_item("abc", 2, 1)
    b = cart.add_item("abc", 6, 2)
    cart.add_item("abc", 14, 3)
    cart.update_quantity(a.id, 4)
    cart.remove_item(b.id)

    view = cart.summary("abc")
    expected = sum(line.quantity * (line.product.sale_price or line.product.price) for line in view.items)
    assert view.subtotal == pytest.approx(expected)
    assert view.subtotal == pytest.approx(4 * 89.99 + 3 * 24.99)
    assert view.item_count == 7


def test_update_quantity_replaces(cart):
    line = cart.add_item("abc", 1, 2)
    updated = cart.update_quantity(line.id, 7)

    assert updated.quantity == 7
    assert cart.list("abc")[0].quantity == 7


@pytest.mark.parametrize("quantity", [0, -3])
def test_update_to_zero_or_less_removes(cart, quantity):
    line = cart.add_item("abc", 1, 2)

    assert cart.update_quantity(line.id, quantity) is None
    assert cart.list("abc") == []
    assert cart.get(line.id) is None


def test_update_unknown_line_signals_not_found(cart):
    assert cart.update_quantity(12345, 2) is None


def test_removed_line_can_be_added_again_fresh(cart):
    line = cart.add_item("abc", 1, 2)
    cart.update_quantity(line.id, 0)

    again = cart.add_item("abc", 1, 1)
    assert again.id != line.id
    assert again.quantity == 1


def test_remove_unknown_line_is_a_noop(cart):
    keep = cart.add_item("abc", 1, 2)

    assert cart.remove_item(9999) is False
    assert cart.remove_item(keep.id) is True
    assert cart.remove_item(keep.id) is False


def test_remove_unknown_leaves_other_lines(cart):
    cart.add_item("abc", 1, 2)
    cart.add_item("abc", 4, 1)

    cart.remove_item(9999)
    assert [line.quantity for line in cart.list("abc")] == [2, 1]


def test_clear_only_touches_one_session(cart):
    cart.add_item("abc", 1, 2)
    cart.add_item("abc", 4, 1)
    cart.add_item("xyz", 4, 1)

    assert cart.clear("abc") == 2
    assert cart.summary("abc").items == []
    assert len(cart.list("xyz")) == 1


def test_list_joins_product(cart):
    cart.add_item("abc", 4, 1, color="blue")
    line = cart.list("abc")[0]

    assert line.product.name == "Cat Whisker Denim Jeans"
    assert line.color == "blue"


def test_line_with_missing_product_is_an_invariant_violation(cart, catalog):
    cart.add_item("abc", 1, 1)
    catalog._products.pop(1)

    with pytest.raises(InvariantViolation):
        cart.list("abc")


def test_concurrent_adds_merge_without_lost_updates(cart):
    def worker():
        for _ in range(50):
            cart.add_item("abc", 1, 1, size="S")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    lines = cart.list("abc")
    assert len(lines) == 1
    assert lines[0].quantity == 400
