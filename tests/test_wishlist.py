import threading

import pytest

from storefront.errors import ProductNotFound


@pytest.fixture
def wishlist(store):
    return store.wishlist


def test_add_is_idempotent(wishlist):
    first = wishlist.add("abc", 2)
    second = wishlist.add("abc", 2)

    assert first.id == second.id
    assert first.added_at == second.added_at
    assert len(wishlist.list("abc")) == 1


def test_add_unknown_product(wishlist):
    with pytest.raises(ProductNotFound):
        wishlist.add("abc", 404)
    assert wishlist.list("abc") == []


def test_contains(wishlist):
    wishlist.add("abc", 2)

    assert wishlist.contains("abc", 2)
    assert not wishlist.contains("abc", 3)
    assert not wishlist.contains("xyz", 2)


def test_list_joins_product_in_insertion_order(wishlist):
    wishlist.add("abc", 9)
    wishlist.add("abc", 1)

    lines = wishlist.list("abc")
    assert [line.product_id for line in lines] == [9, 1]
    assert lines[0].product.name == "Cat Paw Watch"


def test_remove(wishlist):
    entry = wishlist.add("abc", 2)
    assert wishlist.get(entry.id) == entry

    assert wishlist.remove(entry.id) is True
    assert wishlist.get(entry.id) is None
    assert wishlist.remove(entry.id) is False
    assert wishlist.remove(777) is False
    assert not wishlist.contains("abc", 2)


def test_readd_after_remove_creates_new_entry(wishlist):
    entry = wishlist.add("abc", 2)
    wishlist.remove(entry.id)

    assert wishlist.add("abc", 2).id != entry.id


def test_clear(wishlist):
    wishlist.add("abc", 1)
    wishlist.add("abc", 2)
    wishlist.add("xyz", 1)

    assert wishlist.clear("abc") == 2
    assert wishlist.list("abc") == []
    assert wishlist.contains("xyz", 1)
    assert wishlist.clear("nobody") == 0


def test_concurrent_adds_keep_one_entry(wishlist):
    seen = []

    def worker():
        for _ in range(20):
            seen.append(wishlist.add("abc", 2).id)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(seen) == 160
    assert len(set(seen)) == 1
    assert [line.id for line in wishlist.list("abc")] == [seen[0]]
