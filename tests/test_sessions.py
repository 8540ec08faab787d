import uuid

from storefront.sessions import SessionResolver


def test_presented_id_is_kept():
    resolver = SessionResolver()
    assert resolver.resolve("abc") == "abc"
    assert resolver.resolve("  abc ") == "abc"


def test_missing_id_is_generated():
    resolver = SessionResolver()
    first = resolver.resolve(None)
    second = resolver.resolve("")

    assert first != second
    assert uuid.UUID(first).version == 4


def test_header_name_is_configurable():
    assert SessionResolver("x-cart-session").header == "x-cart-session"
