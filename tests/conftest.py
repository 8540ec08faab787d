import pytest
from fastapi.testclient import TestClient

from storefront.api import create_app
from storefront.store import create_store


@pytest.fixture
def store():
    return create_store()


@pytest.fixture
def catalog(store):
    return store.catalog


@pytest.fixture
def api(store):
    return TestClient(create_app(store))


@pytest.fixture
def shopper(api):
    """A TestClient that always presents the same session header."""
    api.headers["sessionid"] = "abc"
    return api
