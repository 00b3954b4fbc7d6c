"""Pytest configuration and fixtures"""
import json
import os
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

# Set test environment variables
os.environ.setdefault("STOREFRONT_API_URL", "http://shop.test")
os.environ.setdefault("STOREFRONT_STORAGE", "memory")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from storefront.config import Settings  # noqa: E402
from storefront.context import StorefrontContext  # noqa: E402
from storefront.events import EventBus  # noqa: E402
from storefront.session import Session  # noqa: E402
from storefront.storage import MemoryStorage  # noqa: E402

Handler = Callable[[httpx.Request], Any]


class FakeShopApi:
    """
    In-memory stand-in for the shop API behind httpx.MockTransport.

    Routes are keyed by (method, path). A route is either a canned
    (status, body) pair or a handler taking the request; handlers may be
    async and may raise httpx errors to simulate network failures.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, body: Any = None, handler: Optional[Handler] = None):
        self.routes[(method.upper(), path)] = handler if handler is not None else (status, body)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def json_body(self, request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"success": False, "error": "Not found"})
        if callable(route):
            result = route(request)
            if hasattr(result, "__await__"):
                result = await result
            return result
        status, body = route
        if isinstance(body, (str, bytes)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings():
    """Settings pointing at the fake API"""
    return Settings(api_url="http://shop.test")


@pytest.fixture
def storage():
    """Fresh in-memory local store"""
    return MemoryStorage()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def session(storage):
    return Session(storage)


@pytest.fixture
def fake_api():
    return FakeShopApi()


@pytest.fixture
def navigations():
    """Paths passed to the navigator"""
    return []


@pytest_asyncio.fixture
async def shop(settings, storage, fake_api, navigations):
    """Storefront context wired to the fake API (not started)"""
    context = StorefrontContext.create(
        settings=settings,
        storage=storage,
        transport=fake_api.transport,
        navigate=navigations.append,
    )
    yield context
    await context.aclose()


@pytest.fixture
def sample_user():
    """Identity record as returned by the auth endpoints"""
    return {
        "id": "user-123",
        "email": "jane@example.com",
        "firstName": "Jane",
        "lastName": "Doe",
        "role": "CUSTOMER",
    }


@pytest.fixture
def sample_product():
    """Product payload as rendered on a product page"""
    return {
        "id": "prod-1",
        "name": "Lavender Soap",
        "slug": "lavender-soap",
        "price": "10.50",
        "images": ["https://cdn.example.com/soap.jpg"],
        "inventory": {"quantity": 12},
    }


@pytest.fixture
def second_product():
    return {
        "id": "prod-2",
        "name": "Rose Oil",
        "slug": "rose-oil",
        "price": 5,
        "images": [],
        "inventory": {"quantity": 3},
    }


@pytest.fixture
def remote_cart_body():
    """GET /api/cart body for a signed-in user with two lines"""
    return {
        "success": True,
        "data": {
            "items": [
                {
                    "id": "ci-1",
                    "product": {
                        "id": "prod-1",
                        "name": "Lavender Soap",
                        "slug": "lavender-soap",
                        "price": "10.50",
                        "images": [],
                        "availableQuantity": 12,
                    },
                    "quantity": 2,
                    "subtotal": 21.0,
                },
                {
                    "id": "ci-2",
                    "product": {
                        "id": "prod-2",
                        "name": "Rose Oil",
                        "slug": "rose-oil",
                        "price": "5.00",
                        "images": [],
                        "availableQuantity": 3,
                    },
                    "quantity": 3,
                    "subtotal": 15.0,
                },
            ],
            "total": 36.0,
            "itemCount": 2,
        },
    }
