"""
Shop API client.

Single authenticated request primitive plus the endpoint helpers the
cart, checkout and auth flows use. Every call resolves to an
ApiResponse; HTTP and network failures are reported, never raised.
"""
import json
from typing import Any, Dict, Iterable, Optional, Union

import httpx

from storefront.api.models import (
    AddToCartRequest,
    ApiResponse,
    CreateOrderRequest,
    OrderLine,
    ShippingAddress,
    UpdateCartItemRequest,
)
from storefront.config import AUTH_PATH_PREFIX, Settings
from storefront.errors import ERROR_GENERIC, ERROR_INVALID_RESPONSE, ERROR_NETWORK, ERROR_RATE_LIMITED
from storefront.events import CartEvent, EventBus
from storefront.logging import get_logger, sanitize_string_for_logging
from storefront.session import Session

logger = get_logger(__name__)


class ApiClient:
    """
    Gateway to the shop API.

    Attaches the session's bearer token when present. A 401 on an auth
    endpoint invalidates the local session and publishes STORAGE_CHANGED
    so dependent state (the cart count) is re-derived.
    """

    def __init__(
        self,
        session: Session,
        bus: EventBus,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.bus = bus
        self.settings = settings or Settings()
        self._http = httpx.AsyncClient(
            base_url=self.settings.api_url,
            timeout=self.settings.api_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        path: str,
        method: str = "GET",
        json_body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> ApiResponse:
        """Perform one request and classify the outcome."""
        request_headers = {"Content-Type": "application/json", **(headers or {})}

        token = self.session.token
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
            logger.debug(f"API request {method} {path} with token")
        else:
            logger.debug(f"API request {method} {path} without token")

        try:
            response = await self._http.request(method, path, json=json_body, headers=request_headers)
        except httpx.HTTPError as e:
            logger.warning(f"Network error on {method} {path}: {e}")
            return ApiResponse.failure(str(e) or ERROR_NETWORK)

        body = self._parse_body(response)

        if response.is_success:
            if body is None:
                return ApiResponse.failure(ERROR_INVALID_RESPONSE, status_code=response.status_code)
            if token:
                self.session.touch()
            return ApiResponse.ok(body, status_code=response.status_code)

        return self._handle_failure(path, response.status_code, body or {})

    @staticmethod
    def _parse_body(response: httpx.Response) -> Optional[dict]:
        if not response.content:
            return {}
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        return body if isinstance(body, dict) else None

    def _handle_failure(self, path: str, status: int, body: dict) -> ApiResponse:
        if status == 401 and path.startswith(AUTH_PATH_PREFIX):
            logger.info(f"Clearing session after 401 on {path}")
            self.session.clear()
            self.bus.publish(CartEvent.STORAGE_CHANGED)

        error = body.get("error") or ERROR_GENERIC

        if status == 429:
            logger.warning(f"Rate limited on: {path}")
            error = body.get("error") or ERROR_RATE_LIMITED

        if status == 403:
            user = self.session.user
            role = user.role if user else "N/A"
            logger.error(
                f"403 Forbidden on {path}: {sanitize_string_for_logging(json.dumps(body), 200)} "
                f"(current user role: {role})"
            )

        return ApiResponse.failure(error, status_code=status, body=body)

    # ==================== CART ====================

    async def get_cart(self) -> ApiResponse:
        return await self.request("/api/cart")

    async def add_cart_item(self, product_id: str, quantity: int = 1) -> ApiResponse:
        payload = AddToCartRequest(product_id=product_id, quantity=quantity)
        return await self.request("/api/cart", method="POST", json_body=payload.model_dump(by_alias=True))

    async def update_cart_item(self, item_id: str, quantity: int) -> ApiResponse:
        payload = UpdateCartItemRequest(quantity=quantity)
        return await self.request(f"/api/cart/{item_id}", method="PATCH", json_body=payload.model_dump())

    async def remove_cart_item(self, item_id: str) -> ApiResponse:
        return await self.request(f"/api/cart/{item_id}", method="DELETE")

    async def clear_cart(self) -> ApiResponse:
        return await self.request("/api/cart", method="DELETE")

    # ==================== ORDERS ====================

    async def create_order(
        self,
        items: Iterable[Union[OrderLine, Dict[str, Any]]],
        shipping_address: Union[ShippingAddress, Dict[str, Any]],
    ) -> ApiResponse:
        payload = CreateOrderRequest(
            items=[OrderLine.model_validate(item) if isinstance(item, dict) else item for item in items],
            shipping_address=(
                ShippingAddress.model_validate(shipping_address)
                if isinstance(shipping_address, dict)
                else shipping_address
            ),
        )
        return await self.request(
            "/api/orders",
            method="POST",
            json_body=payload.model_dump(by_alias=True, exclude_none=True),
        )

    # ==================== AUTH ====================

    async def login(self, email: str, password: str) -> ApiResponse:
        return await self.request(
            "/api/auth/login",
            method="POST",
            json_body={"email": email, "password": password},
        )

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: Optional[str] = None,
        address: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        body: Dict[str, Any] = {
            "email": email,
            "password": password,
            "firstName": first_name,
        }
        if last_name is not None:
            body["lastName"] = last_name
        body.update({k: v for k, v in (address or {}).items() if v is not None})
        return await self.request("/api/auth/register", method="POST", json_body=body)

    async def get_current_user(self) -> ApiResponse:
        return await self.request("/api/auth/me")
