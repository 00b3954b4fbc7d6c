"""
Session lifecycle: sign in, register, validate and sign out.

Every change to the stored credential publishes STORAGE_CHANGED so the
cart synchronizer switches between remote and guest mode.

Signing in does not merge the guest cart into the remote cart. Guest
lines stay in the local store untouched and reappear after logout.
"""
from typing import Any, Dict, Optional

from pydantic import ValidationError

from storefront.api.client import ApiClient
from storefront.api.models import ApiResponse
from storefront.errors import ERROR_AUTH_FAILED
from storefront.events import CartEvent, EventBus
from storefront.logging import get_logger
from storefront.session import Identity, Session

logger = get_logger(__name__)


class AuthService:
    """Login/logout for one storefront session."""

    def __init__(self, session: Session, client: ApiClient, bus: EventBus):
        self.session = session
        self.client = client
        self.bus = bus

    def _store_credentials(self, response: ApiResponse) -> ApiResponse:
        if not response.success:
            if not response.error:
                response.error = ERROR_AUTH_FAILED
            return response

        data = response.data if isinstance(response.data, dict) else {}
        token = data.get("token")
        try:
            identity = Identity.model_validate(data.get("user"))
        except ValidationError as e:
            logger.error(f"Auth response without a usable user record: {e}")
            return ApiResponse.failure(ERROR_AUTH_FAILED, status_code=response.status_code)
        if not token:
            return ApiResponse.failure(ERROR_AUTH_FAILED, status_code=response.status_code)

        self.session.sign_in(token, identity)
        self.bus.publish(CartEvent.STORAGE_CHANGED)
        return response

    async def login(self, email: str, password: str) -> ApiResponse:
        return self._store_credentials(await self.client.login(email, password))

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: Optional[str] = None,
        address: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        response = await self.client.register(email, password, first_name, last_name, address)
        return self._store_credentials(response)

    async def refresh_user(self) -> Optional[Identity]:
        """Validate the stored token; an invalid one signs the user out."""
        if not self.session.token:
            return None

        response = await self.client.get_current_user()
        if response.success and isinstance(response.data, dict):
            try:
                return self.session.set_user(response.data)
            except ValidationError as e:
                logger.warning(f"Unexpected user payload: {e}")

        logger.info("Stored token rejected, signing out")
        self.logout()
        return None

    def logout(self) -> None:
        self.session.clear()
        self.bus.publish(CartEvent.STORAGE_CHANGED)

    @property
    def user(self) -> Optional[Identity]:
        return self.session.user if self.session.token else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None
