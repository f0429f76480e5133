"""
Sign-in, registration and sign-out against the ``/auth`` endpoints.
"""

from storefront_client.types import AuthState, IssuedCredential
from storefront_client.utils.log import get_logger
from storefront_client.base.services import BaseService
from storefront_client.utils.tokens import is_token_expired
from storefront_client.compat import Any, Dict, Optional
from storefront_client.exceptions import Forbidden, Unauthorized
from storefront_client.normalizers import parse_issued_credential


logger = get_logger(__name__)

LOGIN_PATH = "/auth/login"
REGISTER_PATH = "/auth/register"
LOGOUT_PATH = "/auth/logout"


class AuthService(BaseService):
    """
    Explicit credential changes. The request pipeline never calls these.
    """

    async def login(self, username: str, password: str) -> IssuedCredential:
        response = await self.client.post(
            LOGIN_PATH, json={"username": username, "password": password}
        )
        issued = parse_issued_credential(
            response.data, tuple(self.client.settings.ENVELOPE_FIELDS)
        )
        self.client.credentials.set(issued.access_token, issued.user)

        logger.info("Signed in (user id %s)", issued.user.id if issued.user else None)
        return issued

    async def register(
        self, name: str, email: str, mobile_number: str, password: str
    ) -> Dict[str, Any]:
        response = await self.client.post(
            REGISTER_PATH,
            json={
                "username": email,
                "email": email,
                "password": password,
                "name": name,
                "mobileNumber": mobile_number,
            },
        )
        logger.info("Account registered")
        return response.data if isinstance(response.data, dict) else {}

    async def logout(self) -> None:
        """
        Ends the server session. Local credentials are cleared even when
        the backend call fails.
        """
        try:
            await self.client.post(LOGOUT_PATH, json={})
        finally:
            self.client.credentials.clear()
            self.client.csrf.forget()
            logger.info("Signed out")

    async def restore(self) -> Optional[AuthState]:
        """
        Re-establishes a credential from the session cookie.

        Returns the current state unchanged while the held token is still
        fresh, and ``None`` when the backend has no session to restore.
        """
        credentials = self.client.credentials
        token = credentials.access_token
        leeway = self.client.settings.TOKEN_EXPIRY_LEEWAY

        if token and not is_token_expired(token, leeway):
            return credentials.get()

        try:
            return await self.client.refresh_session(notify=False)
        except (Unauthorized, Forbidden) as exc:
            logger.info("No session to restore (%s)", exc.status)
            return None
