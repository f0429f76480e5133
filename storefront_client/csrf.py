"""
Double-submit anti-forgery token handling.

The backend issues the token as a cookie readable by the client and
expects it echoed in a request header on state-changing calls. A missing
token is never fatal here: the request goes out without the header and
the backend's own rejection is surfaced to the caller.
"""

from urllib.parse import unquote

import httpx

from storefront_client.compat import Optional
from storefront_client.utils.log import get_logger


logger = get_logger(__name__)


class CsrfTokenProvider:
    """
    Reads the anti-forgery token from the transport's cookie jar.
    """

    __slots__ = ("_http", "_settings", "_header_token")

    def __init__(self, http: httpx.AsyncClient, settings):
        self._http = http
        self._settings = settings
        self._header_token: Optional[str] = None

    def read(self) -> Optional[str]:
        names = self._settings.CSRF_COOKIE_NAMES
        # Iterate the jar: Cookies.get() raises on same-name cookies across domains.
        for name in names:
            for cookie in self._http.cookies.jar:
                if cookie.name == name and cookie.value:
                    return unquote(cookie.value)

        return self._header_token

    def remember(self, token: Optional[str]) -> None:
        """Records a token the backend sent back in a response header."""
        if token:
            self._header_token = token

    def forget(self) -> None:
        self._header_token = None

    async def ensure(self) -> Optional[str]:
        """
        Returns a token, fetching one from the backend at most once.
        """
        token = self.read()
        if token:
            return token

        logger.info("Anti-forgery token missing, requesting a new one")
        return await self.refresh()

    async def refresh(self) -> Optional[str]:
        """
        Asks the backend to issue a token, even if one is already held.
        """
        path = self._settings.CSRF_PATH
        try:
            response = await self._http.get(path)
        except httpx.HTTPError as exc:
            logger.warning("Anti-forgery token fetch failed: %s", exc.__class__.__name__)
            return self.read()

        self.remember(response.headers.get(self._settings.CSRF_HEADER_NAME))

        token = self.read()
        if not token:
            logger.warning(
                "Anti-forgery token still missing after fetch (status %s)",
                response.status_code,
            )
        return token
