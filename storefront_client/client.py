"""
The authenticated request pipeline.

Every call to the storefront backend goes through ``ApiClient.send``,
which attaches the bearer credential and the anti-forgery token, unwraps
the response envelope, and recovers transparently from an expired access
token by running one coordinated refresh and replaying the request once.
"""

import asyncio

import httpx

from storefront_client.envelope import unwrap
from storefront_client.choices import ERROR_KIND
from storefront_client.csrf import CsrfTokenProvider
from storefront_client.utils.log import get_logger
from storefront_client.refresh import RefreshOperation
from storefront_client.settings import storefront_settings
from storefront_client.coordination import RefreshCoordinator
from storefront_client.utils.generators import generate_request_id
from storefront_client.credentials import CredentialStore, IdentityCache
from storefront_client.compat import Any, Callable, Mapping, Optional, Self
from storefront_client.exceptions import ApiError, NetworkError
from storefront_client.types import ApiResponse, AuthState, ErrorInfo, RequestDescriptor
from storefront_client.normalizers import (
    read_payload,
    session_expired,
    error_from_response,
    error_from_transport,
)


logger = get_logger(__name__)

REFRESH_INTERRUPTED_MESSAGE = "Session refresh was interrupted."


class ApiClient:
    """
    Async HTTP client for the storefront REST backend.

    Args:
        settings: A ``StorefrontSettings`` instance; the module-level
            settings are used when omitted.
        credentials: Shared ``CredentialStore``; a new one is created when
            omitted.
        transport: Optional httpx transport (used by tests to fake the
            backend).
        on_session_expired: Callable receiving ``LOGIN_REDIRECT_URL`` when
            the session can no longer be recovered. Defaults to
            ``SESSION_EXPIRED_HOOK``.
    """

    def __init__(
        self,
        settings=None,
        credentials: Optional[CredentialStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_session_expired: Optional[Callable[[str], Any]] = None,
    ):
        self.settings = settings or storefront_settings

        if credentials is None:
            cache_path = self.settings.IDENTITY_CACHE_PATH
            credentials = CredentialStore(IdentityCache(cache_path) if cache_path else None)
        self.credentials = credentials

        self._http = httpx.AsyncClient(
            base_url=self.settings.BASE_URL,
            headers=self.settings.DEFAULT_HEADERS,
            timeout=self.settings.TIMEOUT.total_seconds(),
            verify=self.settings.VERIFY_SSL,
            transport=transport,
        )
        self.csrf = CsrfTokenProvider(self._http, self.settings)
        self.refresher = RefreshOperation(self._http, self.settings)
        self._coordinator = RefreshCoordinator()
        self._on_session_expired = on_session_expired or self.settings.SESSION_EXPIRED_HOOK

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def cookies(self) -> httpx.Cookies:
        return self._http.cookies

    @property
    def refresh_in_flight(self) -> bool:
        return self._coordinator.in_flight

    @property
    def waiting_for_refresh(self) -> int:
        """Number of callers suspended until the running refresh settles."""
        return len(self._coordinator)

    def is_auth_endpoint(self, path: str) -> bool:
        return self.settings.AUTH_PATH_MARKER in path

    async def send(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ApiResponse:
        """
        Sends one request through the pipeline.

        Raises:
            ApiError: The typed error for the failure. ``NetworkError`` for
                transport failures, ``SessionExpired`` when the session
                cannot be recovered.
        """
        request = RequestDescriptor(method.upper(), path, json, params, headers)
        return await self._send(request)

    async def get(self, path: str, **kwargs) -> ApiResponse:
        return await self.send("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> ApiResponse:
        return await self.send("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> ApiResponse:
        return await self.send("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs) -> ApiResponse:
        return await self.send("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> ApiResponse:
        return await self.send("DELETE", path, **kwargs)

    async def refresh_session(self, notify: bool = True) -> AuthState:
        """
        Runs the refresh operation, or joins the one already running.

        On failure the credential is cleared, every queued caller is
        rejected with the same error, and (when ``notify`` is set) the
        session-expired hook fires.
        """
        if not self._coordinator.begin():
            await self._coordinator.subscribe()
            return self.credentials.get()

        logger.info("Refreshing access token")
        try:
            issued = await self.refresher()
            state = self.credentials.set(issued.access_token, issued.user)
        except Exception as exc:
            logger.error("Access token refresh failed: %r", exc)
            self.credentials.clear()
            self._coordinator.reject(exc)
            if notify:
                self._notify_session_expired()
            raise
        except asyncio.CancelledError:
            self._coordinator.reject(
                NetworkError(ErrorInfo(REFRESH_INTERRUPTED_MESSAGE), kind=ERROR_KIND.NETWORK)
            )
            raise

        self._coordinator.resolve(issued.access_token)
        logger.info("Access token refreshed")
        return state

    async def _send(self, request: RequestDescriptor) -> ApiResponse:
        sent_token = self.credentials.access_token
        http_request = await self._prepare(request, sent_token)
        response = await self._dispatch(http_request, request)

        if response.is_success:
            return self._complete(request, response)

        error = error_from_response(
            response, self.settings.CSRF_HEADER_NAME, self.settings.SAFE_METHODS
        )

        if response.status_code == 403:
            logger.warning(
                "Access denied (403) for %s %s (credential=%s, anti-forgery=%s)",
                request.method,
                request.path,
                "Authorization" in http_request.headers,
                self.settings.CSRF_HEADER_NAME in http_request.headers,
            )

        if (
            response.status_code == 401
            and not request.retried
            and not self.is_auth_endpoint(request.path)
        ):
            return await self._recover(request, error, sent_token)

        raise error

    async def _recover(
        self, request: RequestDescriptor, error: ApiError, sent_token: Optional[str]
    ) -> ApiResponse:
        replay = request._replace(retried=True)

        if self._coordinator.in_flight:
            logger.debug("Refresh in flight, queueing %s %s", request.method, request.path)
            await self.refresh_session()
            return await self._send(replay)

        current = self.credentials.access_token
        if current is None:
            logger.info("Unauthorized without a credential, session expired")
            self._notify_session_expired()
            raise session_expired(error) from error

        # A refresh completed while this request was on the wire.
        if current != sent_token:
            return await self._send(replay)

        await self.refresh_session()
        return await self._send(replay)

    async def _prepare(
        self, request: RequestDescriptor, token: Optional[str]
    ) -> httpx.Request:
        headers = httpx.Headers(request.headers or {})
        headers.setdefault(self.settings.REQUEST_ID_HEADER, generate_request_id())

        if token:
            headers["Authorization"] = f"{self.settings.AUTH_HEADER_TYPE} {token}"
        else:
            headers.pop("Authorization", None)

        csrf_header = self.settings.CSRF_HEADER_NAME
        if request.method in self.settings.SAFE_METHODS:
            headers.pop(csrf_header, None)
        else:
            csrf_token = await self.csrf.ensure()
            if csrf_token:
                headers[csrf_header] = csrf_token
            else:
                logger.warning(
                    "Sending %s %s without an anti-forgery token",
                    request.method,
                    request.path,
                )

        return self._http.build_request(
            request.method,
            request.path,
            json=request.json,
            params=request.params,
            headers=headers,
        )

    async def _dispatch(
        self, http_request: httpx.Request, request: RequestDescriptor
    ) -> httpx.Response:
        logger.debug("%s %s (retried=%s)", request.method, request.path, request.retried)
        try:
            response = await self._http.send(http_request)
        except httpx.HTTPError as exc:
            logger.warning(
                "%s %s failed: %s", request.method, request.path, exc.__class__.__name__
            )
            raise error_from_transport(exc, request.method, request.path) from exc

        logger.debug("%s %s -> %s", request.method, request.path, response.status_code)
        return response

    def _complete(self, request: RequestDescriptor, response: httpx.Response) -> ApiResponse:
        self.csrf.remember(response.headers.get(self.settings.CSRF_HEADER_NAME))

        data = read_payload(response)
        if not self.is_auth_endpoint(request.path):
            data = unwrap(data, tuple(self.settings.ENVELOPE_FIELDS))

        return ApiResponse(response.status_code, data, response.headers)

    def _notify_session_expired(self) -> None:
        self.credentials.clear()
        hook = self._on_session_expired
        if hook is not None:
            hook(self.settings.LOGIN_REDIRECT_URL)
