"""
Exception hierarchy raised by the storefront client.

Every failure that reaches a caller is a ``StorefrontError``. Failures
coming from the backend or the transport are ``ApiError`` instances that
carry the normalized ``ErrorInfo`` built once when the failure was seen.
"""

from storefront_client.choices import ERROR_KIND
from storefront_client.types import ErrorInfo
from storefront_client.compat import Any, Dict, Optional


class StorefrontError(Exception):
    """Base class for every error raised by this library."""


class ImproperlyConfigured(StorefrontError):
    """The client settings are invalid or inconsistent."""


class ApiError(StorefrontError):
    """
    A request to the backend did not produce a usable response.
    """

    default_kind = ERROR_KIND.UNKNOWN

    def __init__(
        self,
        info: ErrorInfo,
        kind: Optional[ERROR_KIND] = None,
        payload: Any = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ):
        super().__init__(info.message)
        self.info = info
        self.kind = kind or self.default_kind
        self.payload = payload
        self.method = method
        self.path = path

    @property
    def status(self) -> Optional[int]:
        return self.info.status

    @property
    def message(self) -> str:
        return self.info.message

    @property
    def errors(self) -> Optional[Dict[str, str]]:
        return self.info.errors

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(status={self.status!r}, "
            f"kind={self.kind.value!r}, message={self.message!r})"
        )


class ValidationFailed(ApiError):
    default_kind = ERROR_KIND.VALIDATION


class Unauthorized(ApiError):
    default_kind = ERROR_KIND.UNAUTHORIZED


class SessionExpired(Unauthorized):
    """The session cannot be recovered; the user must sign in again."""

    default_kind = ERROR_KIND.SESSION_EXPIRED


class Forbidden(ApiError):
    default_kind = ERROR_KIND.FORBIDDEN

    def __init__(self, *args, is_csrf_failure: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.is_csrf_failure = is_csrf_failure


class NotFound(ApiError):
    default_kind = ERROR_KIND.NOT_FOUND


class Conflict(ApiError):
    default_kind = ERROR_KIND.CONFLICT


class ServerError(ApiError):
    default_kind = ERROR_KIND.SERVER


class NetworkError(ApiError):
    """The backend could not be reached or did not answer in time."""

    default_kind = ERROR_KIND.NETWORK
