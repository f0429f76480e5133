"""
Normalization of heterogeneous backend responses.

The storefront backend answers in several shapes depending on the
endpoint and its version: bare objects, ``ApiResponse`` envelopes,
``ErrorResponseDto`` bodies and raw validation maps. This module maps all
of them to the library's internal types so callers never probe shapes
themselves.
"""

import json

import jwt
import httpx

from storefront_client.choices import ERROR_KIND
from storefront_client.envelope import unwrap
from storefront_client.utils.log import get_logger
from storefront_client.compat import Any, Mapping, Optional
from storefront_client.utils.tokens import parse_roles, user_from_token
from storefront_client.types import ErrorInfo, IssuedCredential, UserIdentity, as_user_id
from storefront_client.exceptions import (
    ApiError,
    Conflict,
    Forbidden,
    NotFound,
    ServerError,
    NetworkError,
    Unauthorized,
    SessionExpired,
    ValidationFailed,
)


logger = get_logger(__name__)

GENERIC_MESSAGE = "An unexpected error occurred."
FORM_ERRORS_MESSAGE = "Please correct the errors in the form."

STATUS_MESSAGES = {
    400: "Invalid request - incorrect data.",
    401: "Not authenticated - please sign in again.",
    403: "Access denied - insufficient permissions.",
    404: "Resource not found.",
    409: "Conflict - the resource already exists.",
    429: "Too many attempts - please wait.",
    500: "Internal server error.",
    502: "Service temporarily unavailable.",
    503: "Service under maintenance.",
    504: "Server timeout.",
}

CSRF_FAILURE_MESSAGE = "Security token missing or invalid - please retry."
SESSION_EXPIRED_MESSAGE = "Your session has expired - please sign in again."

NETWORK_MESSAGES = {
    ERROR_KIND.NETWORK: "Connection problem - check your internet access.",
    ERROR_KIND.TIMEOUT: "The request timed out - please retry.",
}
CONNECTION_REFUSED_MESSAGE = "Server unreachable."

STATUS_EXCEPTIONS = {
    400: ValidationFailed,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    409: Conflict,
}


def read_payload(response: httpx.Response) -> Any:
    """
    Decodes a response body: JSON when possible, text otherwise.

    Empty bodies decode to ``None``.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except (ValueError, UnicodeDecodeError):
        return response.text


def _is_error_response_dto(data: Any) -> bool:
    return isinstance(data, Mapping) and "errorCode" in data and "message" in data


def _is_api_response(data: Any) -> bool:
    return isinstance(data, Mapping) and "status" in data


def _is_validation_map(data: Any) -> bool:
    return (
        isinstance(data, Mapping)
        and bool(data)
        and all(isinstance(v, str) for v in data.values())
    )


def normalize_error(payload: Any = None, status: Optional[int] = None) -> ErrorInfo:
    """
    Builds the user-facing description of a failed HTTP exchange.
    """
    if _is_error_response_dto(payload):
        errors = payload.get("errors") or None
        if errors:
            return ErrorInfo(payload.get("message") or FORM_ERRORS_MESSAGE, dict(errors), status)
        return ErrorInfo(payload["message"], None, status)

    if status == 400 and payload:
        if _is_validation_map(payload):
            return ErrorInfo(FORM_ERRORS_MESSAGE, dict(payload), status)
        if isinstance(payload, str) and "validation" in payload.lower():
            return ErrorInfo("Invalid form data.", None, status)

    if _is_api_response(payload) and payload.get("status") == "ERROR":
        errors = payload.get("errors") or None
        message = payload.get("message") or (FORM_ERRORS_MESSAGE if errors else None)
        if message:
            return ErrorInfo(message, dict(errors) if errors else None, status)

    if status:
        return ErrorInfo(STATUS_MESSAGES.get(status, f"Error {status}"), None, status)

    return ErrorInfo(GENERIC_MESSAGE)


def _mentions_csrf(payload: Any) -> bool:
    if payload is None:
        return False
    text = payload if isinstance(payload, str) else json.dumps(payload, default=str)
    return "csrf" in text.lower() or "xsrf" in text.lower()


def error_from_response(
    response: httpx.Response,
    csrf_header_name: str = "X-XSRF-TOKEN",
    safe_methods=("GET", "HEAD", "OPTIONS"),
) -> ApiError:
    """
    Maps a non-2xx response to the typed exception for its status.
    """
    status = response.status_code
    payload = read_payload(response)
    info = normalize_error(payload, status)
    method = response.request.method
    path = response.request.url.path

    if status == 403:
        sent_without_token = (
            method not in safe_methods
            and csrf_header_name not in response.request.headers
        )
        is_csrf_failure = sent_without_token or _mentions_csrf(payload)
        if is_csrf_failure and info.message == STATUS_MESSAGES[403]:
            info = info._replace(message=CSRF_FAILURE_MESSAGE)
        return Forbidden(
            info,
            payload=payload,
            method=method,
            path=path,
            is_csrf_failure=is_csrf_failure,
        )

    exc_class = STATUS_EXCEPTIONS.get(status)
    if exc_class is None:
        exc_class = ServerError if status >= 500 else ApiError

    return exc_class(info, payload=payload, method=method, path=path)


def error_from_transport(
    exc: httpx.HTTPError, method: Optional[str] = None, path: Optional[str] = None
) -> NetworkError:
    """
    Maps a transport-level failure (no HTTP status) to ``NetworkError``.
    """
    if isinstance(exc, httpx.TimeoutException):
        kind = ERROR_KIND.TIMEOUT
        message = NETWORK_MESSAGES[kind]
    else:
        kind = ERROR_KIND.NETWORK
        detail = str(exc)
        if "refused" in detail.lower():
            message = CONNECTION_REFUSED_MESSAGE
        else:
            message = NETWORK_MESSAGES[kind]

    return NetworkError(ErrorInfo(message), kind=kind, method=method, path=path)


def session_expired(cause: ApiError) -> SessionExpired:
    """Re-labels a 401 that can no longer be recovered."""
    return SessionExpired(
        ErrorInfo(SESSION_EXPIRED_MESSAGE, None, cause.status),
        payload=cause.payload,
        method=cause.method,
        path=cause.path,
    )


def _parse_role_set(role_set: Any) -> Optional[tuple]:
    if not isinstance(role_set, list) or not role_set:
        return None

    if isinstance(role_set[0], str):
        return tuple(role_set)

    roles = []
    for role in role_set:
        name = role.get("name") if isinstance(role, Mapping) else None
        if isinstance(name, Mapping):
            name = name.get("name")
        name = name or "USER"
        roles.append(name if name.startswith("ROLE_") else f"ROLE_{name}")
    return tuple(roles)


def parse_user(data: Mapping[str, Any]) -> UserIdentity:
    """
    Maps a backend user/customer object to ``UserIdentity``.
    """
    user_id = data.get("customerId") or data.get("id") or data.get("userId") or 0
    roles = _parse_role_set(data.get("roleSet")) or parse_roles(data.get("roles"))
    email = data.get("email") or ""

    return UserIdentity(
        id=as_user_id(user_id),
        username=email or data.get("username") or "",
        email=email,
        name=data.get("name") or "",
        mobile_number=data.get("mobileNumber") or data.get("mobile_number") or "",
        roles=roles,
        address=data.get("address"),
    )


def parse_issued_credential(payload: Any, envelope_fields=("status", "data")) -> IssuedCredential:
    """
    Extracts the credential from a login or refresh response.

    The payload may be a bare ``LoginResponseDto`` or an envelope wrapping
    one. When the response carries no user object the identity is read
    from the token's claims.

    Raises:
        ApiError: If no access token can be found in the payload.
    """
    data = unwrap(payload, envelope_fields)
    if isinstance(data, Mapping) and "jwtToken" not in data and isinstance(data.get("data"), Mapping):
        data = data["data"]

    token = data.get("jwtToken") if isinstance(data, Mapping) else None
    if not isinstance(token, str) or not token:
        logger.error("Unsupported credential response shape")
        raise ApiError(ErrorInfo("Unsupported response format from the server."))

    access_token = data["jwtToken"]
    user_data = data.get("user")

    if isinstance(user_data, Mapping) and user_data:
        user = parse_user(user_data)
    else:
        try:
            user = user_from_token(access_token)
        except jwt.InvalidTokenError:
            user = None

    return IssuedCredential(
        access_token=access_token,
        user=user,
        refresh_token=data.get("refreshToken") or None,
        expires_in=data.get("expiresIn") or None,
        message=data.get("message") or "",
    )

