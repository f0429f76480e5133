"""
Constants shared between the request pipeline and the feature services.

This module names the error categories surfaced to callers and the
status vocabularies the storefront backend uses for orders, contact
messages and account roles.
"""

from enum import Enum


class ERROR_KIND(str, Enum):
    """
    Categories of failure reported on every raised ``ApiError``.

    Attributes:
        UNAUTHORIZED: 401 that was not (or could no longer be) recovered.
        SESSION_EXPIRED: 401 with no credential left to refresh.
        FORBIDDEN: 403, either an anti-forgery mismatch or missing privileges.
        VALIDATION: 400 carrying field-level errors.
        NOT_FOUND: 404.
        CONFLICT: 409, typically "already exists".
        SERVER: any 5xx status.
        NETWORK: the backend could not be reached.
        TIMEOUT: the backend did not answer in time.
        UNKNOWN: anything else.
    """

    UNAUTHORIZED = "unauthorized"
    SESSION_EXPIRED = "session_expired"
    FORBIDDEN = "forbidden"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER = "server"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class ORDER_STATUS(str, Enum):
    CREATED = "CREATED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    DELIVERED = "DELIVERED"


class CONTACT_STATUS(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class ROLE(str, Enum):
    USER = "ROLE_USER"
    EMPLOYEE = "ROLE_EMPLOYEE"
    MANAGER = "ROLE_MANAGER"
    ADMIN = "ROLE_ADMIN"
