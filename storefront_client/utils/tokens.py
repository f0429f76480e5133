"""
Utilities for reading access token claims.

The client never holds the backend's signing key, so claims are decoded
without signature verification. They are only used to describe the
signed-in account and to anticipate expiry; the backend's 401 remains the
authoritative signal that a credential is no longer valid.
"""

import json
import time
from datetime import timedelta

import jwt

from storefront_client.types import UserIdentity, as_user_id
from storefront_client.compat import Any, Dict, Tuple


DEFAULT_ROLES = ("ROLE_USER",)


def decode_claims(token: str) -> Dict[str, Any]:
    """
    Returns the unverified claims of a JWT.

    Raises:
        jwt.DecodeError: If the token is not a well-formed JWT.
    """
    return jwt.decode(
        token,
        options={"verify_signature": False, "verify_exp": False},
        algorithms=["HS256", "HS384", "HS512", "RS256", "ES256"],
    )


def parse_roles(roles: Any) -> Tuple[str, ...]:
    """
    Normalizes the role claim shapes emitted by the backend.

    Accepts a list, a comma separated string or a JSON array encoded as a
    string. Missing roles default to ``ROLE_USER``.
    """
    if not roles:
        return DEFAULT_ROLES

    if isinstance(roles, (list, tuple)):
        return tuple(str(role) for role in roles)

    if isinstance(roles, str):
        if roles.startswith("["):
            try:
                return tuple(str(role) for role in json.loads(roles))
            except ValueError:
                pass
        return tuple(
            role.strip().strip("\"'") for role in roles.strip("[]").split(",")
            if role.strip()
        )

    return DEFAULT_ROLES


def user_from_token(token: str) -> UserIdentity:
    """
    Builds the account identity carried in an access token's claims.
    """
    claims = decode_claims(token)

    user_id = claims.get("userId")
    if user_id is None:
        try:
            user_id = int(claims.get("sub") or 0)
        except (TypeError, ValueError):
            user_id = 0

    return UserIdentity(
        id=as_user_id(user_id),
        username=claims.get("username") or claims.get("sub") or "",
        email=claims.get("email") or "",
        name=claims.get("name") or claims.get("username") or "",
        mobile_number=claims.get("mobileNumber") or "",
        roles=parse_roles(claims.get("roles")),
    )


def is_token_expired(token: str, leeway: timedelta = timedelta(seconds=30)) -> bool:
    """
    Reports whether a token is expired, or will be within ``leeway``.

    Tokens without an ``exp`` claim, or that cannot be decoded, are
    treated as expired.
    """
    try:
        claims = decode_claims(token)
    except jwt.InvalidTokenError:
        return True

    exp = claims.get("exp")
    if not exp:
        return True

    return time.time() >= float(exp) - leeway.total_seconds()
