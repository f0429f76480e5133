"""
In-memory credential storage and the optional identity cache.

The access credential only ever lives in memory. The identity of the
signed-in account may additionally be written to a small JSON file so an
application can show who was signed in before the first request
completes; nothing in the request pipeline reads that file.
"""

import json
from pathlib import Path

import jwt

from storefront_client.utils.log import get_logger
from storefront_client.utils.tokens import user_from_token
from storefront_client.types import AuthState, UserIdentity
from storefront_client.compat import Optional, Union


logger = get_logger(__name__)

_EMPTY = AuthState(access_token=None, user=None)


class IdentityCache:
    """
    JSON file holding the last known ``UserIdentity``.
    """

    __slots__ = ("path",)

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[UserIdentity]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

        try:
            return UserIdentity.from_dict(json.loads(raw))
        except (ValueError, TypeError, AttributeError):
            logger.warning("Ignoring unreadable identity cache at %s", self.path)
            return None

    def save(self, user: UserIdentity) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(user.to_dict()), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class CredentialStore:
    """
    Holds the current access credential and the identity it belongs to.

    Each change replaces the whole ``AuthState``, so readers see either a
    complete state or the empty one.
    """

    __slots__ = ("_state", "_identity_cache")

    def __init__(self, identity_cache: Optional[IdentityCache] = None):
        self._state = _EMPTY
        self._identity_cache = identity_cache

    def get(self) -> AuthState:
        return self._state

    @property
    def access_token(self) -> Optional[str]:
        return self._state.access_token

    @property
    def user(self) -> Optional[UserIdentity]:
        return self._state.user

    @property
    def is_authenticated(self) -> bool:
        return self._state.access_token is not None

    @property
    def cached_identity(self) -> Optional[UserIdentity]:
        """
        Identity remembered from a previous run, for display only.
        """
        if self._state.user is not None:
            return self._state.user
        if self._identity_cache is None:
            return None
        return self._identity_cache.load()

    def set(self, access_token: str, user: Optional[UserIdentity] = None) -> AuthState:
        """
        Stores a newly issued credential.

        When ``user`` is omitted the identity is read from the token's
        claims; a token that cannot be decoded is still stored.
        """
        if not access_token or not isinstance(access_token, str):
            raise ValueError("An access token must be a non-empty string.")

        if user is None:
            try:
                user = user_from_token(access_token)
            except jwt.InvalidTokenError:
                logger.debug("Access token claims are not readable")

        self._state = AuthState(access_token=access_token, user=user)

        if self._identity_cache is not None and user is not None:
            try:
                self._identity_cache.save(user)
            except OSError:
                logger.warning("Could not persist identity cache", exc_info=True)

        return self._state

    def clear(self) -> None:
        self._state = _EMPTY
        if self._identity_cache is not None:
            try:
                self._identity_cache.clear()
            except OSError:
                logger.warning("Could not remove identity cache", exc_info=True)
