"""
Abstract base class for the storefront feature services.

Services are thin, stateless wrappers that map one backend resource to
typed Python calls. They all share the caller's ``ApiClient`` so that
every request flows through the same credential and refresh handling.
"""

import asyncio

from storefront_client.exceptions import Forbidden
from storefront_client.utils.log import get_logger
from storefront_client.compat import TYPE_CHECKING, Any, Awaitable, Callable

if TYPE_CHECKING:
    from storefront_client.client import ApiClient


logger = get_logger(__name__)

CSRF_RETRY_BACKOFF = 0.5


class BaseService:
    """
    Core template for services bound to an ``ApiClient``.
    """

    def __init__(self, client: "ApiClient"):
        self.client = client

    async def with_csrf_retry(
        self,
        operation: Callable[[], Awaitable[Any]],
        retries: int = 2,
    ) -> Any:
        """
        Runs ``operation``, retrying after an anti-forgery 403 with a fresh token.

        A 403 for missing privileges is re-raised at once.

        Each retry waits ``retry * CSRF_RETRY_BACKOFF`` seconds first. The
        last ``Forbidden`` is re-raised once ``retries`` are exhausted.
        """
        retry = 0
        while True:
            try:
                return await operation()
            except Forbidden as exc:
                if not exc.is_csrf_failure:
                    raise
                if retry >= retries:
                    logger.error("Giving up after %s anti-forgery retries: %s", retry, exc)
                    raise

                retry += 1
                delay = retry * CSRF_RETRY_BACKOFF
                logger.warning(
                    "Anti-forgery rejection, retry %s/%s in %.1fs",
                    retry,
                    retries,
                    delay,
                )
                await asyncio.sleep(delay)
                await self.client.csrf.refresh()
