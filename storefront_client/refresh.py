"""
Exchange of the session cookie for a new access credential.

The refresh call is made directly on the transport rather than through
the request pipeline so that its own failure can never trigger another
refresh. It reports failures unchanged; deciding that the session has
ended is the pipeline's job.
"""

import httpx

from storefront_client.types import IssuedCredential
from storefront_client.utils.log import get_logger
from storefront_client.normalizers import (
    read_payload,
    error_from_response,
    error_from_transport,
    parse_issued_credential,
)


logger = get_logger(__name__)


class RefreshOperation:
    """
    Callable issuing ``POST REFRESH_PATH`` with the ambient session cookie.
    """

    __slots__ = ("_http", "_settings")

    def __init__(self, http: httpx.AsyncClient, settings):
        self._http = http
        self._settings = settings

    async def __call__(self) -> IssuedCredential:
        path = self._settings.REFRESH_PATH

        try:
            response = await self._http.post(path, json={})
        except httpx.HTTPError as exc:
            logger.error("Refresh request failed: %s", exc.__class__.__name__)
            raise error_from_transport(exc, "POST", path) from exc

        if not response.is_success:
            error = error_from_response(
                response,
                self._settings.CSRF_HEADER_NAME,
                self._settings.SAFE_METHODS,
            )
            logger.error("Refresh rejected with status %s", response.status_code)
            raise error

        return parse_issued_credential(
            read_payload(response), self._settings.ENVELOPE_FIELDS
        )
