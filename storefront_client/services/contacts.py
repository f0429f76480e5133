"""
Contact form submissions and their moderation.
"""

from storefront_client.utils.log import get_logger
from storefront_client.choices import CONTACT_STATUS
from storefront_client.exceptions import ApiError
from storefront_client.base.services import BaseService
from storefront_client.compat import Any, List, Mapping, Optional, Union
from storefront_client.types import ContactInfo, ContactMessage, ContactSubmitResult, ErrorInfo


logger = get_logger(__name__)

FALLBACK_CONTACT_INFO = ContactInfo(phone="", email="", address="")
INVALID_FORMAT_MESSAGE = "Unexpected response format for contact messages."


def _pick(data: Mapping[str, Any], snake: str, camel: str) -> Any:
    value = data.get(snake)
    return value if value is not None else data.get(camel)


def parse_contact_message(data: Mapping[str, Any]) -> ContactMessage:
    """
    Maps a backend message, in either snake_case or camelCase, to
    ``ContactMessage``.
    """
    return ContactMessage(
        contact_id=_pick(data, "contact_id", "contactId"),
        name=data.get("name") or "",
        email=data.get("email") or "",
        mobile_number=_pick(data, "mobile_number", "mobileNumber") or "",
        message=data.get("message") or "",
        status=data.get("status"),
        created_at=_pick(data, "created_at", "createdAt"),
        created_by=_pick(data, "created_by", "createdBy"),
        updated_at=_pick(data, "updated_at", "updatedAt"),
        updated_by=_pick(data, "updated_by", "updatedBy"),
    )


class ContactService(BaseService):
    def __init__(self, client, fallback: ContactInfo = FALLBACK_CONTACT_INFO):
        super().__init__(client)
        self.fallback = fallback

    async def info(self) -> ContactInfo:
        try:
            response = await self.client.get("/contacts")
        except ApiError as exc:
            logger.warning("Contact info unavailable, using fallback: %s", exc)
            return self.fallback

        data = response.data if isinstance(response.data, Mapping) else {}
        return ContactInfo(
            phone=data.get("phone") or self.fallback.phone,
            email=data.get("email") or self.fallback.email,
            address=data.get("address") or self.fallback.address,
        )

    async def submit(
        self, name: str, email: str, mobile_number: str, message: str
    ) -> ContactSubmitResult:
        try:
            response = await self.client.post(
                "/contacts",
                json={
                    "name": name,
                    "email": email,
                    "mobileNumber": mobile_number,
                    "message": message,
                },
            )
        except ApiError as exc:
            logger.info("Contact form rejected: %s", exc)
            return ContactSubmitResult(False, error=exc.message, validation_errors=exc.errors)

        data = response.data if isinstance(response.data, Mapping) else {}
        return ContactSubmitResult(True, contact_id=_pick(data, "contact_id", "contactId"))

    # Administration

    async def messages(
        self,
        status: Optional[Union[CONTACT_STATUS, str]] = None,
        only_open: Optional[bool] = None,
    ) -> List[ContactMessage]:
        params = {}
        if status:
            params["status"] = CONTACT_STATUS(status).value
        if only_open is not None:
            params["onlyOpen"] = "true" if only_open else "false"

        response = await self.client.get("/admin/messages", params=params)
        data = response.data
        if isinstance(data, Mapping) and "data" in data:
            data = data["data"]

        if not isinstance(data, list):
            raise ApiError(ErrorInfo(INVALID_FORMAT_MESSAGE), payload=response.data)

        return [parse_contact_message(item) for item in data]

    async def close(self, contact_id: int) -> None:
        await self.client.patch(f"/admin/messages/{contact_id}/close")
        logger.info("Message %s closed", contact_id)

    async def reopen(self, contact_id: int) -> None:
        await self.client.patch(f"/admin/messages/{contact_id}/reopen")
        logger.info("Message %s reopened", contact_id)

    async def delete(self, contact_id: int) -> None:
        await self.client.delete(f"/admin/messages/{contact_id}")
        logger.info("Message %s deleted", contact_id)
