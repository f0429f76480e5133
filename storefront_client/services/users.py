"""
Account administration: listing users and managing their roles.

Role changes are retried after an anti-forgery rejection, which the
backend issues when the token cookie rotated between requests.
"""

from storefront_client.choices import ROLE
from storefront_client.types import Page
from storefront_client.utils.log import get_logger
from storefront_client.services.products import to_page
from storefront_client.base.services import BaseService
from storefront_client.compat import Any, List, Union


logger = get_logger(__name__)

ASSIGNABLE_ROLES = (ROLE.EMPLOYEE, ROLE.MANAGER, ROLE.ADMIN)


def available_roles(current_roles) -> List[str]:
    """Roles that may still be granted to an account holding ``current_roles``."""
    return [role.value for role in ASSIGNABLE_ROLES if role.value not in current_roles]


def _message(data: Any, default: str) -> str:
    if isinstance(data, dict) and data.get("message"):
        return data["message"]
    return default


class UserAdminService(BaseService):
    async def list(self, page: int = 0, size: int = 20) -> Page:
        response = await self.client.get(
            "/admin/users", params={"page": str(page), "size": str(size)}
        )
        return to_page(response.data, size, page)

    async def assign_role(self, user_id: int, role: Union[ROLE, str]) -> str:
        role = ROLE(role).value

        async def operation():
            response = await self.client.post(f"/admin/users/{user_id}/roles/{role}")
            return _message(response.data, "Role assigned.")

        message = await self.with_csrf_retry(operation)
        logger.info("Role %s assigned to user %s", role, user_id)
        return message

    async def remove_role(self, user_id: int, role: Union[ROLE, str]) -> None:
        role = ROLE(role).value

        async def operation():
            await self.client.delete(f"/admin/users/{user_id}/roles/{role}")

        await self.with_csrf_retry(operation)
        logger.info("Role %s removed from user %s", role, user_id)

    async def promote(self, user_id: int) -> str:
        async def operation():
            response = await self.client.post(f"/admin/users/{user_id}/promote")
            return _message(response.data, "User promoted.")

        message = await self.with_csrf_retry(operation)
        logger.info("User %s promoted", user_id)
        return message
