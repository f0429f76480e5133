"""
The signed-in customer's own profile.
"""

from storefront_client.types import Profile
from storefront_client.compat import Any, Mapping
from storefront_client.utils.log import get_logger
from storefront_client.base.services import BaseService


logger = get_logger(__name__)

EMPTY_ADDRESS = {"street": "", "city": "", "state": "", "postalCode": "", "country": ""}


def parse_profile(data: Any) -> Profile:
    data = data if isinstance(data, Mapping) else {}
    return Profile(
        name=data.get("name") or "",
        email=data.get("email") or "",
        mobile_number=data.get("mobileNumber") or "",
        address=dict(data.get("address") or EMPTY_ADDRESS),
        email_updated=bool(data.get("emailUpdated")),
    )


class ProfileService(BaseService):
    async def get(self) -> Profile:
        response = await self.client.get("/profile")
        return parse_profile(response.data)

    async def update(
        self,
        name: str,
        email: str,
        mobile_number: str,
        street: str = "",
        city: str = "",
        state: str = "",
        postal_code: str = "",
        country: str = "",
    ) -> Profile:
        response = await self.client.put(
            "/profile",
            json={
                "name": name.strip(),
                "email": email.strip(),
                "mobileNumber": mobile_number.strip(),
                "street": street.strip(),
                "city": city.strip(),
                "state": state.strip(),
                "postalCode": postal_code.strip(),
                "country": country.strip(),
            },
        )
        profile = parse_profile(response.data)
        logger.info("Profile updated (email changed: %s)", profile.email_updated)
        return profile
