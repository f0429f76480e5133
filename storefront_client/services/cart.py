"""
Server-side copy of the shopping cart.

The cart normally lives on the client; these calls keep a signed-in
customer's cart in sync with the backend.
"""

from storefront_client.types import CartItem
from storefront_client.exceptions import ApiError
from storefront_client.utils.log import get_logger
from storefront_client.base.services import BaseService
from storefront_client.compat import Any, Dict, List


logger = get_logger(__name__)


class CartService(BaseService):
    async def load(self) -> List[CartItem]:
        """Returns the saved cart, or an empty one if it cannot be read."""
        try:
            response = await self.client.get("/cart")
        except ApiError as exc:
            logger.error("Could not load cart: %s", exc)
            return []

        data = response.data if isinstance(response.data, dict) else {}
        return [CartItem.from_dict(item) for item in data.get("items") or []]

    async def save(self, items: List[CartItem]) -> None:
        await self.client.post("/cart", json={"items": [item.to_dict() for item in items]})
        logger.info("Cart saved (%s items)", len(items))

    async def sync(self, items: List[CartItem]) -> Dict[str, Any]:
        try:
            response = await self.client.post(
                "/cart/sync", json={"items": [item.to_dict() for item in items]}
            )
        except ApiError as exc:
            logger.error("Cart sync failed: %s", exc)
            return {"success": False, "message": exc.message}
        return response.data

    async def availability(self, product_id: int) -> Dict[str, Any]:
        try:
            response = await self.client.get(f"/products/{product_id}/availability")
        except ApiError as exc:
            logger.error("Availability check for product %s failed: %s", product_id, exc)
            return {
                "productId": product_id,
                "available": False,
                "currentStock": 0,
                "price": 0,
                "isActive": False,
            }
        return response.data
