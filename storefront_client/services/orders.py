"""
Customer orders and their administration.
"""

from storefront_client.choices import ORDER_STATUS
from storefront_client.utils.log import get_logger
from storefront_client.base.services import BaseService
from storefront_client.types import CartItem, OrderStats
from storefront_client.compat import Any, Dict, List, Optional, Union


logger = get_logger(__name__)


class OrderService(BaseService):
    async def create(
        self,
        total_price: float,
        payment_intent_id: str,
        payment_status: str,
        items: List[CartItem],
    ) -> Optional[int]:
        """
        Records a paid order and returns its id.
        """
        response = await self.client.post(
            "/orders",
            json={
                "totalPrice": total_price,
                "paymentIntentId": payment_intent_id,
                "paymentStatus": payment_status,
                "items": [item.to_dict() for item in items],
            },
        )
        order_id = response.data.get("orderId") if isinstance(response.data, dict) else None
        logger.info("Order %s created for payment %s", order_id, payment_intent_id)
        return order_id

    async def mine(self) -> List[Dict[str, Any]]:
        response = await self.client.get("/orders/customer")
        return response.data or []

    async def get(self, order_id: int) -> Dict[str, Any]:
        response = await self.client.get(f"/orders/{order_id}")
        return response.data

    # Administration

    async def all(
        self,
        status: Optional[Union[ORDER_STATUS, str]] = None,
        customer_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params = {}
        if status:
            params["status"] = ORDER_STATUS(status).value
        if customer_id:
            params["customerId"] = str(customer_id)

        response = await self.client.get("/admin/orders", params=params)
        return response.data or []

    async def confirm(self, order_id: int) -> None:
        await self.client.patch(f"/admin/orders/{order_id}/confirm")
        logger.info("Order %s confirmed", order_id)

    async def cancel(self, order_id: int) -> None:
        await self.client.patch(f"/admin/orders/{order_id}/cancel")
        logger.info("Order %s cancelled", order_id)

    async def update_status(self, order_id: int, status: Union[ORDER_STATUS, str]) -> None:
        status = ORDER_STATUS(status).value
        await self.client.patch(f"/admin/orders/{order_id}/status", json={"status": status})
        logger.info("Order %s moved to %s", order_id, status)

    async def stats(self) -> OrderStats:
        """
        Aggregates all orders. Cancelled orders do not count towards revenue.
        """
        total_revenue = 0.0
        pending = delivered = 0
        orders = await self.all()

        for order in orders:
            status = order.get("orderStatus")
            if status == ORDER_STATUS.CREATED.value:
                pending += 1
            elif status == ORDER_STATUS.DELIVERED.value:
                delivered += 1

            if status != ORDER_STATUS.CANCELLED.value:
                total_revenue += float(order.get("totalPrice") or 0)

        return OrderStats(len(orders), total_revenue, pending, delivered)
