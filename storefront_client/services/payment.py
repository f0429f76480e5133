"""
Card payments and the checkout flow built on them.

The card itself is confirmed by the payment provider's own SDK, which the
application injects as ``confirm_card_payment``; this module only talks
to the storefront backend.
"""

from storefront_client.exceptions import ApiError
from storefront_client.utils.log import get_logger
from storefront_client.services.orders import OrderService
from storefront_client.base.services import BaseService
from storefront_client.compat import Awaitable, Callable, List, Optional
from storefront_client.types import CardPaymentResult, CartItem, CheckoutResult, PaymentIntent


logger = get_logger(__name__)

DEFAULT_CURRENCY = "eur"
PAYMENT_SUCCEEDED = "succeeded"

EMPTY_CART_MESSAGE = "The cart is empty."
MISSING_SECRET_MESSAGE = "The server did not return a payment secret."
PAYMENT_INCOMPLETE_MESSAGE = "The payment did not complete."


class PaymentService(BaseService):
    async def create_intent(
        self, amount_cents: int, currency: str = DEFAULT_CURRENCY
    ) -> PaymentIntent:
        response = await self.client.post(
            "/payment/create-payment-intent",
            json={"amount": amount_cents, "currency": currency.lower()},
        )
        data = response.data if isinstance(response.data, dict) else {}
        intent = PaymentIntent(
            payment_intent_id=data.get("paymentIntentId") or "",
            client_secret=data.get("clientSecret") or "",
        )
        logger.info("Payment intent %s created", intent.payment_intent_id)
        return intent

    async def confirm(self, payment_intent_id: str) -> None:
        await self.client.post(f"/payment/{payment_intent_id}/confirm")

    async def cancel(self, payment_intent_id: str) -> None:
        await self.client.post(f"/payment/{payment_intent_id}/cancel")
        logger.info("Payment %s cancelled", payment_intent_id)


class CheckoutService(BaseService):
    """
    Pays for a cart and records the resulting order.

    Failures are reported on the returned ``CheckoutResult`` rather than
    raised, so the caller can show them next to the payment form.
    """

    def __init__(
        self,
        client,
        payments: Optional[PaymentService] = None,
        orders: Optional[OrderService] = None,
    ):
        super().__init__(client)
        self.payments = payments or PaymentService(client)
        self.orders = orders or OrderService(client)

    async def checkout(
        self,
        cart: List[CartItem],
        total_price: float,
        confirm_card_payment: Callable[[str], Awaitable[CardPaymentResult]],
    ) -> CheckoutResult:
        if not cart:
            return CheckoutResult(False, error=EMPTY_CART_MESSAGE)

        try:
            intent = await self.payments.create_intent(round(total_price * 100))
        except ApiError as exc:
            logger.error("Could not create payment intent: %s", exc)
            return CheckoutResult(False, error=exc.message)

        if not intent.client_secret:
            return CheckoutResult(False, error=MISSING_SECRET_MESSAGE)

        outcome = await confirm_card_payment(intent.client_secret)
        payment_intent_id = outcome.payment_intent_id or intent.payment_intent_id

        if outcome.error:
            logger.warning("Card payment %s declined", payment_intent_id)
            return CheckoutResult(False, payment_intent_id=payment_intent_id, error=outcome.error)

        if outcome.status != PAYMENT_SUCCEEDED:
            return CheckoutResult(
                False, payment_intent_id=payment_intent_id, error=PAYMENT_INCOMPLETE_MESSAGE
            )

        async def create_order():
            return await self.orders.create(total_price, payment_intent_id, outcome.status, cart)

        try:
            order_id = await self.with_csrf_retry(create_order)
        except ApiError as exc:
            logger.error(
                "Payment %s succeeded but the order was not recorded: %s",
                payment_intent_id,
                exc,
            )
            return CheckoutResult(False, payment_intent_id=payment_intent_id, error=exc.message)

        return CheckoutResult(True, order_id=order_id, payment_intent_id=payment_intent_id)
