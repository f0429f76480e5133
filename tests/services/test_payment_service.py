import json
from unittest import IsolatedAsyncioTestCase
from unittest.mock import AsyncMock, patch

import httpx

from storefront_client.types import CardPaymentResult, CartItem, PaymentIntent
from storefront_client.services.payment import (
    EMPTY_CART_MESSAGE,
    MISSING_SECRET_MESSAGE,
    PAYMENT_INCOMPLETE_MESSAGE,
    CheckoutService,
    PaymentService,
)
from fakes import FakeBackend, envelope


INTENT = {"paymentIntentId": "pi_1", "clientSecret": "pi_1_secret"}


class PaymentServiceTests(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.backend = FakeBackend()
        self.client = self.backend.client()
        self.service = PaymentService(self.client)

    async def asyncTearDown(self):
        await self.client.aclose()

    async def test_create_intent(self):
        self.backend.respond("POST", "/payment/create-payment-intent", json=envelope(INTENT))

        intent = await self.service.create_intent(1999, currency="EUR")

        self.assertEqual(intent, PaymentIntent("pi_1", "pi_1_secret"))
        body = json.loads(self.backend.calls("POST", "/payment/create-payment-intent")[0].content)
        self.assertEqual(body, {"amount": 1999, "currency": "eur"})

    async def test_confirm_and_cancel(self):
        self.backend.respond("POST", "/payment/pi_1/confirm", json=envelope(None))
        self.backend.respond("POST", "/payment/pi_1/cancel", json=envelope(None))

        await self.service.confirm("pi_1")
        await self.service.cancel("pi_1")

        self.assertEqual(len(self.backend.calls("POST", "/payment/pi_1/cancel")), 1)


class CheckoutTests(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.backend = FakeBackend()
        self.client = self.backend.client()
        self.service = CheckoutService(self.client)
        self.cart = [CartItem(1, 2, 9.99)]
        self.backend.respond("POST", "/payment/create-payment-intent", json=envelope(INTENT))

    async def asyncTearDown(self):
        await self.client.aclose()

    async def test_empty_cart(self):
        confirm = AsyncMock()

        result = await self.service.checkout([], 0, confirm)

        self.assertFalse(result.success)
        self.assertEqual(result.error, EMPTY_CART_MESSAGE)
        confirm.assert_not_awaited()
        self.assertEqual(self.backend.requests, [])

    async def test_successful_checkout_records_order(self):
        self.backend.respond("POST", "/orders", status=201, json=envelope({"orderId": 12}))
        confirm = AsyncMock(return_value=CardPaymentResult("succeeded", "pi_1"))

        result = await self.service.checkout(self.cart, 19.98, confirm)

        self.assertTrue(result.success)
        self.assertEqual((result.order_id, result.payment_intent_id), (12, "pi_1"))
        confirm.assert_awaited_once_with("pi_1_secret")

        amount = json.loads(self.backend.calls("POST", "/payment/create-payment-intent")[0].content)
        self.assertEqual(amount["amount"], 1998)
        order = json.loads(self.backend.calls("POST", "/orders")[0].content)
        self.assertEqual(order["paymentStatus"], "succeeded")

    async def test_intent_failure(self):
        self.backend.respond(
            "POST",
            "/payment/create-payment-intent",
            status=400,
            json={"errorCode": "AMOUNT", "message": "Amount too small."},
        )

        result = await self.service.checkout(self.cart, 0.1, AsyncMock())

        self.assertEqual(result.error, "Amount too small.")

    async def test_missing_secret(self):
        self.backend.respond(
            "POST", "/payment/create-payment-intent", json=envelope({"paymentIntentId": "pi_1"})
        )

        result = await self.service.checkout(self.cart, 19.98, AsyncMock())

        self.assertEqual(result.error, MISSING_SECRET_MESSAGE)

    async def test_declined_card(self):
        confirm = AsyncMock(return_value=CardPaymentResult(None, error="Card declined."))

        result = await self.service.checkout(self.cart, 19.98, confirm)

        self.assertFalse(result.success)
        self.assertEqual(result.error, "Card declined.")
        self.assertEqual(result.payment_intent_id, "pi_1")
        self.assertEqual(self.backend.calls("POST", "/orders"), [])

    async def test_incomplete_payment(self):
        confirm = AsyncMock(return_value=CardPaymentResult("requires_action", "pi_1"))

        result = await self.service.checkout(self.cart, 19.98, confirm)

        self.assertEqual(result.error, PAYMENT_INCOMPLETE_MESSAGE)

    async def test_order_failure_keeps_payment_reference(self):
        self.backend.respond("POST", "/orders", status=500)
        confirm = AsyncMock(return_value=CardPaymentResult("succeeded", "pi_1"))

        result = await self.service.checkout(self.cart, 19.98, confirm)

        self.assertFalse(result.success)
        self.assertEqual(result.payment_intent_id, "pi_1")
        self.assertEqual(result.error, "Internal server error.")

    async def test_order_is_retried_after_csrf_rejection(self):
        responses = iter(
            [
                {"status_code": 403, "json": {"errorCode": "CSRF", "message": "Invalid CSRF token"}},
                {"status_code": 201, "json": envelope({"orderId": 5})},
            ]
        )

        def orders(request):
            return httpx.Response(**next(responses))

        self.backend.route("POST", "/orders", orders)
        confirm = AsyncMock(return_value=CardPaymentResult("succeeded", "pi_1"))

        with patch("asyncio.sleep", new=AsyncMock()):
            result = await self.service.checkout(self.cart, 19.98, confirm)

        self.assertTrue(result.success)
        self.assertEqual(result.order_id, 5)
        self.assertEqual(len(self.backend.calls("POST", "/orders")), 2)
