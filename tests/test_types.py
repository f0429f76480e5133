from unittest import TestCase

from storefront_client.types import (
    Page,
    as_user_id,
    AuthState,
    CartItem,
    ErrorInfo,
    UserIdentity,
    IssuedCredential,
    RequestDescriptor,
)


class UserIdentityTests(TestCase):
    def test_defaults(self):
        user = UserIdentity(id=1)
        self.assertEqual(user.roles, ("ROLE_USER",))
        self.assertFalse(user.is_admin)

    def test_dict_round_trip_keeps_roles(self):
        user = UserIdentity(id=3, email="a@example.com", roles=("ROLE_ADMIN",))
        data = user.to_dict()

        self.assertEqual(data["roles"], ["ROLE_ADMIN"])
        self.assertEqual(UserIdentity.from_dict(data), user)

    def test_from_partial_dict(self):
        user = UserIdentity.from_dict({"id": "9"})
        self.assertEqual(user.id, 9)
        self.assertEqual(user.roles, ("ROLE_USER",))


class AsUserIdTests(TestCase):
    def test_integers_and_numeric_strings(self):
        self.assertEqual(as_user_id(4), 4)
        self.assertEqual(as_user_id("4"), 4)

    def test_opaque_ids_stay_strings(self):
        self.assertEqual(as_user_id("3f2a-uuid"), "3f2a-uuid")

    def test_missing_id_is_zero(self):
        self.assertEqual(as_user_id(None), 0)
        self.assertEqual(as_user_id(""), 0)


class CredentialContainerTests(TestCase):
    def test_issued_credential_optional_fields(self):
        issued = IssuedCredential(access_token="access", user=None)
        self.assertIsNone(issued.refresh_token)
        self.assertIsNone(issued.expires_in)
        self.assertEqual(issued.message, "")

    def test_auth_state_is_immutable(self):
        state = AuthState(access_token="a", user=None)
        with self.assertRaises(AttributeError):
            state.access_token = "b"


class RequestDescriptorTests(TestCase):
    def test_replay_copy_is_marked(self):
        request = RequestDescriptor("GET", "/orders")
        replay = request._replace(retried=True)

        self.assertFalse(request.retried)
        self.assertTrue(replay.retried)
        self.assertEqual(replay.path, "/orders")


class ErrorInfoTests(TestCase):
    def test_defaults(self):
        info = ErrorInfo("Oops")
        self.assertIsNone(info.errors)
        self.assertIsNone(info.status)


class PageTests(TestCase):
    def test_from_backend_page(self):
        page = Page.from_dict(
            {"content": [{"id": 1}], "totalElements": 40, "totalPages": 4, "size": 10, "number": 2,
             "first": False, "last": False}
        )
        self.assertEqual(page.total_elements, 40)
        self.assertEqual(page.number, 2)
        self.assertFalse(page.first)
        self.assertFalse(page.empty)

    def test_empty_page(self):
        self.assertTrue(Page(content=[]).empty)


class CartItemTests(TestCase):
    def test_backend_shape(self):
        item = CartItem(product_id=4, quantity=2, price=9.5, name="Mug")
        self.assertEqual(item.to_dict(), {"productId": 4, "quantity": 2, "price": 9.5})

    def test_from_backend(self):
        item = CartItem.from_dict({"productId": 4, "quantity": "2", "price": "9.5"})
        self.assertEqual(item, CartItem(4, 2, 9.5))
