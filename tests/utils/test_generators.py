import uuid6
from unittest import TestCase

from storefront_client.utils.generators import generate_request_id


class TestRequestIdentifier(TestCase):
    def test_returns_uuid7_string(self):
        """Ensure the generated id parses as a version 7 UUID."""
        request_id = generate_request_id()
        self.assertIsInstance(request_id, str)
        self.assertEqual(uuid6.UUID(request_id).version, 7)

    def test_ids_are_unique(self):
        """Ensure subsequent calls do not produce the same identifier."""
        self.assertNotEqual(generate_request_id(), generate_request_id())

    def test_ids_are_chronologically_ordered(self):
        """Confirm UUID v7 property: later ids sort after earlier ids."""
        id_early = generate_request_id()
        id_later = generate_request_id()

        self.assertLess(id_early, id_later)
