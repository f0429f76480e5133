from unittest import TestCase

from storefront_client.types import Envelope, Raw
from storefront_client.envelope import classify, unwrap


class ClassifyTests(TestCase):
    def test_mapping_with_status_and_data_is_an_envelope(self):
        tagged = classify({"status": "SUCCESS", "message": "ok", "data": {"id": 1}})
        self.assertEqual(tagged, Envelope(data={"id": 1}, status="SUCCESS", message="ok"))

    def test_missing_field_is_raw(self):
        self.assertEqual(classify({"data": [1]}), Raw({"data": [1]}))
        self.assertEqual(classify({"status": "SUCCESS"}), Raw({"status": "SUCCESS"}))

    def test_non_mappings_are_raw(self):
        for payload in ([1, 2], "text", None, 3):
            with self.subTest(payload=payload):
                self.assertIsInstance(classify(payload), Raw)

    def test_null_data_is_still_an_envelope(self):
        self.assertEqual(classify({"status": "SUCCESS", "data": None}).data, None)

    def test_custom_fields(self):
        payload = {"success": True, "data": 5}
        self.assertIsInstance(classify(payload), Raw)
        self.assertEqual(classify(payload, ("success", "data")), Envelope(data=5))


class UnwrapTests(TestCase):
    def test_envelope_yields_inner_payload(self):
        self.assertEqual(unwrap({"status": "SUCCESS", "data": [1, 2]}), [1, 2])

    def test_raw_payload_is_returned_as_is(self):
        payload = {"content": []}
        self.assertIs(unwrap(payload), payload)

    def test_only_one_level_is_removed(self):
        inner = {"status": "SUCCESS", "data": 1}
        self.assertEqual(unwrap({"status": "SUCCESS", "data": inner}), inner)
