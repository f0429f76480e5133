import sys
import typing
from unittest import TestCase, skipIf

from storefront_client import compat


class CompatExportsTests(TestCase):
    def test_all_names_resolve(self):
        for name in compat.__all__:
            with self.subTest(name=name):
                self.assertTrue(hasattr(compat, name))

    def test_async_and_mapping_hints_are_exported(self):
        self.assertIs(compat.Awaitable, typing.Awaitable)
        self.assertIs(compat.Mapping, typing.Mapping)
        self.assertIs(compat.List, typing.List)

    @skipIf(sys.version_info < (3, 11), "typing.Self needs Python 3.11")
    def test_self_comes_from_typing(self):
        self.assertIs(compat.Self, typing.Self)

    @skipIf(sys.version_info >= (3, 11), "backport only used before 3.11")
    def test_self_comes_from_backport(self):
        import typing_extensions

        self.assertIs(compat.Self, typing_extensions.Self)
