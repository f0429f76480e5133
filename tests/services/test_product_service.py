import json
from unittest import IsolatedAsyncioTestCase, TestCase

from storefront_client.types import Page
from storefront_client.exceptions import NotFound
from storefront_client.services.products import ProductService, to_page
from fakes import FakeBackend, envelope


PRODUCTS = [{"productId": 1, "name": "Lamp"}, {"productId": 2, "name": "Desk"}]


class ToPageTests(TestCase):
    def test_list_becomes_single_page(self):
        page = to_page(PRODUCTS, size=12, number=0)
        self.assertEqual(page.content, PRODUCTS)
        self.assertEqual(page.total_elements, 2)
        self.assertEqual(page.total_pages, 1)

    def test_spring_page_is_read(self):
        page = to_page(
            {"content": PRODUCTS, "totalElements": 30, "totalPages": 15, "size": 2, "number": 4,
             "first": False, "last": False}
        )
        self.assertEqual(page.total_elements, 30)
        self.assertEqual(page.number, 4)
        self.assertFalse(page.first)

    def test_anything_else_is_empty(self):
        self.assertTrue(to_page(None, 5, 1).empty)


class ProductServiceTests(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.backend = FakeBackend()
        self.client = self.backend.client()
        self.service = ProductService(self.client)

    async def asyncTearDown(self):
        await self.client.aclose()

    async def test_search_sends_filters(self):
        self.backend.respond(
            "GET", "/products/search", json=envelope({"content": PRODUCTS, "totalElements": 2})
        )

        page = await self.service.search(query="lamp", category="LIGHT", min_price=5, in_stock_only=True)

        self.assertIsInstance(page, Page)
        self.assertEqual(page.content, PRODUCTS)
        params = self.backend.calls("GET", "/products/search")[0].url.params
        self.assertEqual(params["query"], "lamp")
        self.assertEqual(params["category"], "LIGHT")
        self.assertEqual(params["minPrice"], "5")
        self.assertEqual(params["inStockOnly"], "true")
        self.assertEqual(params["activeOnly"], "true")
        self.assertNotIn("maxPrice", params)

    async def test_search_failure_returns_empty_page(self):
        self.backend.respond("GET", "/products/search", status=500)

        page = await self.service.search(page=2, size=6)

        self.assertTrue(page.empty)
        self.assertEqual((page.number, page.size), (2, 6))

    async def test_featured_reads_page_content(self):
        self.backend.respond("GET", "/products/featured", json=envelope({"content": PRODUCTS}))

        self.assertEqual(await self.service.featured(limit=2), PRODUCTS)
        request = self.backend.calls("GET", "/products/featured")[0]
        self.assertEqual(request.url.params["size"], "2")

    async def test_featured_failure_is_empty(self):
        self.backend.respond("GET", "/products/featured", status=503)
        self.assertEqual(await self.service.featured(), [])

    async def test_by_category_accepts_plain_list(self):
        self.backend.respond("GET", "/products/category/DESK", json=envelope(PRODUCTS))
        self.assertEqual(await self.service.by_category("DESK"), PRODUCTS)

    async def test_get_raises_when_missing(self):
        with self.assertRaises(NotFound):
            await self.service.get(99)

    async def test_category_by_code(self):
        self.backend.respond(
            "GET", "/categories", json=envelope([{"code": "LIGHT"}, {"code": "DESK", "name": "Desks"}])
        )

        self.assertEqual(await self.service.category_by_code("DESK"), {"code": "DESK", "name": "Desks"})
        self.assertIsNone(await self.service.category_by_code("SOFA"))

    async def test_categories_failure_is_empty(self):
        self.backend.respond("GET", "/categories", status=500)
        self.assertEqual(await self.service.categories(), [])

    async def test_list_all_includes_inactive_by_default(self):
        self.backend.respond("GET", "/products", json=envelope({"content": PRODUCTS}))

        await self.service.list_all()

        params = self.backend.calls("GET", "/products")[0].url.params
        self.assertEqual(params["activeOnly"], "false")

    async def test_create_and_update_send_product(self):
        self.backend.respond("POST", "/products", status=201, json=envelope({"productId": 3}))
        self.backend.respond("PUT", "/products/3", json=envelope({"productId": 3, "name": "Sofa"}))

        self.assertEqual(await self.service.create({"name": "Sofa"}), {"productId": 3})
        updated = await self.service.update(3, {"name": "Sofa"})

        self.assertEqual(updated["name"], "Sofa")
        body = json.loads(self.backend.calls("PUT", "/products/3")[0].content)
        self.assertEqual(body, {"name": "Sofa"})

    async def test_delete_and_restore(self):
        self.backend.respond("DELETE", "/products/3", status=204)
        self.backend.respond("PATCH", "/products/admin/3/restore", status=204)

        await self.service.delete(3)
        await self.service.restore(3)

        self.assertEqual(len(self.backend.calls("DELETE", "/products/3")), 1)
        self.assertEqual(len(self.backend.calls("PATCH", "/products/admin/3/restore")), 1)
