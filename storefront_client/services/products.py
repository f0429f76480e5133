"""
Catalogue browsing and product administration.

Public listing calls degrade to empty results when the backend fails so a
storefront page can still render; single-resource and admin calls raise.
"""

from storefront_client.types import Page
from storefront_client.exceptions import ApiError
from storefront_client.utils.log import get_logger
from storefront_client.base.services import BaseService
from storefront_client.compat import Any, Dict, List, Optional


logger = get_logger(__name__)

DEFAULT_PAGE = 0
DEFAULT_SIZE = 12
DEFAULT_SORT_BY = "NAME"
DEFAULT_SORT_DIRECTION = "ASC"


def _flag(value: bool) -> str:
    return "true" if value else "false"


def to_page(data: Any, size: int = 0, number: int = 0) -> Page:
    if isinstance(data, list):
        return Page(content=data, total_elements=len(data), total_pages=1, size=size, number=number)
    if isinstance(data, dict):
        return Page.from_dict(data)
    return Page(content=[], size=size, number=number)


class ProductService(BaseService):
    async def search(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        in_stock_only: bool = False,
        sort_by: str = DEFAULT_SORT_BY,
        sort_direction: str = DEFAULT_SORT_DIRECTION,
        page: int = DEFAULT_PAGE,
        size: int = DEFAULT_SIZE,
    ) -> Page:
        params = {
            "page": str(page),
            "size": str(size),
            "sortBy": sort_by,
            "sortDirection": sort_direction,
            "activeOnly": "true",
            "inStockOnly": _flag(in_stock_only),
        }
        if query:
            params["query"] = query
        if category:
            params["category"] = category
        if min_price is not None:
            params["minPrice"] = str(min_price)
        if max_price is not None:
            params["maxPrice"] = str(max_price)

        try:
            response = await self.client.get("/products/search", params=params)
        except ApiError as exc:
            logger.error("Product search failed: %s", exc)
            return Page(content=[], size=size, number=page)

        return to_page(response.data, size, page)

    async def get(self, product_id: int) -> Dict[str, Any]:
        response = await self.client.get(f"/products/{product_id}")
        return response.data

    async def featured(self, limit: int = 8) -> List[Any]:
        try:
            response = await self.client.get(
                "/products/featured", params={"page": "0", "size": str(limit)}
            )
        except ApiError as exc:
            logger.error("Featured products unavailable: %s", exc)
            return []
        return to_page(response.data).content

    async def by_category(self, code: str, limit: int = DEFAULT_SIZE) -> List[Any]:
        try:
            response = await self.client.get(
                f"/products/category/{code}", params={"page": "0", "size": str(limit)}
            )
        except ApiError as exc:
            logger.error("Products for category %s unavailable: %s", code, exc)
            return []
        return to_page(response.data).content

    async def categories(self) -> List[Dict[str, Any]]:
        try:
            response = await self.client.get("/categories")
        except ApiError as exc:
            logger.error("Categories unavailable: %s", exc)
            return []
        return response.data if isinstance(response.data, list) else []

    async def category_by_code(self, code: str) -> Optional[Dict[str, Any]]:
        for category in await self.categories():
            if category.get("code") == code:
                return category
        return None

    # Administration

    async def list_all(
        self,
        page: int = 0,
        size: int = 20,
        sort_by: str = DEFAULT_SORT_BY,
        sort_direction: str = DEFAULT_SORT_DIRECTION,
        active_only: bool = False,
        query: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Page:
        params = {
            "page": str(page),
            "size": str(size),
            "sortBy": sort_by,
            "sortDirection": sort_direction,
            "activeOnly": _flag(active_only),
        }
        if query:
            params["query"] = query
        if category:
            params["category"] = category

        response = await self.client.get("/products", params=params)
        return to_page(response.data, size, page)

    async def create(self, product: Dict[str, Any]) -> Dict[str, Any]:
        response = await self.client.post("/products", json=product)
        logger.info("Product created")
        return response.data

    async def update(self, product_id: int, product: Dict[str, Any]) -> Dict[str, Any]:
        response = await self.client.put(f"/products/{product_id}", json=product)
        logger.info("Product %s updated", product_id)
        return response.data

    async def delete(self, product_id: int) -> None:
        await self.client.delete(f"/products/{product_id}")
        logger.info("Product %s deleted", product_id)

    async def restore(self, product_id: int) -> None:
        await self.client.patch(f"/products/admin/{product_id}/restore")
        logger.info("Product %s restored", product_id)
