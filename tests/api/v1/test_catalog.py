# tests/api/v1/test_catalog.py

import pytest
from httpx import AsyncClient
from fastapi import status

pytestmark = pytest.mark.asyncio

# ==============================================================================
# 1. 产品搜索 (Product search)
# ==============================================================================

class TestProductSearch:

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get("/api/v1/catalog/products")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_include_returns_exact_product(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/catalog/products", params={"include": 1}, headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK, response.text

        assert response.json()["data"] == [{
            "id": 1,
            "name": "Classic Hoodie",
            "sku": "HD-001",
            "price": "$39.00",
            "image": "/media/hoodie-150.jpg",
        }]

    async def test_include_unknown_id_is_empty(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/catalog/products", params={"include": 999}, headers=auth_headers)
        assert response.json()["data"] == []

    async def test_sku_prefix_is_case_insensitive(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/catalog/products", params={"sku": "hd"}, headers=auth_headers)
        data = response.json()["data"]

        assert [p["name"] for p in data] == ["Classic Hoodie", "Zip Hoodie"]
        assert data[1]["price"] == "$55.00"
        assert data[1]["image"] is None

    async def test_title_search(self, client: AsyncClient, api_key_headers: dict):
        response = await client.get("/api/v1/catalog/products", params={"search": "hood"}, headers=api_key_headers)
        assert [p["id"] for p in response.json()["data"]] == [1, 2]

    async def test_no_filter_lists_newest_first(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/catalog/products", params={"limit": 3}, headers=auth_headers)
        data = response.json()["data"]

        assert [p["id"] for p in data] == [7, 6, 5]
        # 无价格的分组产品
        assert data[0]["price"] is None

    async def test_limit_is_bounded(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/catalog/products", params={"limit": 500}, headers=auth_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

# ==============================================================================
# 2. 分类与来源统计 (Categories & source stats)
# ==============================================================================

class TestCategoriesAndStats:

    async def test_categories_with_counts(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/catalog/categories", headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK, response.text

        data = response.json()["data"]
        assert [(c["name"], c["count"]) for c in data] == [
            ("Accessories", 2), ("Clothing", 4), ("Hoodies", 2), ("Music", 1),
        ]
        # 标签不属于分类
        assert all(c["slug"] not in ("featured", "cotton") for c in data)

    async def test_source_stats_all(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/catalog/source-stats", headers=auth_headers)
        assert response.json()["data"] == {"products": 7, "categories": 4}

    async def test_source_stats_sale(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/catalog/source-stats", params={"type": "sale"}, headers=auth_headers)
        # 在售: Classic Hoodie (clothing, hoodies) 与 Beanie (accessories)
        assert response.json()["data"] == {"products": 2, "categories": 3}

    async def test_source_stats_rejects_unknown_type(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/catalog/source-stats", params={"type": "featured"}, headers=auth_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
