# tests/api/v1/test_tables.py

import pytest
from httpx import AsyncClient
from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from producttable.models import ProductTable

# 将所有测试标记为异步
pytestmark = pytest.mark.asyncio

BASE = "/api/v1/tables"

@pytest.fixture
async def created_table(client: AsyncClient, auth_headers) -> dict:
    payload = {"definition": {"title": "Hoodies", "status": "published", "columns": [{"type": "name"}, {"type": "price"}]}}
    response = await client.post(BASE, json=payload, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK, response.text
    return response.json()["data"]

# ==============================================================================
# 1. 认证 (Authentication)
# ==============================================================================

class TestTableAuth:

    async def test_list_requires_credentials(self, client: AsyncClient):
        response = await client.get(BASE)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        body = response.json()
        assert body["status"] == 401 and body["data"] is None

    async def test_invalid_token_is_rejected(self, client: AsyncClient):
        response = await client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_api_key_is_accepted(self, client: AsyncClient, api_key_headers):
        response = await client.get(BASE, headers=api_key_headers)
        assert response.status_code == status.HTTP_200_OK

    async def test_wrong_api_key_is_rejected(self, client: AsyncClient):
        response = await client.get(BASE, headers={"Api-Key": "nope"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

# ==============================================================================
# 2. CRUD
# ==============================================================================

class TestTableCrud:

    async def test_list_is_newest_first_with_shortcode(self, client: AsyncClient, auth_headers):
        """[成功路径] 种子数据中的两张表按创建时间倒序, id 决胜。"""
        response = await client.get(BASE, headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK

        data = response.json()["data"]
        assert data["total"] == 2
        assert [item["id"] for item in data["items"]] == [2, 1]
        assert data["items"][1]["shortcode"] == '[producttable id="1"]'

    async def test_list_filters_by_search(self, client: AsyncClient, auth_headers):
        response = await client.get(BASE, params={"search": "legacy"}, headers=auth_headers)
        items = response.json()["data"]["items"]
        assert [item["title"] for item in items] == ["Sale items (legacy)"]

    async def test_defaults(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{BASE}/defaults", headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK

        definition = response.json()["data"]
        assert definition["source"]["kind"] == "all"
        assert [c["type"] for c in definition["columns"]] == ["image", "name", "price", "button"]

    async def test_create_normalizes_and_assigns_revision(self, created_table):
        assert created_table["revision"] == 1
        definition = created_table["definition"]
        assert definition["id"] == created_table["id"]
        assert definition["title"] == "Hoodies"
        assert [c["id"] for c in definition["columns"]] == ["col_name_0", "col_price_1"]
        assert definition["settings"]["pagination"]["limit"] == 10

    async def test_create_ignores_client_supplied_id(self, client: AsyncClient, auth_headers):
        response = await client.post(BASE, json={"definition": {"id": 1, "title": "Copy"}}, headers=auth_headers)
        assert response.json()["data"]["id"] not in (1, 2)

    async def test_create_rejects_invalid_definition(self, client: AsyncClient, auth_headers, db_session: AsyncSession):
        response = await client.post(
            BASE,
            json={"definition": {"columns": [{"type": "combined", "settings": {"elements": ["combined"]}}]}},
            headers=auth_headers,
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        body = response.json()
        assert body["data"]["error"] == "ConfigError"
        assert body["data"]["field"] == "columns[0].settings.elements[0]"

    async def test_get_returns_drafts_to_editors(self, client: AsyncClient, auth_headers):
        created = (await client.post(BASE, json={"definition": {"title": "Draft"}}, headers=auth_headers)).json()["data"]

        response = await client.get(f"{BASE}/{created['id']}", headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["definition"]["status"] == "draft"

    async def test_get_missing_table(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{BASE}/999", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_legacy_row_is_migrated_on_read(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{BASE}/2", headers=auth_headers)
        definition = response.json()["data"]["definition"]

        assert definition["source"]["kind"] == "discounted"
        assert definition["title"] == "Sale items (legacy)"
        assert [c["type"] for c in definition["columns"]] == ["image", "name", "price", "button"]

    async def test_update_bumps_revision(self, client: AsyncClient, auth_headers, created_table):
        table_id = created_table["id"]
        definition = {**created_table["definition"], "title": "Renamed"}

        response = await client.put(
            f"{BASE}/{table_id}", json={"definition": definition, "expected_revision": 1}, headers=auth_headers
        )
        assert response.status_code == status.HTTP_200_OK, response.text
        data = response.json()["data"]
        assert data["revision"] == 2
        assert data["definition"]["title"] == "Renamed"

    async def test_stale_revision_conflicts(self, client: AsyncClient, auth_headers, created_table):
        table_id = created_table["id"]
        url = f"{BASE}/{table_id}"
        await client.put(url, json={"definition": {"title": "v2"}, "expected_revision": 1}, headers=auth_headers)

        response = await client.put(url, json={"definition": {"title": "v2b"}, "expected_revision": 1}, headers=auth_headers)
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["data"]["current_revision"] == 2

    async def test_first_save_replaces_legacy_config(self, client: AsyncClient, auth_headers, db_session: AsyncSession):
        response = await client.put(f"{BASE}/2", json={"definition": {"title": "Structured now"}}, headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK

        record = await db_session.get(ProductTable, 2)
        assert record.legacy_config is None
        assert record.source["kind"] == "all"

    async def test_delete(self, client: AsyncClient, auth_headers, created_table):
        url = f"{BASE}/{created_table['id']}"
        response = await client.delete(url, headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["msg"] == "Table deleted"

        assert (await client.get(url, headers=auth_headers)).status_code == status.HTTP_404_NOT_FOUND
        assert (await client.delete(url, headers=auth_headers)).status_code == status.HTTP_404_NOT_FOUND
