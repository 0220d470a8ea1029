# tests/services/test_sql_catalog.py

import pytest
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession

from producttable.engine.table.catalog import CatalogQuery, CurrencyFormat
from producttable.services.catalog.sql_catalog import SqlCatalog, SessionScopedCatalog

pytestmark = pytest.mark.asyncio

# 种子数据中的 term id 按插入顺序分配
HOODIES = 2
FEATURED = 5

@pytest.fixture
def catalog(db_session: AsyncSession) -> SqlCatalog:
    return SqlCatalog(db_session)

# ==============================================================================
# 1. query
# ==============================================================================

class TestQuery:

    async def test_default_order_is_newest_first(self, catalog: SqlCatalog):
        page = await catalog.query(CatalogQuery())
        assert page.ids == [7, 6, 5, 4, 3, 2, 1]
        assert page.total == 7

    async def test_price_order_puts_missing_prices_last(self, catalog: SqlCatalog):
        ascending = await catalog.query(CatalogQuery(order_by="price", order="ASC"))
        descending = await catalog.query(CatalogQuery(order_by="price", order="DESC"))

        # 有效价格: 促销价低于原价时取促销价
        assert ascending.ids == [4, 6, 3, 1, 2, 5, 7]
        assert descending.ids == [5, 2, 1, 3, 6, 4, 7]

    async def test_title_order(self, catalog: SqlCatalog):
        page = await catalog.query(CatalogQuery(order_by="title", order="ASC"))
        assert page.ids == [6, 4, 5, 1, 7, 3, 2]

    async def test_filters(self, catalog: SqlCatalog):
        assert (await catalog.query(CatalogQuery(on_sale=True))).ids == [4, 1]
        assert (await catalog.query(CatalogQuery(category_ids=[HOODIES]))).ids == [2, 1]
        assert (await catalog.query(CatalogQuery(tag_ids=[FEATURED]))).ids == [4, 1]
        assert (await catalog.query(CatalogQuery(stock_status="outofstock"))).ids == [2]
        assert (await catalog.query(CatalogQuery(price_min=20, price_max=50))).ids == [1]

    async def test_include_ids_restricts_candidates(self, catalog: SqlCatalog):
        page = await catalog.query(CatalogQuery(include_ids=[3, 5, 999]))
        assert page.ids == [5, 3]

# ==============================================================================
# 2. get_items / to_item
# ==============================================================================

class TestItems:

    async def test_get_items_skips_missing(self, catalog: SqlCatalog):
        items = await catalog.get_items([1, 999])
        assert [item.id for item in items] == [1]

    async def test_item_projection(self, catalog: SqlCatalog):
        [hoodie] = await catalog.get_items([1])

        assert hoodie.permalink == "/product/classic-hoodie"
        assert hoodie.regular_price == Decimal("45.00")
        assert hoodie.effective_price == Decimal("39.00")
        assert hoodie.manage_stock is True and hoodie.stock_quantity == 12
        assert hoodie.image.urls["thumbnail"] == "/media/hoodie-150.jpg"
        assert hoodie.meta == {"material": "Cotton"}

        # 按分类法分组, 组内按名称排序
        assert [t.name for t in hoodie.terms["product_cat"]] == ["Clothing", "Hoodies"]
        assert [t.name for t in hoodie.terms["product_tag"]] == ["Cotton", "Featured"]
        assert hoodie.terms["product_cat"][1].link == "/product_cat/hoodies"

    async def test_item_without_image(self, catalog: SqlCatalog):
        [zip_hoodie] = await catalog.get_items([2])
        assert zip_hoodie.image is not None
        [logo_set] = await catalog.get_items([7])
        assert logo_set.image is None
        assert logo_set.effective_price is None

    async def test_custom_currency(self, db_session: AsyncSession):
        catalog = SqlCatalog(db_session, currency=CurrencyFormat(code="EUR", symbol="€", position="right_space"))
        assert catalog.currency.format(Decimal("1234.5")) == "1,234.50 €"

# ==============================================================================
# 3. SessionScopedCatalog
# ==============================================================================

class TestSessionScopedCatalog:

    async def test_each_call_opens_its_own_session(self, session_factory):
        opened = []

        def tracking_factory():
            session = session_factory()
            opened.append(session)
            return session

        catalog = SessionScopedCatalog(tracking_factory)
        page = await catalog.query(CatalogQuery(on_sale=True))
        items = await catalog.get_items(page.ids)

        assert sorted(item.id for item in items) == [1, 4]
        assert len(opened) == 2
        assert opened[0] is not opened[1]
