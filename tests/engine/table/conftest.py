# tests/engine/table/conftest.py

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
import pytest

from producttable.engine.table.catalog import (
    CatalogItem, CatalogPage, CatalogQuery, CurrencyFormat, ItemImage, Term,
)

# ==============================================================================
# 1. 内存目录 (In-memory catalog)
# ==============================================================================

class InMemoryCatalog:
    """A Catalog over a fixed list of items; records every query for assertions."""
    def __init__(self, items: List[CatalogItem], currency: Optional[CurrencyFormat] = None):
        self.items = {item.id: item for item in items}
        self._currency = currency or CurrencyFormat()
        self.queries: List[CatalogQuery] = []
        self.fail_with: Optional[Exception] = None

    @property
    def currency(self) -> CurrencyFormat:
        return self._currency

    async def query(self, query: CatalogQuery) -> CatalogPage:
        self.queries.append(query)
        if self.fail_with is not None:
            raise self.fail_with

        matched = []
        for item in self.items.values():
            if query.include_ids is not None and item.id not in query.include_ids:
                continue
            if query.on_sale and not item.on_sale:
                continue
            if query.stock_status != "any" and item.stock_status != query.stock_status:
                continue
            price = item.effective_price
            if query.price_min is not None and (price is None or price < Decimal(str(query.price_min))):
                continue
            if query.price_max is not None and (price is None or price > Decimal(str(query.price_max))):
                continue
            term_ids = {t.id for terms in item.terms.values() for t in terms}
            if query.category_ids and not term_ids & set(query.category_ids):
                continue
            if query.tag_ids and not term_ids & set(query.tag_ids):
                continue
            matched.append(item)

        descending = query.order == "DESC"
        if query.order_by is None:
            matched.sort(key=lambda i: (i.created_at, i.id), reverse=True)
        elif query.order_by == "title":
            matched.sort(key=lambda i: (i.title, i.id), reverse=descending)
        elif query.order_by == "price":
            matched.sort(key=lambda i: (i.effective_price or Decimal(0), i.id), reverse=descending)
        else:
            matched.sort(key=lambda i: (i.created_at, i.id), reverse=descending)

        ids = [item.id for item in matched]
        return CatalogPage(ids=ids, total=len(ids))

    async def get_items(self, ids: List[int]) -> List[CatalogItem]:
        if self.fail_with is not None:
            raise self.fail_with
        return [self.items[i] for i in ids if i in self.items]

# ==============================================================================
# 2. 样例商品 (Sample items)
# ==============================================================================

CLOTHING = Term(id=10, name="Clothing", slug="clothing", link="/product_cat/clothing")
ACCESSORIES = Term(id=11, name="Accessories", slug="accessories", link="/product_cat/accessories")
FEATURED = Term(id=20, name="Featured", slug="featured", link="/product_tag/featured")

def make_item(item_id: int, **overrides) -> CatalogItem:
    values = dict(
        id=item_id,
        title=f"Product {item_id}",
        permalink=f"/product/p-{item_id}",
        regular_price=Decimal("10.00"),
        sku=f"SKU-{item_id}",
        created_at=datetime(2026, 1, item_id),
    )
    values.update(overrides)
    return CatalogItem(**values)

@pytest.fixture
def sample_items() -> List[CatalogItem]:
    return [
        make_item(
            1, title="Hoodie", regular_price=Decimal("45.00"), sale_price=Decimal("39.00"),
            sku="HD-001", manage_stock=True, stock_quantity=12,
            image=ItemImage(urls={"thumbnail": "/m/hoodie-150.jpg", "full": "/m/hoodie.jpg"}, alt="Grey hoodie"),
            summary="A warm brushed-cotton hoodie with a kangaroo pocket.",
            terms={"product_cat": [CLOTHING], "product_tag": [FEATURED]},
            meta={"material": "Cotton"},
        ),
        make_item(
            2, title="Zip Hoodie", regular_price=Decimal("55.00"), sku="HD-002",
            stock_status="outofstock", terms={"product_cat": [CLOTHING]},
        ),
        make_item(3, title="T-Shirt", regular_price=Decimal("18.00"), sku="TS-001",
                  product_type="variable", terms={"product_cat": [CLOTHING]}),
        make_item(4, title="Beanie", regular_price=Decimal("20.00"), sale_price=Decimal("15.00"),
                  sku="AC-001", terms={"product_cat": [ACCESSORIES], "product_tag": [FEATURED]}),
        make_item(5, title="Logo Set", regular_price=None, sku=None, product_type="grouped"),
    ]

@pytest.fixture
def catalog(sample_items) -> InMemoryCatalog:
    return InMemoryCatalog(sample_items)
