# producttable/services/catalog/sql_catalog.py

import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from producttable.core.config import settings
from producttable.dao.catalog.product_dao import CatalogProductDao
from producttable.models.catalog import CatalogProduct
from producttable.engine.table.catalog import (
    CatalogItem, CatalogPage, CatalogQuery, CurrencyFormat, ItemImage, Term,
)

logger = logging.getLogger(__name__)

def currency_from_settings() -> CurrencyFormat:
    return CurrencyFormat(
        code=settings.CURRENCY_CODE,
        symbol=settings.CURRENCY_SYMBOL,
        position=settings.CURRENCY_POSITION,
        decimals=settings.PRICE_DECIMALS,
        thousand_separator=settings.PRICE_THOUSAND_SEPARATOR,
        decimal_separator=settings.PRICE_DECIMAL_SEPARATOR,
    )

class SqlCatalog:
    """
    Catalog implementation over the catalog_* tables. Returns every matching id;
    pagination belongs to the table engine.
    """
    def __init__(
        self,
        db: AsyncSession,
        currency: Optional[CurrencyFormat] = None,
        product_url_template: Optional[str] = None,
        term_url_template: Optional[str] = None,
    ):
        self.dao = CatalogProductDao(db)
        self._currency = currency or currency_from_settings()
        self.product_url_template = product_url_template or settings.PRODUCT_URL_TEMPLATE
        self.term_url_template = term_url_template or settings.TERM_URL_TEMPLATE

    @property
    def currency(self) -> CurrencyFormat:
        return self._currency

    async def query(self, query: CatalogQuery) -> CatalogPage:
        ids = await self.dao.query_ids(query)
        return CatalogPage(ids=ids, total=len(ids))

    async def get_items(self, ids: List[int]) -> List[CatalogItem]:
        products = await self.dao.get_by_ids(ids)
        return [self.to_item(product) for product in products]

    # --- 映射 ---

    def product_url(self, product: CatalogProduct) -> str:
        return self.product_url_template.format(id=product.id, slug=product.slug)

    def to_item(self, product: CatalogProduct) -> CatalogItem:
        terms: Dict[str, List[Term]] = {}
        for term in sorted(product.terms, key=lambda t: (t.name.lower(), t.id)):
            terms.setdefault(term.taxonomy, []).append(Term(
                id=term.id,
                name=term.name,
                slug=term.slug,
                link=self.term_url_template.format(taxonomy=term.taxonomy, slug=term.slug, id=term.id),
            ))

        return CatalogItem(
            id=product.id,
            title=product.title,
            permalink=self.product_url(product),
            regular_price=Decimal(product.regular_price) if product.regular_price is not None else None,
            sale_price=Decimal(product.sale_price) if product.sale_price is not None else None,
            sku=product.sku,
            stock_status=product.stock_status,
            stock_quantity=product.stock_quantity,
            manage_stock=product.manage_stock,
            image=ItemImage(urls=product.image_urls, alt=product.image_alt or "") if product.image_urls else None,
            created_at=product.created_at,
            summary=product.summary,
            terms=terms,
            meta={key: str(value) for key, value in (product.meta or {}).items()},
            purchasable=product.purchasable,
            product_type=product.product_type,
        )

class SessionScopedCatalog:
    """
    Opens a fresh DB session per catalog call. Used by long-lived live-preview
    connections, which must not pin one session for their whole lifetime.
    """
    def __init__(self, session_factory: Callable[[], Any], currency: Optional[CurrencyFormat] = None):
        self.session_factory = session_factory
        self._currency = currency or currency_from_settings()

    @property
    def currency(self) -> CurrencyFormat:
        return self._currency

    async def query(self, query: CatalogQuery) -> CatalogPage:
        async with self.session_factory() as db:
            return await SqlCatalog(db, currency=self._currency).query(query)

    async def get_items(self, ids: List[int]) -> List[CatalogItem]:
        async with self.session_factory() as db:
            return await SqlCatalog(db, currency=self._currency).get_items(ids)
