# producttable/services/catalog/catalog_service.py

import logging
from typing import List, Literal, Optional

from producttable.core.context import AppContext
from producttable.dao.catalog.product_dao import CatalogProductDao, CatalogTermDao
from producttable.models.catalog import CatalogProduct
from producttable.services.catalog.sql_catalog import SqlCatalog
from producttable.schemas.table.catalog_schemas import CatalogProductRead, CategoryRead, SourceStatsRead

logger = logging.getLogger(__name__)

# SKU 前缀匹配只在有限候选集上进行
SKU_CANDIDATE_CAP = 200

class CatalogService:
    """[Service Layer] Editor-facing catalog lookups: product search, categories, source statistics."""
    def __init__(self, context: AppContext):
        self.context = context
        self.product_dao = CatalogProductDao(context.db)
        self.term_dao = CatalogTermDao(context.db)
        self.catalog = SqlCatalog(context.db)

    async def search_products(
        self,
        search: Optional[str] = None,
        include: Optional[int] = None,
        sku: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> List[CatalogProductRead]:
        """
        Exactly one mode applies, in priority order: id lookup, SKU prefix, title search.
        Without any of them the newest products are listed.
        """
        _ = self.context.actor

        if include is not None:
            product = await self.product_dao.get_published(include)
            return [self._to_read(product)] if product else []

        if sku:
            needle = sku.strip().lower()
            candidates = await self.product_dao.list_sku_candidates(SKU_CANDIDATE_CAP)
            matched = [p for p in candidates if p.sku and p.sku.lower().startswith(needle)]
            offset = (page - 1) * limit
            return [self._to_read(p) for p in matched[offset:offset + limit]]

        products = await self.product_dao.search_by_title(search, page=page, limit=limit)
        return [self._to_read(p) for p in products]

    async def categories(self) -> List[CategoryRead]:
        _ = self.context.actor
        rows = await self.term_dao.list_with_counts("product_cat")
        return [CategoryRead(**row) for row in rows]

    async def source_stats(self, source_type: Literal["all", "sale"] = "all") -> SourceStatsRead:
        _ = self.context.actor
        if source_type == "sale":
            return SourceStatsRead(
                products=await self.product_dao.count_published(on_sale=True),
                categories=await self.term_dao.count_terms_of_sale_products("product_cat"),
            )
        return SourceStatsRead(
            products=await self.product_dao.count_published(),
            categories=await self.term_dao.count_terms("product_cat"),
        )

    def _to_read(self, product: CatalogProduct) -> CatalogProductRead:
        item = self.catalog.to_item(product)
        price = item.effective_price
        return CatalogProductRead(
            id=product.id,
            name=product.title,
            sku=product.sku,
            price=self.catalog.currency.format(price) if price is not None else None,
            image=(product.image_urls or {}).get("thumbnail"),
        )
