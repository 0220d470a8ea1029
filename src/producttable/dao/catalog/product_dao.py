# producttable/dao/catalog/product_dao.py

from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_, case, exists, func, select
from typing import List, Optional, Sequence
from producttable.dao.base_dao import BaseDao
from producttable.models.catalog import CatalogProduct, CatalogTerm, catalog_product_terms
from producttable.engine.table.catalog import CatalogQuery

PUBLISHED = "publish"

# 促销价低于原价时才算"在售"
ON_SALE = and_(
    CatalogProduct.sale_price.isnot(None),
    CatalogProduct.regular_price.isnot(None),
    CatalogProduct.sale_price < CatalogProduct.regular_price,
)
EFFECTIVE_PRICE = case((ON_SALE, CatalogProduct.sale_price), else_=CatalogProduct.regular_price)

def _has_term(term_ids: Sequence[int]):
    return exists().where(
        catalog_product_terms.c.product_id == CatalogProduct.id,
        catalog_product_terms.c.term_id.in_(list(term_ids)),
    )

class CatalogProductDao(BaseDao[CatalogProduct]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(CatalogProduct, db_session)

    async def query_ids(self, query: CatalogQuery) -> List[int]:
        conditions = [CatalogProduct.status == PUBLISHED]

        if query.include_ids is not None:
            conditions.append(CatalogProduct.id.in_(query.include_ids))
        if query.on_sale:
            conditions.append(ON_SALE)
        if query.stock_status != "any":
            conditions.append(CatalogProduct.stock_status == query.stock_status)
        if query.price_min is not None:
            conditions.append(EFFECTIVE_PRICE >= Decimal(str(query.price_min)))
        if query.price_max is not None:
            conditions.append(EFFECTIVE_PRICE <= Decimal(str(query.price_max)))
        if query.category_ids:
            conditions.append(_has_term(query.category_ids))
        if query.tag_ids:
            conditions.append(_has_term(query.tag_ids))

        stmt = self._quick_query(
            stmt=select(CatalogProduct.id),
            where=conditions,
            order=self._order(query),
        )
        executed = await self.db_session.execute(stmt)
        return list(executed.scalars().all())

    def _order(self, query: CatalogQuery) -> list:
        descending = query.order == "DESC"
        tie_break = CatalogProduct.id.desc() if descending else CatalogProduct.id.asc()

        if query.order_by is None:
            # 默认顺序: 最新优先, id 决胜
            return [CatalogProduct.created_at.desc(), CatalogProduct.id.desc()]
        if query.order_by == "price":
            # 无价格的产品总是排在最后
            return [
                EFFECTIVE_PRICE.is_(None),
                EFFECTIVE_PRICE.desc() if descending else EFFECTIVE_PRICE.asc(),
                tie_break,
            ]
        column = CatalogProduct.title if query.order_by == "title" else CatalogProduct.created_at
        return [column.desc() if descending else column.asc(), tie_break]

    async def get_by_ids(self, ids: List[int]) -> List[CatalogProduct]:
        if not ids:
            return []
        return await self.get_list(where=[CatalogProduct.id.in_(ids)], withs=["terms"])

    async def search_by_title(self, search: Optional[str], page: int, limit: int) -> List[CatalogProduct]:
        conditions = [CatalogProduct.status == PUBLISHED]
        if search:
            conditions.append(CatalogProduct.title.ilike(f"%{search}%"))
            order = [CatalogProduct.title.asc(), CatalogProduct.id.asc()]
        else:
            order = [CatalogProduct.created_at.desc(), CatalogProduct.id.desc()]
        return await self.get_list(where=conditions, order=order, page=page, limit=limit)

    async def get_published(self, product_id: int) -> Optional[CatalogProduct]:
        return await self.get_one(where=[CatalogProduct.id == product_id, CatalogProduct.status == PUBLISHED])

    async def list_sku_candidates(self, cap: int) -> List[CatalogProduct]:
        """A bounded candidate set for SKU prefix matching, title order."""
        return await self.get_list(
            where=[CatalogProduct.status == PUBLISHED, CatalogProduct.sku.isnot(None)],
            order=[CatalogProduct.title.asc(), CatalogProduct.id.asc()],
            page=1,
            limit=cap,
        )

    async def count_published(self, on_sale: bool = False) -> int:
        conditions = [CatalogProduct.status == PUBLISHED]
        if on_sale:
            conditions.append(ON_SALE)
        return await self.count(where=conditions)

class CatalogTermDao(BaseDao[CatalogTerm]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(CatalogTerm, db_session)

    async def list_with_counts(self, taxonomy: str = "product_cat") -> list[dict]:
        """Every term of the taxonomy (empty ones included) with its published-product count."""
        product_count = (
            select(func.count(catalog_product_terms.c.product_id))
            .select_from(catalog_product_terms.join(CatalogProduct, CatalogProduct.id == catalog_product_terms.c.product_id))
            .where(catalog_product_terms.c.term_id == CatalogTerm.id, CatalogProduct.status == PUBLISHED)
            .scalar_subquery()
        )
        stmt = (
            select(CatalogTerm.id, CatalogTerm.name, CatalogTerm.slug, product_count.label("count"))
            .where(CatalogTerm.taxonomy == taxonomy)
            .order_by(CatalogTerm.name.asc(), CatalogTerm.id.asc())
        )
        executed = await self.db_session.execute(stmt)
        return [dict(row) for row in executed.mappings()]

    async def count_terms(self, taxonomy: str = "product_cat") -> int:
        return await self.count(where={"taxonomy": taxonomy})

    async def count_terms_of_sale_products(self, taxonomy: str = "product_cat") -> int:
        stmt = (
            select(func.count(func.distinct(catalog_product_terms.c.term_id)))
            .select_from(
                catalog_product_terms
                .join(CatalogTerm, CatalogTerm.id == catalog_product_terms.c.term_id)
                .join(CatalogProduct, CatalogProduct.id == catalog_product_terms.c.product_id)
            )
            .where(CatalogTerm.taxonomy == taxonomy, CatalogProduct.status == PUBLISHED, ON_SALE)
        )
        executed = await self.db_session.execute(stmt)
        return executed.scalar() or 0
