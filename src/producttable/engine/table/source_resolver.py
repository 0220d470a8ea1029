import logging
from typing import List, Optional
from pydantic import BaseModel, Field

from .catalog import Catalog, CatalogQuery
from .definitions import Source, SourceKind
from .errors import CatalogUnavailable, Diagnostics

logger = logging.getLogger(__name__)

NATIVE_SORT_FIELDS = {"date": "date", "price": "price", "title": "title", "name": "title"}

class ResolvedSource(BaseModel):
    items: List[int] = Field(default_factory=list)
    total: int = 0

class SourceResolver:
    """
    Translates a Source into the ordered list of catalog item ids it selects.
    Pagination is not applied here; the feature pipeline pages after search/price narrowing.
    """
    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    async def resolve(self, source: Source, diagnostics: Diagnostics) -> ResolvedSource:
        args = source.query_args

        if source.kind == SourceKind.BY_CATEGORY and not args.category_ids:
            diagnostics.resolution(
                "empty_category_selection",
                "Source selects by category but no categories are configured; the table is empty.",
            )
            return ResolvedSource()
        if source.kind == SourceKind.EXPLICIT_LIST and not args.post_ids:
            diagnostics.resolution(
                "empty_product_selection",
                "Source lists products explicitly but the list is empty.",
            )
            return ResolvedSource()

        query = self._build_query(source, diagnostics)
        ids = await self._run_query(query)

        if source.kind == SourceKind.EXPLICIT_LIST:
            ids = self._explicit_order(args.post_ids, ids, diagnostics)

        if args.excludes:
            excluded = set(args.excludes)
            ids = [item_id for item_id in ids if item_id not in excluded]

        return ResolvedSource(items=ids, total=len(ids))

    # --- 内部实现 ---

    def _build_query(self, source: Source, diagnostics: Diagnostics) -> CatalogQuery:
        args = source.query_args
        price_min: Optional[float] = args.price_range.min if args.price_range.min > 0 else None

        query = CatalogQuery(
            stock_status=args.stock_status,
            price_min=price_min,
            price_max=args.price_range.max,
            order=source.sort.order,
        )

        if source.kind == SourceKind.EXPLICIT_LIST:
            # 显式列表: 忽略分类/标签, 保留 post_ids 顺序
            return query.model_copy(update={"include_ids": list(dict.fromkeys(args.post_ids))})

        order_by = NATIVE_SORT_FIELDS.get(source.sort.order_by)
        if order_by is None:
            diagnostics.resolution(
                "sort_field_ignored",
                f"Sort field '{source.sort.order_by}' is not catalog-native; using the default order.",
            )
        update = {"order_by": order_by}

        if source.kind == SourceKind.DISCOUNTED:
            update["on_sale"] = True
        elif source.kind == SourceKind.BY_CATEGORY:
            update["category_ids"] = list(args.category_ids)
            update["tag_ids"] = list(args.tag_ids)

        return query.model_copy(update=update)

    async def _run_query(self, query: CatalogQuery) -> List[int]:
        try:
            page = await self.catalog.query(query)
        except Exception as e:
            logger.error(f"Catalog query failed: {e}", exc_info=True)
            raise CatalogUnavailable(f"Catalog query failed: {e}") from e
        return list(page.ids)

    def _explicit_order(self, post_ids: List[int], found: List[int], diagnostics: Diagnostics) -> List[int]:
        found_set = set(found)
        ordered = [item_id for item_id in dict.fromkeys(post_ids) if item_id in found_set]
        missing = len(set(post_ids)) - len(ordered)
        if missing:
            diagnostics.resolution(
                "explicit_ids_unresolved",
                f"{missing} of the listed products could not be resolved and were dropped.",
            )
        return ordered

async def resolve(source: Source, catalog: Catalog, diagnostics: Optional[Diagnostics] = None) -> ResolvedSource:
    return await SourceResolver(catalog).resolve(source, diagnostics if diagnostics is not None else Diagnostics())
