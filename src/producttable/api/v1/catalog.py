# producttable/api/v1/catalog.py

from fastapi import APIRouter, Query
from typing import List, Literal, Optional
from producttable.core.context import AppContext
from producttable.api.dependencies.context import AuthContextDep
from producttable.schemas.common import JsonResponse
from producttable.schemas.table.catalog_schemas import CatalogProductRead, CategoryRead, SourceStatsRead
from producttable.services.catalog.catalog_service import CatalogService

router = APIRouter()  # /catalog

@router.get(
    "/products",
    response_model=JsonResponse[List[CatalogProductRead]],
    summary="Search products by name, id or SKU prefix",
)
async def search_products(
    search: Optional[str] = Query(None, max_length=200),
    include: Optional[int] = Query(None, description="Exact product id"),
    sku: Optional[str] = Query(None, max_length=100, description="SKU exact or prefix match"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    context: AppContext = AuthContextDep
):
    products = await CatalogService(context).search_products(
        search=search, include=include, sku=sku, page=page, limit=limit
    )
    return JsonResponse(data=products)

@router.get(
    "/categories",
    response_model=JsonResponse[List[CategoryRead]],
    summary="All product categories with product counts",
)
async def list_categories(context: AppContext = AuthContextDep):
    return JsonResponse(data=await CatalogService(context).categories())

@router.get(
    "/source-stats",
    response_model=JsonResponse[SourceStatsRead],
    summary="Product and category counts for a source type",
)
async def source_stats(
    type: Literal["all", "sale"] = Query("all"),
    context: AppContext = AuthContextDep
):
    return JsonResponse(data=await CatalogService(context).source_stats(type))
