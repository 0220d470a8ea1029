# producttable/api/v1/render.py

from fastapi import APIRouter, Query
from typing import Literal, Optional
from producttable.core.context import AppContext
from producttable.api.dependencies.context import PublicContextDep
from producttable.engine.table.output import RenderedOutput
from producttable.schemas.common import JsonResponse
from producttable.schemas.table.table_schemas import RenderRequest
from producttable.services.table.render_service import RenderService

router = APIRouter()  # /tables/{id}

@router.get(
    "/{table_id}/render",
    response_model=JsonResponse[RenderedOutput],
    summary="Embed render: full output including the HTML fragment",
)
async def render_table(
    table_id: int,
    page: int = Query(1, ge=1),
    search: Optional[str] = Query(None, max_length=200),
    sort_by: Optional[str] = Query(None, max_length=32),
    sort_order: Literal["ASC", "DESC"] = Query("ASC"),
    price_min: Optional[float] = Query(None, ge=0),
    price_max: Optional[float] = Query(None, ge=0),
    context: AppContext = PublicContextDep
):
    # 草稿仅对已认证的编辑者可见
    params = RenderRequest(
        page=page, search=search, sort_by=sort_by, sort_order=sort_order,
        price_min=price_min, price_max=price_max,
    )
    output = await RenderService(context).embed(table_id, params.to_params())
    return JsonResponse(data=output)

@router.post(
    "/{table_id}/refresh",
    response_model=JsonResponse[RenderedOutput],
    response_model_exclude_none=True,
    summary="Asynchronous refresh: rows and pagination only",
)
async def refresh_table(
    table_id: int,
    params: RenderRequest,
    context: AppContext = PublicContextDep
):
    output = await RenderService(context).refresh(table_id, params.to_params())
    return JsonResponse(data=output)
