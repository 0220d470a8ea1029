# producttable/api/v1/tables.py

from fastapi import APIRouter, HTTPException, Query
from typing import Any, Dict, Optional
from producttable.core.context import AppContext
from producttable.api.dependencies.context import AuthContextDep
from producttable.engine.table.definitions import TableStatus
from producttable.schemas.common import JsonResponse, MsgResponse
from producttable.schemas.table.table_schemas import TableListRead, TableRead, TableSaveRequest
from producttable.services.table.table_service import TableService
from producttable.services.exceptions import NotFoundError, PermissionDeniedError

router = APIRouter()  # /tables

@router.get(
    "",
    response_model=JsonResponse[TableListRead],
    summary="List tables, newest first",
)
async def list_tables(
    status: Optional[TableStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    context: AppContext = AuthContextDep
):
    tables = await TableService(context).list(status=status, search=search, page=page, limit=limit)
    return JsonResponse(data=tables)

@router.get(
    "/defaults",
    response_model=JsonResponse[Dict[str, Any]],
    summary="A fresh default definition for the editor",
)
async def get_default_definition(context: AppContext = AuthContextDep):
    return JsonResponse(data=TableService(context).defaults().dump())

@router.post(
    "",
    response_model=JsonResponse[TableRead],
    summary="Create a table",
)
async def create_table(body: TableSaveRequest, context: AppContext = AuthContextDep):
    table = await TableService(context).save(body.definition)
    return JsonResponse(data=table)

@router.get(
    "/{table_id}",
    response_model=JsonResponse[TableRead],
    summary="Get a stored table (drafts included)",
)
async def get_table(table_id: int, context: AppContext = AuthContextDep):
    try:
        table = await TableService(context).get_read(table_id)
        return JsonResponse(data=table)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

@router.put(
    "/{table_id}",
    response_model=JsonResponse[TableRead],
    summary="Replace a table definition",
)
async def update_table(table_id: int, body: TableSaveRequest, context: AppContext = AuthContextDep):
    try:
        table = await TableService(context).save(
            body.definition, table_id=table_id, expected_revision=body.expected_revision
        )
        return JsonResponse(data=table)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

@router.delete(
    "/{table_id}",
    response_model=MsgResponse,
    summary="Delete a table",
)
async def delete_table(table_id: int, context: AppContext = AuthContextDep):
    try:
        await TableService(context).delete(table_id)
        return MsgResponse(msg="Table deleted")
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
