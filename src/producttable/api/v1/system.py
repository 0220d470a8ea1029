# producttable/api/v1/system.py

from fastapi import APIRouter
from producttable.core.context import AppContext
from producttable.api.dependencies.context import AuthContextDep
from producttable.schemas.common import JsonResponse
from producttable.schemas.system.system_schemas import SystemStatusRead
from producttable.services.system.system_service import SystemService

router = APIRouter()  # /system

@router.get(
    "/status",
    response_model=JsonResponse[SystemStatusRead],
    summary="Catalog availability, product and table counts, service version",
)
async def get_status(context: AppContext = AuthContextDep):
    return JsonResponse(data=await SystemService(context).status())
