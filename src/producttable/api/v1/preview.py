# producttable/api/v1/preview.py

from fastapi import APIRouter, Depends, WebSocket
from producttable.core.context import AppContext
from producttable.api.dependencies.context import AuthContextDep
from producttable.api.dependencies.authentication import OperatorContext
from producttable.api.dependencies.ws_auth import get_ws_operator
from producttable.db.session import SessionLocal
from producttable.engine.table.output import RenderedOutput
from producttable.schemas.common import JsonResponse
from producttable.schemas.table.table_schemas import PreviewRequest
from producttable.services.table.render_service import RenderService
from .preview_ws import PreviewSessionHandler

router = APIRouter()  # /preview

@router.post(
    "",
    response_model=JsonResponse[RenderedOutput],
    summary="One-shot preview of a transient (unsaved) definition",
)
async def preview_table(body: PreviewRequest, context: AppContext = AuthContextDep):
    output = await RenderService(context).preview(body.definition, body.params.to_params())
    return JsonResponse(data=output)

# --- WebSocket Endpoint ---

@router.websocket("/ws")
async def websocket_preview(
    websocket: WebSocket,
    operator: OperatorContext = Depends(get_ws_operator),
):
    session_factory = getattr(websocket.app.state, "session_factory", SessionLocal)
    handler = PreviewSessionHandler(websocket, operator, session_factory=session_factory)
    await handler.run()
