# producttable/api/v1/preview_ws.py

import logging
from typing import Any, Callable, Dict, Optional
from pydantic import ValidationError

from producttable.api.websocket.base import BaseWebSocketHandler, WSPacket
from producttable.core.config import settings
from producttable.db.session import SessionLocal
from producttable.engine.table.preview import BUSY_STATES, PreviewOutcome, PreviewSession
from producttable.schemas.table.table_schemas import RenderRequest
from producttable.services.catalog.sql_catalog import SessionScopedCatalog
from producttable.services.table.render_service import build_orchestrator

logger = logging.getLogger(__name__)

class PreviewSessionHandler(BaseWebSocketHandler):
    """
    Live preview 专用 WebSocket 处理器。
    支持 edit, stop, ping 指令; 推送 preview, preview_error, cancelled 事件。
    """
    def __init__(
        self,
        websocket,
        operator,
        session_factory: Callable[[], Any] = SessionLocal,
        debounce_seconds: Optional[float] = None,
    ):
        super().__init__(websocket, operator)
        # [Session Isolation] 每次目录调用使用独立的 DB Session
        orchestrator = build_orchestrator(catalog=SessionScopedCatalog(session_factory))
        if debounce_seconds is None:
            debounce_seconds = settings.PREVIEW_DEBOUNCE_MS / 1000
        self.session = PreviewSession(orchestrator, self._deliver, debounce_seconds=debounce_seconds)
        # seq -> 客户端 request_id
        self._request_ids: Dict[int, Optional[str]] = {}

    async def action_edit(self, packet: WSPacket):
        definition = packet.data.get("definition", packet.data.get("data", {}))
        try:
            params = RenderRequest(**(packet.data.get("params") or {})).to_params()
        except ValidationError as e:
            await self.reply_error(packet.request_id, f"Invalid Params: {e}")
            return

        superseded = self.session.seq if self.session.state in BUSY_STATES else None
        seq = self.session.submit(definition, params)
        self._request_ids[seq] = packet.request_id

        if superseded is not None:
            await self.send("cancelled", {"seq": superseded, "superseded_by": seq},
                            self._request_ids.pop(superseded, None))

    async def action_stop(self, packet: WSPacket):
        """停止当前预览周期"""
        busy_seq = self.session.seq if self.session.state in BUSY_STATES else None
        await self.session.close()
        if busy_seq is not None:
            logger.info(f"Operator {self.operator.operator_id} stopped preview cycle {busy_seq}")
            await self.send("cancelled", {"seq": busy_seq}, self._request_ids.pop(busy_seq, packet.request_id))

    async def on_disconnect(self):
        await self.session.close()

    async def _deliver(self, outcome: PreviewOutcome):
        request_id = self._request_ids.pop(outcome.seq, None)
        # 被取代的 seq 不会再被投递, 清理其残留映射
        for stale in [seq for seq in self._request_ids if seq < outcome.seq]:
            self._request_ids.pop(stale, None)

        if outcome.ok:
            await self.send("preview", {
                "seq": outcome.seq,
                "output": outcome.output.model_dump(mode="json"),
            }, request_id)
        else:
            await self.send("preview_error", {
                "seq": outcome.seq,
                **outcome.error.model_dump(),
            }, request_id)
