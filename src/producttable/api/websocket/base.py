import logging
import json
from typing import Any, Optional
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from producttable.utils.websocket_manager import ws_manager, WSPacket, WSEvent
from producttable.api.dependencies.authentication import OperatorContext

logger = logging.getLogger(__name__)

class BaseWebSocketHandler:
    def __init__(self, websocket: WebSocket, operator: OperatorContext):
        self.websocket = websocket
        self.operator = operator

    async def run(self):
        """主事件循环"""
        await ws_manager.connect(self.websocket, operator_id=self.operator.operator_id)
        try:
            while True:
                text = await self.websocket.receive_text()
                await self._dispatch(text)
        except WebSocketDisconnect:
            logger.info(f"WS Disconnect: {self.operator.operator_id}")
        except Exception as e:
            logger.error(f"WS Loop Error: {e}", exc_info=True)
        finally:
            await self.on_disconnect()  # 钩子：允许子类清理任务
            ws_manager.disconnect(self.websocket, operator_id=self.operator.operator_id)

    async def _dispatch(self, text: str):
        """动态路由分发"""
        try:
            packet = WSPacket(**json.loads(text))
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            await self.reply_error(None, f"Protocol Error: {e}")
            return

        # 约定：action="edit" -> 路由到 self.action_edit(packet)
        handler = getattr(self, f"action_{packet.action}", None)
        if handler is None:
            await self.reply_error(packet.request_id, f"Unknown action: {packet.action}")
            return
        # 长时操作由子类自行管理 Task 生命周期
        try:
            await handler(packet)
        except Exception as e:
            logger.error(f"Action '{packet.action}' failed: {e}", exc_info=True)
            await self.reply_error(packet.request_id, str(e))

    async def send(self, event: str, data: Any = None, request_id: Optional[str] = None):
        """发送辅助方法"""
        packet = WSEvent(event=event, data=data, request_id=request_id)
        try:
            await self.websocket.send_text(packet.to_text())
        except RuntimeError:
            # 连接可能已关闭
            logger.debug("Dropped WS event on a closed connection.")

    async def reply_error(self, request_id: Optional[str], message: str):
        await self.send("error", {"message": message}, request_id)

    async def on_disconnect(self):
        """子类覆盖此方法进行清理"""
        pass

    # --- 通用 Action ---
    async def action_ping(self, packet: WSPacket):
        await self.send("pong", "pong", packet.request_id)
