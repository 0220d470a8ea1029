import logging
from typing import List, Dict, Any, Optional
from fastapi import WebSocket
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# --- 1. 标准协议定义 ---

class WSPacket(BaseModel):
    """
    客户端请求包。
    request_id: 仅用于前端UI定位，后端原样返回，不用于逻辑控制。
    """
    action: str
    data: Dict[str, Any] = Field(default_factory=dict)
    request_id: Optional[str] = None

class WSEvent(BaseModel):
    """服务端响应包"""
    event: str
    data: Any = None
    request_id: Optional[str] = None  # 原样返回客户端传来的ID

    def to_text(self) -> str:
        return self.model_dump_json(exclude_none=True)

# --- 2. 连接管理器 ---

class WSConnectionManager:
    """
    跟踪活跃的预览连接, 按编辑者分组。
    """
    def __init__(self):
        self.active_connections: List[WebSocket] = []
        # operator_id -> [ws1, ws2]
        self.operator_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, operator_id: Optional[str] = None):
        await websocket.accept()
        self.active_connections.append(websocket)
        if operator_id:
            self.operator_connections.setdefault(operator_id, []).append(websocket)
        logger.info(f"WS Connected. Total: {len(self.active_connections)}")

    def disconnect(self, websocket: WebSocket, operator_id: Optional[str] = None):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        if operator_id and operator_id in self.operator_connections:
            if websocket in self.operator_connections[operator_id]:
                self.operator_connections[operator_id].remove(websocket)
            if not self.operator_connections[operator_id]:
                del self.operator_connections[operator_id]
        logger.info(f"WS Disconnected. Total: {len(self.active_connections)}")

    def sessions_of(self, operator_id: str) -> int:
        return len(self.operator_connections.get(operator_id, []))

# 全局单例
ws_manager = WSConnectionManager()
