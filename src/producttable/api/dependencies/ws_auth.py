# producttable/api/dependencies/ws_auth.py

from fastapi import WebSocket, Query, HTTPException, status
from typing import Optional

from producttable.api.dependencies.authentication import (
    OperatorContext, get_operator_from_token, get_operator_from_api_key,
)

async def get_ws_operator(
    websocket: WebSocket,
    token: Optional[str] = Query(None, description="JWT Token passed via query param"),
    api_key: Optional[str] = Query(None, alias="api_key", description="Editor API key passed via query param"),
) -> OperatorContext:
    """
    WebSocket 握手阶段的认证依赖。
    如果认证失败，直接关闭连接 (Close Code 1008 Policy Violation)。
    """
    if not token and not api_key:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Missing authentication token")
        raise HTTPException(status_code=403, detail="Missing authentication token")

    try:
        if token:
            return get_operator_from_token(token)
        return get_operator_from_api_key(api_key)
    except HTTPException:
        # 认证失败，拒绝握手
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Invalid authentication credentials")
        raise HTTPException(status_code=403, detail="Invalid credentials")
