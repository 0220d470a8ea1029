# producttable/api/dependencies/authentication.py

import logging
from typing import Literal, Optional
from fastapi import HTTPException, Request, status
from pydantic import BaseModel
from jose import JWTError

from producttable.core.config import settings
from producttable.core.security import decode_token, verify_api_key_hash

logger = logging.getLogger(__name__)

# --- 定义 OperatorContext ---
class OperatorContext(BaseModel):
    """An authenticated editor. The service only consumes credentials; it never manages them."""
    operator_id: str
    method: Literal["token", "api_key"]
    token: Optional[str] = None

# --- 纯函数: 不依赖 request ---
def get_operator_from_token(token: str) -> OperatorContext:
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return OperatorContext(operator_id=str(subject), method="token", token=token)

def get_operator_from_api_key(api_key: str) -> OperatorContext:
    if not verify_api_key_hash(api_key, settings.EDITOR_API_KEY_HASH):
        logger.warning("Rejected request with an invalid editor API key.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
    return OperatorContext(operator_id="api-key", method="api_key")

# --- [主依赖项] ---
async def get_optional_operator(request: Request) -> Optional[OperatorContext]:
    """
    Resolves credentials placed on request.state by AuthenticationMiddleware.
    No credentials -> None; invalid credentials -> 401.
    """
    token = getattr(request.state, "token", None)
    api_key = getattr(request.state, "api_key", None)

    operator: Optional[OperatorContext] = None
    if token:
        operator = get_operator_from_token(token)
    elif api_key:
        operator = get_operator_from_api_key(api_key)

    request.state.operator = operator
    return operator

async def get_operator(request: Request) -> OperatorContext:
    operator = await get_optional_operator(request)
    if operator is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials were not provided."
        )
    return operator
