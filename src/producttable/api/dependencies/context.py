# producttable/api/dependencies/context.py

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from producttable.core.context import AppContext
from producttable.db.session import get_db
from producttable.api.dependencies.authentication import get_operator, get_optional_operator

# --- 步骤1: 基础上下文构建器 ---
async def get_base_context(db: AsyncSession = Depends(get_db)) -> AppContext:
    """只负责构建不含认证信息的 AppContext。"""
    return AppContext(db=db, operator=None)

# --- 步骤2: 公共/可选认证的上下文 ---
async def get_public_context(
    request: Request,
    context: AppContext = Depends(get_base_context),
) -> AppContext:
    """
    [公共/可选认证]
    没有凭证时 operator 为 None; 凭证无效时仍然 401。
    """
    context.operator = await get_optional_operator(request)
    return context

# --- 步骤3: 强制认证的上下文 ---
async def require_auth_context(
    request: Request,
    context: AppContext = Depends(get_base_context),
) -> AppContext:
    context.operator = await get_operator(request)
    return context

# 用于公共路由或认证可选路由
PublicContextDep = Depends(get_public_context)
# 用于需要强制认证的私有路由
AuthContextDep = Depends(require_auth_context)
