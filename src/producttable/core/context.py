# producttable/core/context.py

from pydantic import BaseModel, ConfigDict
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from producttable.api.dependencies.authentication import OperatorContext
from producttable.services.exceptions import PermissionDeniedError

class AppContext(BaseModel):
    """
    Defines the complete, typed context for service layer operations.
    This acts as a "contract" for what dependencies are available.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    # 核心数据库会话
    db: AsyncSession

    # 对于需要认证的路由是 OperatorContext; 对于公共路由可能为 None
    operator: Optional[OperatorContext] = None

    @property
    def is_editor(self) -> bool:
        return self.operator is not None

    @property
    def actor(self) -> OperatorContext:
        if self.operator is None:
            raise PermissionDeniedError("An authenticated editor is required for this operation.")
        return self.operator
