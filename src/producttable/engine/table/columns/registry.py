import logging
from typing import Any, Callable, Dict, List, Optional
from pydantic import BaseModel, Field

from ..catalog import CatalogItem, CurrencyFormat
from ..definitions import CartConfig, Column, ColumnSettings, column_settings
from ..errors import Diagnostics

logger = logging.getLogger(__name__)

# ============================================================================
# 1. 单元格内容 (Cell content)
# ============================================================================

class CellContent(BaseModel):
    """
    Structured, presentation-agnostic cell value.
    `type` is one of: empty, text, link, image, price, stock, list, composite, action.
    """
    type: str = "empty"
    text: str = ""
    url: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    children: List["CellContent"] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "CellContent":
        return cls(type="empty")

CellContent.model_rebuild()

# ============================================================================
# 2. 渲染上下文 (Render context)
# ============================================================================

class RenderContext:
    """Everything a cell renderer may read besides the column and the item."""
    def __init__(
        self,
        currency: CurrencyFormat,
        cart: CartConfig,
        diagnostics: Diagnostics,
        placeholder_image_url: str = "",
    ):
        self.currency = currency
        self.cart = cart
        self.diagnostics = diagnostics
        self.placeholder_image_url = placeholder_image_url

    def settings_for(self, column: Column) -> ColumnSettings:
        # 按列本身解析: 组合列的子列 id 可能与用户列重名
        return column_settings(column)

CellRenderer = Callable[[Column, CatalogItem, RenderContext], CellContent]

# ============================================================================
# 3. 注册中心 (Registry)
# ============================================================================

class ColumnRendererRegistry:
    """
    Closed dispatch table keyed by column type.
    """
    def __init__(self):
        self._renderers: Dict[str, CellRenderer] = {}

    def register(self, column_type: str):
        def decorator(func: CellRenderer) -> CellRenderer:
            if column_type in self._renderers:
                raise ValueError(f"Renderer for column type '{column_type}' is already registered.")
            self._renderers[column_type] = func
            return func
        return decorator

    def types(self) -> List[str]:
        return list(self._renderers.keys())

    def render(self, column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
        renderer = self._renderers.get(column.type)
        if renderer is None:
            ctx.diagnostics.render(
                "unknown_column_type",
                f"Column '{column.id}' has unknown type '{column.type}'; rendering an empty cell.",
                column_id=column.id,
            )
            return CellContent.empty()
        try:
            return renderer(column, item, ctx)
        except Exception as e:
            # 单元格级降级: 记录诊断并输出空单元格, 不影响整张表
            logger.debug(f"Renderer for '{column.type}' failed on item {item.id}", exc_info=True)
            ctx.diagnostics.render(
                "cell_render_failed",
                f"Column '{column.id}' could not render: {e}",
                column_id=column.id,
            )
            return CellContent.empty()

# ============================================================================
# 4. 全局实例 (Global instance)
# ============================================================================

default_column_registry = ColumnRendererRegistry()
register_column = default_column_registry.register

def render_cell(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    return default_column_registry.render(column, item, ctx)
