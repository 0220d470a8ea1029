from .registry import (
    CellContent,
    RenderContext,
    ColumnRendererRegistry,
    default_column_registry,
    register_column,
    render_cell,
)

# 确保内置渲染器被加载和注册
from . import renderers
