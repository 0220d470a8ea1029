import enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .columns import CellContent
from .errors import Diagnostic
from .features import CartAction, PageInfo, SortOverride
from .style import PresentationDescriptor

class RenderMode(str, enum.Enum):
    EMBED = "embed"
    REFRESH = "refresh"
    PREVIEW = "preview"

class RenderParams(BaseModel):
    """Explicit, immutable request parameters. Nothing is read from ambient request state."""
    model_config = ConfigDict(frozen=True)

    page: int = 1
    search_term: Optional[str] = None
    sort_override: Optional[SortOverride] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None

class HeaderColumn(BaseModel):
    id: str
    type: str
    heading: str
    show_heading: bool = True
    width: Optional[str] = None
    visibility_class: Optional[str] = None

class Cell(BaseModel):
    column_id: str
    content: CellContent

class Row(BaseModel):
    item_id: int
    cells: List[Cell] = Field(default_factory=list)
    selectable: bool = False
    cart: Optional[CartAction] = None

class RenderedOutput(BaseModel):
    mode: RenderMode
    table_id: Optional[int] = None
    columns: Optional[List[HeaderColumn]] = None
    rows: List[Row] = Field(default_factory=list)
    pagination: PageInfo = Field(default_factory=PageInfo)
    presentation: Optional[PresentationDescriptor] = None
    features: Dict[str, Any] = Field(default_factory=dict)
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    html: Optional[str] = None
