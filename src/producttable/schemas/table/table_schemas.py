# producttable/schemas/table/table_schemas.py

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from producttable.engine.table.definitions import TableStatus
from producttable.engine.table.features import SortOverride
from producttable.engine.table.output import RenderParams

# ==============================================================================
# 1. Table CRUD
# ==============================================================================

class TableSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    status: TableStatus
    revision: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def shortcode(self) -> str:
        return f'[producttable id="{self.id}"]'

class TableRead(BaseModel):
    """A stored table: the normalized definition (camelCase) plus persistence metadata."""
    id: int
    revision: int
    definition: Dict[str, Any]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class TableListRead(BaseModel):
    items: List[TableSummaryRead]
    total: int
    page: int
    limit: int

class TableSaveRequest(BaseModel):
    """
    Full-replace save. `definition` is the raw (possibly partial) definition;
    `expected_revision` enables optimistic concurrency on update.
    """
    definition: Dict[str, Any] = Field(default_factory=dict)
    expected_revision: Optional[int] = Field(None, ge=1)

# ==============================================================================
# 2. Rendering
# ==============================================================================

class RenderRequest(BaseModel):
    """Runtime parameters shared by embed, refresh and preview."""
    page: int = Field(1, ge=1)
    search: Optional[str] = Field(None, max_length=200)
    sort_by: Optional[str] = None
    sort_order: Literal["ASC", "DESC"] = "ASC"
    price_min: Optional[float] = Field(None, ge=0)
    price_max: Optional[float] = Field(None, ge=0)

    def to_params(self) -> RenderParams:
        return RenderParams(
            page=self.page,
            search_term=self.search,
            sort_override=SortOverride(field=self.sort_by, order=self.sort_order) if self.sort_by else None,
            price_min=self.price_min,
            price_max=self.price_max,
        )

class PreviewRequest(BaseModel):
    """A transient definition; a legacy `data` wrapper is unwrapped."""
    definition: Dict[str, Any] = Field(default_factory=dict)
    params: RenderRequest = Field(default_factory=RenderRequest)

    @model_validator(mode="before")
    @classmethod
    def unwrap_data(cls, values: Any) -> Any:
        if isinstance(values, dict) and "definition" not in values and isinstance(values.get("data"), dict):
            return {**values, "definition": values["data"]}
        return values
