import enum
from typing import Optional, List, Dict, Any, Literal, Type
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ============================================================================
# 0. 基础配置 (Base model)
# ============================================================================

class DefinitionModel(BaseModel):
    """
    Definitions are immutable values: camelCase on the wire, snake_case in Python.
    Edits produce new values via `model_copy(update=...)`, never in-place mutation.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def dump(self) -> Dict[str, Any]:
        """The persisted (camelCase, JSON-safe) representation."""
        return self.model_dump(mode="json", by_alias=True)

# ============================================================================
# 1. 封闭枚举 (Closed vocabularies)
# ============================================================================

class TableStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"

class SourceKind(str, enum.Enum):
    ALL = "all"
    DISCOUNTED = "discounted"
    BY_CATEGORY = "by-category"
    EXPLICIT_LIST = "explicit-list"

class ColumnType(str, enum.Enum):
    IMAGE = "image"
    NAME = "name"
    PRICE = "price"
    SKU = "sku"
    STOCK = "stock"
    BUTTON = "button"
    DATE = "date"
    SUMMARY = "summary"
    TAXONOMY = "taxonomy"
    CUSTOM_FIELD = "custom-field"
    COMBINED = "combined"

VisibilityMode = Literal[
    "default", "all", "none", "mobile", "tablet", "desktop",
    "not-mobile", "not-tablet", "not-desktop", "min-tablet",
]

# 原有持久化格式中的旧词汇 -> 规范值
LEGACY_SOURCE_KINDS: Dict[str, SourceKind] = {
    "sale": SourceKind.DISCOUNTED,
    "category": SourceKind.BY_CATEGORY,
    "specific": SourceKind.EXPLICIT_LIST,
}

LEGACY_COLUMN_TYPES: Dict[str, ColumnType] = {
    "tax": ColumnType.TAXONOMY,
    "cf": ColumnType.CUSTOM_FIELD,
    "add-to-cart": ColumnType.BUTTON,
}

# ============================================================================
# 2. Source
# ============================================================================

class PriceRange(DefinitionModel):
    min: float = 0
    max: Optional[float] = None  # None = unbounded

class QueryArgs(DefinitionModel):
    category_ids: List[int] = Field(default_factory=list)
    tag_ids: List[int] = Field(default_factory=list)
    post_ids: List[int] = Field(default_factory=list)
    excludes: List[int] = Field(default_factory=list)
    stock_status: Literal["any", "instock", "outofstock"] = "any"
    price_range: PriceRange = Field(default_factory=PriceRange)

class SortSpec(DefinitionModel):
    order_by: str = "date"
    order: Literal["ASC", "DESC"] = "DESC"

class Source(DefinitionModel):
    kind: SourceKind = SourceKind.ALL
    query_args: QueryArgs = Field(default_factory=QueryArgs)
    sort: SortSpec = Field(default_factory=SortSpec)

# ============================================================================
# 3. Columns
# ============================================================================

class ColumnWidth(DefinitionModel):
    value: float = 0
    unit: Literal["auto", "px", "%"] = "auto"

class ColumnAdvanced(DefinitionModel):
    show_heading: bool = True
    width: ColumnWidth = Field(default_factory=ColumnWidth)
    visibility: VisibilityMode = "default"
    order: int = 0

class Column(DefinitionModel):
    id: str
    # 保持为 str：未知类型必须能走到渲染阶段并降级为空单元格
    type: str
    heading: str = ""
    advanced: ColumnAdvanced = Field(default_factory=ColumnAdvanced)
    settings: Dict[str, Any] = Field(default_factory=dict)

# --- 类型专属设置 (type-specific settings bags) ---

class ColumnSettings(DefinitionModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="allow"
    )

class ImageSettings(ColumnSettings):
    image_size: str = "thumbnail"
    link_target: Literal["product", "none"] = "product"

class NameSettings(ColumnSettings):
    link_to_product: bool = True

class ButtonSettings(ColumnSettings):
    label: str = "Add to Cart"

class DateSettings(ColumnSettings):
    format: str = "%Y-%m-%d"

class SummarySettings(ColumnSettings):
    max_words: Optional[int] = Field(None, ge=1)

class StockSettings(ColumnSettings):
    show_quantity: bool = True

class TaxonomySettings(ColumnSettings):
    taxonomy: str = "product_cat"
    link_to_archive: bool = False
    separator: str = ", "

class CustomFieldSettings(ColumnSettings):
    meta_key: str = ""

class CombinedSettings(ColumnSettings):
    layout: Literal["inline", "stacked"] = "inline"
    elements: List[str] = Field(default_factory=list)

COLUMN_SETTINGS_MODELS: Dict[str, Type[ColumnSettings]] = {
    ColumnType.IMAGE.value: ImageSettings,
    ColumnType.NAME.value: NameSettings,
    ColumnType.PRICE.value: ColumnSettings,
    ColumnType.SKU.value: ColumnSettings,
    ColumnType.STOCK.value: StockSettings,
    ColumnType.BUTTON.value: ButtonSettings,
    ColumnType.DATE.value: DateSettings,
    ColumnType.SUMMARY.value: SummarySettings,
    ColumnType.TAXONOMY.value: TaxonomySettings,
    ColumnType.CUSTOM_FIELD.value: CustomFieldSettings,
    ColumnType.COMBINED.value: CombinedSettings,
}

def column_settings(column: Column) -> ColumnSettings:
    """Typed view over a column's settings bag; unknown types get the bare base bag."""
    model = COLUMN_SETTINGS_MODELS.get(column.type, ColumnSettings)
    return model.model_validate(column.settings)

# ============================================================================
# 4. Settings
# ============================================================================

class BulkSelectConfig(DefinitionModel):
    enabled: bool = True
    position: Literal["first", "last"] = "first"
    width: ColumnWidth = Field(default_factory=lambda: ColumnWidth(value=64, unit="px"))
    visibility: VisibilityMode = "all"

class FeatureToggles(DefinitionModel):
    search: bool = True
    sorting: bool = True
    pagination: bool = True
    export: bool = False
    price_range: bool = False
    bulk_select: BulkSelectConfig = Field(default_factory=BulkSelectConfig)

class PaginationConfig(DefinitionModel):
    limit: int = Field(10, ge=1)
    position: Literal["top", "bottom", "both"] = "bottom"

class CartConfig(DefinitionModel):
    enable: bool = True
    method: Literal["button", "checkbox", "text"] = "button"
    show_quantity: bool = True
    ajax_add: bool = True

class FilterConfig(DefinitionModel):
    enabled: bool = True
    active_taxonomies: List[str] = Field(default_factory=lambda: ["product_cat"])

class TableSettings(DefinitionModel):
    features: FeatureToggles = Field(default_factory=FeatureToggles)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    cart: CartConfig = Field(default_factory=CartConfig)
    filters: FilterConfig = Field(default_factory=FilterConfig)

# ============================================================================
# 5. Style (纯数据, 所有 token 可选)
# ============================================================================

class HeaderStyle(DefinitionModel):
    bg_color: Optional[str] = None
    text_color: Optional[str] = None
    font_size: Optional[str] = None

class BodyStyle(DefinitionModel):
    bg_color: Optional[str] = None
    text_color: Optional[str] = None
    row_alternate: Optional[bool] = None
    alt_bg_color: Optional[str] = None
    alt_text_color: Optional[str] = None
    border_color: Optional[str] = None

class ButtonStyle(DefinitionModel):
    bg_color: Optional[str] = None
    text_color: Optional[str] = None
    border_radius: Optional[str] = None
    icon: Optional[str] = None
    hover_bg_color: Optional[str] = None
    hover_text_color: Optional[str] = None

class LayoutStyle(DefinitionModel):
    border_style: Optional[Literal["none", "solid", "dashed"]] = None
    border_color: Optional[str] = None
    border_radius: Optional[str] = None
    cell_padding: Optional[Literal["compact", "normal", "spacious"]] = None

class TypographyStyle(DefinitionModel):
    header_font_weight: Optional[Literal["normal", "bold", "extrabold"]] = None

class HoverStyle(DefinitionModel):
    row_hover_enabled: Optional[bool] = None
    row_hover_bg_color: Optional[str] = None

class ResponsiveStyle(DefinitionModel):
    mode: Optional[Literal["standard", "stack", "accordion"]] = None

class TableStyle(DefinitionModel):
    header: HeaderStyle = Field(default_factory=HeaderStyle)
    body: BodyStyle = Field(default_factory=BodyStyle)
    button: ButtonStyle = Field(default_factory=ButtonStyle)
    layout: LayoutStyle = Field(default_factory=LayoutStyle)
    typography: TypographyStyle = Field(default_factory=TypographyStyle)
    hover: HoverStyle = Field(default_factory=HoverStyle)
    responsive: ResponsiveStyle = Field(default_factory=ResponsiveStyle)

# ============================================================================
# 6. 根实体 (Root entity)
# ============================================================================

class TableDefinition(DefinitionModel):
    id: Optional[int] = None
    title: str = "Untitled Table"
    status: TableStatus = TableStatus.DRAFT
    source: Source = Field(default_factory=Source)
    columns: List[Column] = Field(default_factory=list)
    settings: TableSettings = Field(default_factory=TableSettings)
    style: TableStyle = Field(default_factory=TableStyle)

    def with_id(self, table_id: int) -> "TableDefinition":
        return self.model_copy(update={"id": table_id})

    def ordered_columns(self) -> List[Column]:
        # sorted() 是稳定排序: order 相同时保留列表位置
        return sorted(self.columns, key=lambda c: c.advanced.order)
