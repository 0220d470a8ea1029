import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar, Union
from pydantic import BaseModel, ValidationError

from .errors import ShapeError, ConfigError
from .definitions import (
    TableDefinition, Source, Column, TableSettings, TableStyle,
    SourceKind, ColumnType, LEGACY_SOURCE_KINDS, LEGACY_COLUMN_TYPES,
    COLUMN_SETTINGS_MODELS,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# ============================================================================
# 默认值 (Defaults)
# ============================================================================

DEFAULT_COLUMNS: List[Dict[str, Any]] = [
    {"type": "image", "heading": "Image"},
    {"type": "name", "heading": "Product Name"},
    {"type": "price", "heading": "Price"},
    {"type": "button", "heading": "Action"},
]

DEFAULT_HEADINGS: Dict[str, str] = {
    "image": "Image",
    "name": "Product Name",
    "price": "Price",
    "sku": "SKU",
    "stock": "Stock",
    "button": "Action",
    "date": "Date",
    "summary": "Summary",
    "taxonomy": "Categories",
    "custom-field": "",
    "combined": "",
}

# 仅当整个区域缺失时填充; 区域存在时 token 保持原样 (可为空)
DEFAULT_STYLE: Dict[str, Dict[str, Any]] = {
    "header": {"bgColor": "#f0f0f1", "textColor": "#333333", "fontSize": "16px"},
    "body": {
        "bgColor": "#ffffff", "textColor": "#444444", "rowAlternate": False,
        "altBgColor": "#f9f9f9", "altTextColor": "#444444", "borderColor": "#e5e5e5",
    },
    "button": {
        "bgColor": "#2271b1", "textColor": "#ffffff", "borderRadius": "4px",
        "icon": "cart", "hoverBgColor": "#135e96", "hoverTextColor": "#ffffff",
    },
    "layout": {
        "borderStyle": "solid", "borderColor": "#e5e5e5",
        "borderRadius": "0px", "cellPadding": "normal",
    },
    "typography": {"headerFontWeight": "bold"},
    "hover": {"rowHoverEnabled": True, "rowHoverBgColor": "#f5f5f5"},
    "responsive": {"mode": "standard"},
}

LEGACY_CHECKBOX_TYPE = "checkbox"
LEGACY_STATUSES = {"publish": "published"}

# ============================================================================
# 内部工具 (Helpers)
# ============================================================================

def _validate(model: Type[M], data: Any, field: str) -> M:
    """Validates `data` into `model`, translating pydantic errors into a ShapeError naming the field path."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(part) for part in first.get("loc", ()))
        path = f"{field}.{loc}" if loc else field
        raise ShapeError(first.get("msg", "invalid value"), field=path) from e

def _as_mapping(value: Any, field: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ShapeError(f"expected an object, got {type(value).__name__}", field=field)
    return dict(value)

def _canonical_column_type(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value:
        raise ShapeError("column type is required", field=field)
    if value in LEGACY_COLUMN_TYPES:
        return LEGACY_COLUMN_TYPES[value].value
    try:
        return ColumnType(value).value
    except ValueError:
        raise ShapeError(f"unknown column type '{value}'", field=field)

def _canonical_source_kind(value: Any) -> str:
    if isinstance(value, SourceKind):
        return value.value
    if isinstance(value, str) and value in LEGACY_SOURCE_KINDS:
        return LEGACY_SOURCE_KINDS[value].value
    try:
        return SourceKind(value).value
    except ValueError:
        raise ShapeError(f"unknown source kind '{value}'", field="source.kind")

# ============================================================================
# 分块规范化 (Per-block normalization)
# ============================================================================

def _normalize_source(raw: Any) -> Source:
    data = _as_mapping(raw, "source")
    kind = data.pop("kind", None)
    legacy_kind = data.pop("type", None)
    if kind is None:
        kind = legacy_kind
    data["kind"] = _canonical_source_kind(kind if kind is not None else SourceKind.ALL.value)
    return _validate(Source, data, "source")

def _normalize_column_settings(col_type: str, raw: Any, field: str) -> Dict[str, Any]:
    data = _as_mapping(raw, field)

    if col_type == ColumnType.COMBINED.value:
        elements = data.get("elements", [])
        if not isinstance(elements, list):
            raise ShapeError("expected a list", field=f"{field}.elements")
        canonical = []
        for j, element in enumerate(elements):
            element_type = _canonical_column_type(element, f"{field}.elements[{j}]")
            if element_type == ColumnType.COMBINED.value:
                raise ConfigError("a combined column cannot contain another combined column",
                                  field=f"{field}.elements[{j}]")
            canonical.append(element_type)
        data["elements"] = canonical

    model = COLUMN_SETTINGS_MODELS[col_type]
    return _validate(model, data, field).dump()

def _normalize_columns(raw: Mapping[str, Any]) -> Tuple[List[Column], Optional[Dict[str, Any]]]:
    """
    Returns the normalized column list and, when a legacy checkbox column was
    present, the bulk-select override it folds into.
    """
    raw_columns = raw.get("columns")
    if raw_columns is None:
        raw_columns = DEFAULT_COLUMNS
    if not isinstance(raw_columns, list):
        raise ShapeError("expected a list", field="columns")

    columns: List[Column] = []
    seen_ids: Dict[str, int] = {}
    bulk_override: Optional[Dict[str, Any]] = None

    for index, raw_column in enumerate(raw_columns):
        field = f"columns[{index}]"
        data = _as_mapping(raw_column, field)

        if data.get("type") == LEGACY_CHECKBOX_TYPE:
            # 选择列并入 bulk_select, 位置由其在列表中的位置决定
            position = "first" if not columns else "last"
            bulk_override = {"enabled": True, "position": position}
            continue

        col_type = _canonical_column_type(data.get("type"), f"{field}.type")
        data["type"] = col_type

        column_id = data.get("id") or f"col_{col_type}_{index}"
        if column_id in seen_ids:
            raise ConfigError(f"duplicate column id '{column_id}'", field=f"{field}.id")
        seen_ids[column_id] = index
        data["id"] = column_id

        if "heading" not in data:
            data["heading"] = data.pop("label", DEFAULT_HEADINGS.get(col_type, ""))
        data["settings"] = _normalize_column_settings(col_type, data.get("settings"), f"{field}.settings")

        columns.append(_validate(Column, data, field))

    return columns, bulk_override

def _normalize_settings(raw: Any, bulk_override: Optional[Dict[str, Any]]) -> TableSettings:
    settings = _validate(TableSettings, _as_mapping(raw, "settings"), "settings")
    if bulk_override:
        features = settings.features
        settings = settings.model_copy(update={
            "features": features.model_copy(update={
                "bulk_select": features.bulk_select.model_copy(update=bulk_override),
            }),
        })
    return settings

def _normalize_style(raw: Any) -> TableStyle:
    data = _as_mapping(raw, "style")
    for region, defaults in DEFAULT_STYLE.items():
        if data.get(region) is None:
            data[region] = dict(defaults)
    return _validate(TableStyle, data, "style")

# ============================================================================
# 公共入口 (Public API)
# ============================================================================

def normalize(raw: Union[Mapping[str, Any], TableDefinition, None]) -> TableDefinition:
    """
    Turns a raw (possibly partial, possibly legacy) definition into a complete
    TableDefinition. Pure and idempotent; raises ShapeError / ConfigError only.
    """
    if isinstance(raw, TableDefinition):
        raw = raw.dump()
    data = _as_mapping(raw, "definition")

    source = _normalize_source(data.get("source"))
    columns, bulk_override = _normalize_columns(data)
    settings = _normalize_settings(data.get("settings"), bulk_override)
    style = _normalize_style(data.get("style"))

    status = data.get("status")
    if status is not None and not isinstance(status, str):
        raise ShapeError(f"expected a string, got {type(status).__name__}", field="status")

    root = {
        "id": data.get("id"),
        "status": LEGACY_STATUSES.get(status, status) or "draft",
        "source": source,
        "columns": columns,
        "settings": settings,
        "style": style,
    }
    if data.get("title"):
        root["title"] = data["title"]
    return _validate(TableDefinition, root, "definition")

def normalize_dict(raw: Union[Mapping[str, Any], TableDefinition, None]) -> Dict[str, Any]:
    return normalize(raw).dump()

# ============================================================================
# 旧数据迁移 (Legacy blob migration)
# ============================================================================

_STRUCTURED_KEYS = ("source", "columns", "settings", "style")
_LEGACY_FLAT_KEYS = ("source_type", "products", "categories", "products_per_page")

def _id_list(value: Any) -> List[int]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        value = [part for part in value.split(",") if part.strip()]
    if not isinstance(value, (list, tuple)):
        value = [value]
    result = []
    for item in value:
        try:
            result.append(int(item))
        except (TypeError, ValueError):
            logger.warning(f"Dropping non-numeric id {item!r} from legacy configuration.")
    return result

def _legacy_columns(raw_columns: Any) -> Any:
    # 旧格式: [{"id": "image", "label": "Image"}], id 即类型
    if not isinstance(raw_columns, list):
        return raw_columns
    translated = []
    for column in raw_columns:
        if isinstance(column, Mapping) and "type" not in column and "id" in column:
            column = {"type": column["id"], "heading": column.get("label", "")}
        translated.append(column)
    return translated

def migrate_legacy(blob: Any, title: Optional[str] = None) -> TableDefinition:
    """
    Translates an opaque legacy configuration blob. Blobs carrying any of the four
    structured sub-blocks or the flat legacy keys are translated and normalized;
    anything else falls back to defaults.
    """
    data = blob if isinstance(blob, Mapping) else {}
    raw: Dict[str, Any] = {}

    # 旧版扁平配置总是带有 columns, 必须先于结构化判断
    if any(key in data for key in _LEGACY_FLAT_KEYS):
        kind = data.get("source_type") or "all"
        raw["source"] = {
            "kind": kind,
            "queryArgs": {
                "postIds": _id_list(data.get("products")),
                "categoryIds": _id_list(data.get("categories")),
            },
        }
        if data.get("products_per_page"):
            raw["settings"] = {"pagination": {"limit": int(data["products_per_page"])}}
        if "columns" in data:
            raw["columns"] = data["columns"]
    elif any(key in data for key in _STRUCTURED_KEYS):
        raw = {key: data[key] for key in _STRUCTURED_KEYS if key in data}
    else:
        logger.warning("Legacy configuration carries no recognizable keys; using defaults.")

    if "columns" in raw:
        raw["columns"] = _legacy_columns(raw["columns"])
        # 旧版空列表表示"使用默认列"
        if raw["columns"] == []:
            raw.pop("columns")

    if title:
        raw["title"] = title
    logger.warning("Migrated legacy table configuration to the structured definition shape.")
    return normalize(raw)
