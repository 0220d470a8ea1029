import math
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Tuple
from pydantic import BaseModel

from .catalog import CatalogItem
from .definitions import CartConfig, PaginationConfig, TableSettings, VisibilityMode
from .errors import Diagnostics

# ============================================================================
# 1. 数据结构 (Pipeline types)
# ============================================================================

SORTABLE_FIELDS = ("title", "name", "price", "sku", "date", "stock")

class SortOverride(BaseModel):
    field: str
    order: Literal["ASC", "DESC"] = "ASC"

class PageInfo(BaseModel):
    page: int = 1
    limit: int = 10
    total: int = 0
    total_pages: int = 0
    position: str = "bottom"

class CartAction(BaseModel):
    """
    Describes how the client may add this row to the cart. The engine never performs the add.
    """
    method: Literal["button", "checkbox", "text"] = "button"
    item_id: int
    ajax: bool = True
    quantity_selector: bool = False
    eligible: bool = False
    requires_options: bool = False
    reason: Optional[str] = None
    label: str = "Add to Cart"
    url: Optional[str] = None

class RowDecoration(BaseModel):
    item_id: int
    selectable: bool = False
    cart: Optional[CartAction] = None

# ============================================================================
# 2. 购物车资格 (Cart eligibility)
# ============================================================================

def build_cart_action(item: CatalogItem, cart: CartConfig, label: str = "Add to Cart") -> CartAction:
    reason: Optional[str] = None
    if not cart.enable:
        reason = "cart_disabled"
    elif item.stock_status == "outofstock":
        reason = "out_of_stock"
    elif not item.purchasable:
        reason = "not_purchasable"
    elif item.product_type in ("external", "grouped"):
        reason = item.product_type

    eligible = reason is None
    requires_options = item.product_type == "variable"

    url = None
    if requires_options or item.product_type in ("external", "grouped"):
        url = item.permalink or None
        label = "Select options" if requires_options else "View product"

    return CartAction(
        method=cart.method,
        item_id=item.id,
        ajax=cart.ajax_add and eligible and not requires_options,
        quantity_selector=cart.show_quantity and eligible and not requires_options,
        eligible=eligible,
        requires_options=requires_options,
        reason=reason,
        label=label,
        url=url,
    )

# ============================================================================
# 3. 流水线步骤 (Pipeline steps, fixed order)
# ============================================================================

def apply_search(
    items: List[CatalogItem], term: Optional[str], enabled: bool, diagnostics: Diagnostics
) -> List[CatalogItem]:
    if not term or not term.strip():
        return items
    if not enabled:
        diagnostics.feature("search_disabled", "Search term ignored: search is disabled for this table.")
        return items
    needle = term.strip().lower()
    return [
        item for item in items
        if needle in item.title.lower() or (item.sku and needle in item.sku.lower())
    ]

def apply_price_range(
    items: List[CatalogItem],
    price_min: Optional[float],
    price_max: Optional[float],
    enabled: bool,
    diagnostics: Diagnostics,
) -> List[CatalogItem]:
    if price_min is None and price_max is None:
        return items
    if not enabled:
        diagnostics.feature("price_range_disabled", "Price range ignored: the price filter is disabled for this table.")
        return items

    low = Decimal(str(price_min)) if price_min is not None else None
    high = Decimal(str(price_max)) if price_max is not None else None
    narrowed = []
    for item in items:
        price = item.effective_price
        if price is None:
            continue
        if low is not None and price < low:
            continue
        if high is not None and price > high:
            continue
        narrowed.append(item)
    return narrowed

_STOCK_RANK = {"instock": 0, "onbackorder": 1, "outofstock": 2}

def _sort_value(item: CatalogItem, field: str) -> Any:
    if field in ("title", "name"):
        return item.title.lower()
    if field == "price":
        return item.effective_price
    if field == "sku":
        return item.sku.lower() if item.sku else None
    if field == "date":
        return item.created_at
    return _STOCK_RANK.get(item.stock_status, 3)

def apply_sort_override(
    items: List[CatalogItem], override: Optional[SortOverride], enabled: bool, diagnostics: Diagnostics
) -> List[CatalogItem]:
    if override is None:
        return items
    if not enabled:
        diagnostics.feature("sorting_disabled", "Sort override ignored: sorting is disabled for this table.")
        return items
    if override.field not in SORTABLE_FIELDS:
        diagnostics.feature("sort_field_unsupported", f"Sort override on '{override.field}' is not supported.")
        return items

    descending = override.order == "DESC"
    present = [item for item in items if _sort_value(item, override.field) is not None]
    missing = [item for item in items if _sort_value(item, override.field) is None]
    # 值相同时按 id 决胜; 缺失值总是排在最后
    present.sort(key=lambda item: (_sort_value(item, override.field), item.id), reverse=descending)
    missing.sort(key=lambda item: item.id)
    return present + missing

def paginate(
    items: List[Any],
    page: int,
    config: PaginationConfig,
    enabled: bool,
    max_limit: Optional[int] = None,
) -> Tuple[List[Any], PageInfo]:
    total = len(items)
    if not enabled:
        return list(items), PageInfo(
            page=1, limit=total, total=total, total_pages=1 if total else 0, position=config.position
        )

    limit = config.limit if max_limit is None else min(config.limit, max_limit)
    total_pages = math.ceil(total / limit)
    current = min(max(page, 1), max(total_pages, 1))
    start = (current - 1) * limit
    return items[start:start + limit], PageInfo(
        page=current, limit=limit, total=total, total_pages=total_pages, position=config.position
    )

def decorate_rows(items: List[CatalogItem], settings: TableSettings) -> List[RowDecoration]:
    bulk = settings.features.bulk_select
    rows = []
    for item in items:
        action = build_cart_action(item, settings.cart) if settings.cart.enable else None
        selectable = bool(
            bulk.enabled and action is not None and action.eligible and not action.requires_options
        )
        rows.append(RowDecoration(item_id=item.id, selectable=selectable, cart=action))
    return rows

# ============================================================================
# 4. 响应式可见性 (Responsive visibility)
# ============================================================================

VISIBILITY_CLASSES: Dict[str, Optional[str]] = {
    "default": None,
    "all": "producttable-show-all",
    "none": "producttable-hidden",
    "mobile": "producttable-only-mobile",
    "tablet": "producttable-only-tablet",
    "desktop": "producttable-only-desktop",
    "not-mobile": "producttable-hide-mobile",
    "not-tablet": "producttable-hide-tablet",
    "not-desktop": "producttable-hide-desktop",
    "min-tablet": "producttable-min-tablet",
}

def visibility_class(mode: VisibilityMode) -> Optional[str]:
    return VISIBILITY_CLASSES.get(mode)

def client_features(settings: TableSettings) -> Dict[str, Any]:
    """Toggles the client needs to wire up its controls."""
    features = settings.features
    return {
        "search": features.search,
        "sorting": features.sorting,
        "pagination": features.pagination,
        "export": features.export,
        "priceRange": features.price_range,
        "bulkSelect": features.bulk_select.dump(),
        "cart": settings.cart.dump(),
        "filters": settings.filters.dump(),
    }
