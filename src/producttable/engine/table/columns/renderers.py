from typing import List

from ..catalog import CatalogItem
from ..definitions import (
    Column, ColumnType, ImageSettings, NameSettings, ButtonSettings, DateSettings,
    SummarySettings, StockSettings, TaxonomySettings, CustomFieldSettings, CombinedSettings,
)
from ..features import build_cart_action
from .registry import CellContent, RenderContext, register_column, render_cell

STOCK_LABELS = {
    "instock": "In stock",
    "outofstock": "Out of stock",
    "onbackorder": "On backorder",
}

# ============================================================================
# 标量列 (Scalar projections)
# ============================================================================

@register_column(ColumnType.IMAGE.value)
def render_image(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    settings: ImageSettings = ctx.settings_for(column)
    urls = item.image.urls if item.image else {}
    src = urls.get(settings.image_size) or urls.get("full") or ctx.placeholder_image_url
    alt = (item.image.alt if item.image else "") or item.title
    link = item.permalink if settings.link_target == "product" and item.permalink else None
    return CellContent(type="image", text=alt, url=src, data={"link": link, "size": settings.image_size})

@register_column(ColumnType.NAME.value)
def render_name(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    settings: NameSettings = ctx.settings_for(column)
    if settings.link_to_product and item.permalink:
        return CellContent(type="link", text=item.title, url=item.permalink)
    return CellContent(type="text", text=item.title)

@register_column(ColumnType.PRICE.value)
def render_price(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    if item.regular_price is None and item.sale_price is None:
        return CellContent(type="price", data={"regular": None, "sale": None, "active": False})

    if item.on_sale:
        regular = ctx.currency.format(item.regular_price)
        sale = ctx.currency.format(item.sale_price)
        return CellContent(type="price", text=sale, data={"regular": regular, "sale": sale, "active": True})

    base = item.regular_price if item.regular_price is not None else item.sale_price
    regular = ctx.currency.format(base)
    return CellContent(type="price", text=regular, data={"regular": regular, "sale": None, "active": False})

@register_column(ColumnType.SKU.value)
def render_sku(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    return CellContent(type="text", text=item.sku or "")

@register_column(ColumnType.STOCK.value)
def render_stock(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    settings: StockSettings = ctx.settings_for(column)
    label = STOCK_LABELS.get(item.stock_status, "")
    if (
        settings.show_quantity
        and item.stock_status == "instock"
        and item.manage_stock
        and item.stock_quantity is not None
    ):
        label = f"{item.stock_quantity} in stock"
    return CellContent(
        type="stock",
        text=label,
        data={"status": item.stock_status, "quantity": item.stock_quantity if item.manage_stock else None},
    )

@register_column(ColumnType.DATE.value)
def render_date(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    settings: DateSettings = ctx.settings_for(column)
    if item.created_at is None:
        return CellContent(type="text")
    return CellContent(type="text", text=item.created_at.strftime(settings.format),
                       data={"iso": item.created_at.isoformat()})

@register_column(ColumnType.SUMMARY.value)
def render_summary(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    settings: SummarySettings = ctx.settings_for(column)
    text = (item.summary or "").strip()
    if settings.max_words:
        words = text.split()
        if len(words) > settings.max_words:
            text = " ".join(words[:settings.max_words]) + "..."
    return CellContent(type="text", text=text)

@register_column(ColumnType.CUSTOM_FIELD.value)
def render_custom_field(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    settings: CustomFieldSettings = ctx.settings_for(column)
    if not settings.meta_key:
        return CellContent.empty()
    value = item.meta.get(settings.meta_key)
    if value is None:
        return CellContent.empty()
    return CellContent(type="text", text=str(value))

# ============================================================================
# 组合列 (Terms, composites, actions)
# ============================================================================

@register_column(ColumnType.TAXONOMY.value)
def render_taxonomy(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    settings: TaxonomySettings = ctx.settings_for(column)
    terms = item.terms.get(settings.taxonomy, [])
    if not terms:
        return CellContent.empty()

    children: List[CellContent] = []
    for term in terms:
        if settings.link_to_archive and term.link:
            children.append(CellContent(type="link", text=term.name, url=term.link))
        else:
            children.append(CellContent(type="text", text=term.name))
    return CellContent(
        type="list",
        text=settings.separator.join(term.name for term in terms),
        data={"separator": settings.separator, "taxonomy": settings.taxonomy},
        children=children,
    )

@register_column(ColumnType.COMBINED.value)
def render_combined(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    settings: CombinedSettings = ctx.settings_for(column)
    children = []
    for index, element in enumerate(settings.elements):
        # 子元素使用各自类型的默认设置
        sub_column = Column(id=f"{column.id}__{element}_{index}", type=element)
        children.append(render_cell(sub_column, item, ctx))

    joiner = " " if settings.layout == "inline" else "\n"
    text = joiner.join(child.text for child in children if child.text)
    return CellContent(type="composite", text=text, data={"layout": settings.layout}, children=children)

@register_column(ColumnType.BUTTON.value)
def render_button(column: Column, item: CatalogItem, ctx: RenderContext) -> CellContent:
    settings: ButtonSettings = ctx.settings_for(column)
    action = build_cart_action(item, ctx.cart, label=settings.label)
    return CellContent(type="action", text=action.label, url=action.url, data=action.model_dump())
