# tests/engine/table/test_column_renderers.py

from decimal import Decimal
import pytest

from producttable.engine.table import CurrencyFormat, Diagnostics, render_cell
from producttable.engine.table.columns import RenderContext, ColumnRendererRegistry
from producttable.engine.table.definitions import CartConfig, Column, ColumnType
from tests.engine.table.conftest import make_item

@pytest.fixture
def diagnostics() -> Diagnostics:
    return Diagnostics()

@pytest.fixture
def ctx(diagnostics) -> RenderContext:
    return RenderContext(
        currency=CurrencyFormat(),
        cart=CartConfig(),
        diagnostics=diagnostics,
        placeholder_image_url="/static/placeholder.png",
    )

def col(column_type: str, column_id: str = "c1", **settings) -> Column:
    return Column(id=column_id, type=column_type, settings=settings)

def items_by_id(sample_items):
    return {item.id: item for item in sample_items}

# ==============================================================================
# 1. 注册中心 (Registry)
# ==============================================================================

class TestRegistry:

    def test_every_column_type_has_a_renderer(self):
        from producttable.engine.table.columns import default_column_registry
        assert sorted(default_column_registry.types()) == sorted(t.value for t in ColumnType)

    def test_duplicate_registration_is_rejected(self):
        registry = ColumnRendererRegistry()
        registry.register("name")(lambda column, item, ctx: None)
        with pytest.raises(ValueError):
            registry.register("name")(lambda column, item, ctx: None)

    def test_unknown_type_renders_empty_with_single_diagnostic(self, ctx, diagnostics, sample_items):
        """[降级] 未知类型输出空单元格, 诊断按列合并计数。"""
        column = col("rating", column_id="stars")
        cells = [render_cell(column, item, ctx) for item in sample_items]

        assert all(cell.type == "empty" for cell in cells)
        assert len(diagnostics) == 1
        entry = diagnostics.entries[0]
        assert (entry.code, entry.column_id, entry.count) == ("unknown_column_type", "stars", len(sample_items))

    def test_renderer_exception_degrades_to_empty_cell(self, ctx, diagnostics, sample_items):
        column = col("date", format=12345)
        cell = render_cell(column, sample_items[0], ctx)

        assert cell.type == "empty"
        assert diagnostics.codes() == ["cell_render_failed"]

# ==============================================================================
# 2. 标量列 (Scalar columns)
# ==============================================================================

class TestScalarColumns:

    def test_image_uses_requested_size_then_full_then_placeholder(self, ctx, sample_items):
        items = items_by_id(sample_items)

        thumb = render_cell(col("image"), items[1], ctx)
        assert (thumb.type, thumb.url, thumb.text) == ("image", "/m/hoodie-150.jpg", "Grey hoodie")
        assert thumb.data["link"] == "/product/p-1"

        large = render_cell(col("image", imageSize="large"), items[1], ctx)
        assert large.url == "/m/hoodie.jpg"

        missing = render_cell(col("image", linkTarget="none"), items[2], ctx)
        assert missing.url == "/static/placeholder.png"
        assert missing.text == "Zip Hoodie"
        assert missing.data["link"] is None

    def test_name_links_to_product_unless_disabled(self, ctx, sample_items):
        item = sample_items[0]
        assert render_cell(col("name"), item, ctx).url == "/product/p-1"

        plain = render_cell(col("name", linkToProduct=False), item, ctx)
        assert (plain.type, plain.text) == ("text", "Hoodie")

    def test_price_on_sale_and_regular(self, ctx, sample_items):
        items = items_by_id(sample_items)

        sale = render_cell(col("price"), items[1], ctx)
        assert sale.text == "$39.00"
        assert sale.data == {"regular": "$45.00", "sale": "$39.00", "active": True}

        regular = render_cell(col("price"), items[2], ctx)
        assert regular.data == {"regular": "$55.00", "sale": None, "active": False}

        none = render_cell(col("price"), items[5], ctx)
        assert none.text == ""
        assert none.data["active"] is False

    def test_price_respects_currency_format(self, diagnostics):
        euro = RenderContext(
            currency=CurrencyFormat(symbol="€", position="right_space", thousand_separator=".", decimal_separator=","),
            cart=CartConfig(),
            diagnostics=diagnostics,
        )
        cell = render_cell(col("price"), make_item(7, regular_price=Decimal("1234.5")), euro)
        assert cell.text == "1.234,50 €"

    def test_stock_quantity_only_when_managed(self, ctx, sample_items):
        items = items_by_id(sample_items)

        assert render_cell(col("stock"), items[1], ctx).text == "12 in stock"
        assert render_cell(col("stock", showQuantity=False), items[1], ctx).text == "In stock"
        out = render_cell(col("stock"), items[2], ctx)
        assert (out.text, out.data["status"]) == ("Out of stock", "outofstock")

    def test_date_summary_sku_and_custom_field(self, ctx, sample_items):
        item = sample_items[0]

        date = render_cell(col("date", format="%d/%m/%Y"), item, ctx)
        assert date.text == "01/01/2026"
        assert date.data["iso"].startswith("2026-01-01")

        summary = render_cell(col("summary", maxWords=3), item, ctx)
        assert summary.text == "A warm brushed-cotton..."

        assert render_cell(col("sku"), item, ctx).text == "HD-001"
        assert render_cell(col("custom-field", metaKey="material"), item, ctx).text == "Cotton"
        assert render_cell(col("custom-field", metaKey="weight"), item, ctx).type == "empty"

# ==============================================================================
# 3. 组合列 (Composite columns)
# ==============================================================================

class TestCompositeColumns:

    def test_taxonomy_lists_terms(self, ctx, sample_items):
        cell = render_cell(col("taxonomy", taxonomy="product_tag", linkToArchive=True), sample_items[0], ctx)

        assert cell.type == "list"
        assert cell.text == "Featured"
        assert cell.children[0].url == "/product_tag/featured"

    def test_taxonomy_without_terms_is_empty(self, ctx, sample_items):
        assert render_cell(col("taxonomy"), sample_items[4], ctx).type == "empty"

    def test_combined_renders_each_element(self, ctx, sample_items):
        cell = render_cell(col("combined", elements=["name", "sku"], layout="stacked"), sample_items[0], ctx)

        assert cell.type == "composite"
        assert [child.text for child in cell.children] == ["Hoodie", "HD-001"]
        assert cell.text == "Hoodie\nHD-001"

    def test_button_describes_cart_action(self, ctx, sample_items):
        items = items_by_id(sample_items)

        simple = render_cell(col("button", label="Buy"), items[1], ctx)
        assert simple.type == "action"
        assert simple.text == "Buy"
        assert simple.data["eligible"] is True

        out_of_stock = render_cell(col("button"), items[2], ctx)
        assert out_of_stock.data["reason"] == "out_of_stock"

        variable = render_cell(col("button"), items[3], ctx)
        assert variable.data["requires_options"] is True
        assert (variable.text, variable.url) == ("Select options", "/product/p-3")
