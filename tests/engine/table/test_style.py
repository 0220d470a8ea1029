# tests/engine/table/test_style.py

from producttable.engine.table import compile_style, normalize
from producttable.engine.table.definitions import TableStyle

def test_default_style_compiles_every_region():
    descriptor = compile_style(normalize({}).style)

    assert descriptor.regions["header"] == {
        "background-color": "#f0f0f1", "color": "#333333", "font-size": "16px", "font-weight": "700",
    }
    assert descriptor.regions["table"] == {"border": "1px solid #e5e5e5", "border-radius": "0px"}
    assert descriptor.regions["cell"]["padding"] == "8px 12px"
    assert descriptor.regions["row-hover"] == {"background-color": "#f5f5f5"}
    # 默认不开启隔行变色
    assert "body-alternate" not in descriptor.regions
    assert descriptor.responsive_mode == "standard"
    assert descriptor.button_icon == "cart"

def test_absent_tokens_are_omitted():
    descriptor = compile_style(TableStyle.model_validate({"header": {"textColor": "#111111"}}))

    assert descriptor.regions == {"header": {"color": "#111111"}}
    assert descriptor.responsive_mode == "standard"
    assert descriptor.button_icon is None

def test_border_none_and_alternate_rows():
    style = TableStyle.model_validate({
        "layout": {"borderStyle": "none", "cellPadding": "compact"},
        "body": {"rowAlternate": True, "altBgColor": "#fafafa"},
        "hover": {"rowHoverEnabled": False, "rowHoverBgColor": "#eeeeee"},
        "responsive": {"mode": "stack"},
    })
    descriptor = compile_style(style)

    assert descriptor.regions["table"] == {"border": "none"}
    assert descriptor.regions["cell"] == {"padding": "4px 8px"}
    assert descriptor.regions["body-alternate"] == {"background-color": "#fafafa"}
    assert "row-hover" not in descriptor.regions
    assert descriptor.responsive_mode == "stack"

def test_compile_is_pure():
    style = normalize({}).style
    assert compile_style(style) == compile_style(style)

def test_css_is_scoped_to_the_wrapper():
    descriptor = compile_style(TableStyle.model_validate({"button": {"bgColor": "#2271b1"}}))
    css = descriptor.to_css("#producttable-7")

    assert css == "#producttable-7 .producttable-button { background-color: #2271b1; }"
