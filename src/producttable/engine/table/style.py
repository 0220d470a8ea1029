from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from .definitions import TableStyle

BORDER_WIDTH = "1px"

CELL_PADDING = {
    "compact": "4px 8px",
    "normal": "8px 12px",
    "spacious": "12px 16px",
}

FONT_WEIGHT = {
    "normal": "400",
    "bold": "700",
    "extrabold": "800",
}

# region -> selector template (`{scope}` is the wrapper selector)
REGION_SELECTORS: Dict[str, str] = {
    "table": "{scope} table.producttable",
    "header": "{scope} table.producttable thead th",
    "body": "{scope} table.producttable tbody tr",
    "body-alternate": "{scope} table.producttable tbody tr:nth-child(even)",
    "cell": "{scope} table.producttable td, {scope} table.producttable th",
    "button": "{scope} .producttable-button",
    "button-hover": "{scope} .producttable-button:hover",
    "row-hover": "{scope} table.producttable tbody tr:hover",
}

class PresentationDescriptor(BaseModel):
    regions: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    responsive_mode: str = "standard"
    button_icon: Optional[str] = None

    def to_css(self, scope: str = ".producttable-wrapper") -> str:
        blocks: List[str] = []
        for region, selector in REGION_SELECTORS.items():
            declarations = self.regions.get(region)
            if not declarations:
                continue
            body = " ".join(f"{prop}: {value};" for prop, value in declarations.items())
            blocks.append(f"{selector.format(scope=scope)} {{ {body} }}")
        return "\n".join(blocks)

def _declarations(**props: Optional[str]) -> Dict[str, str]:
    # 缺失 token 直接省略, 不输出占位值
    return {name.replace("_", "-"): value for name, value in props.items() if value is not None}

def compile_style(style: TableStyle) -> PresentationDescriptor:
    """Pure mapping of style tokens to CSS declarations grouped by region."""
    layout = style.layout
    border = None
    if layout.border_style == "none":
        border = "none"
    elif layout.border_style is not None:
        border = f"{BORDER_WIDTH} {layout.border_style}"
        if layout.border_color:
            border = f"{border} {layout.border_color}"

    regions: Dict[str, Dict[str, str]] = {
        "table": _declarations(border=border, border_radius=layout.border_radius),
        "header": _declarations(
            background_color=style.header.bg_color,
            color=style.header.text_color,
            font_size=style.header.font_size,
            font_weight=FONT_WEIGHT.get(style.typography.header_font_weight),
        ),
        "body": _declarations(background_color=style.body.bg_color, color=style.body.text_color),
        "cell": _declarations(
            padding=CELL_PADDING.get(layout.cell_padding),
            border_color=style.body.border_color,
        ),
        "button": _declarations(
            background_color=style.button.bg_color,
            color=style.button.text_color,
            border_radius=style.button.border_radius,
        ),
        "button-hover": _declarations(
            background_color=style.button.hover_bg_color,
            color=style.button.hover_text_color,
        ),
    }

    if style.body.row_alternate:
        regions["body-alternate"] = _declarations(
            background_color=style.body.alt_bg_color,
            color=style.body.alt_text_color,
        )
    if style.hover.row_hover_enabled:
        regions["row-hover"] = _declarations(background_color=style.hover.row_hover_bg_color)

    return PresentationDescriptor(
        regions={name: decls for name, decls in regions.items() if decls},
        responsive_mode=style.responsive.mode or "standard",
        button_icon=style.button.icon,
    )
