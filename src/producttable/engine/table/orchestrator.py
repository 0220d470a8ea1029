import logging
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict

from .catalog import Catalog, CatalogItem
from .columns import RenderContext, render_cell
from .definitions import Column, TableDefinition
from .errors import CatalogUnavailable, Diagnostics
from .features import (
    PageInfo, RowDecoration, apply_search, apply_price_range, apply_sort_override,
    paginate, decorate_rows, visibility_class, client_features,
)
from .html import HtmlRenderer
from .output import Cell, HeaderColumn, RenderMode, RenderParams, RenderedOutput, Row
from .source_resolver import SourceResolver
from .style import compile_style

logger = logging.getLogger(__name__)

class ResolvedTable(BaseModel):
    """Intermediate result of the resolve phase: the page of items and their decorations."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    definition: TableDefinition
    items: List[CatalogItem]
    decorations: List[RowDecoration]
    pagination: PageInfo
    diagnostics: Diagnostics

def _css_width(column: Column) -> Optional[str]:
    width = column.advanced.width
    if width.unit == "auto" or width.value <= 0:
        return None
    return f"{width.value:g}{width.unit}"

class TableOrchestrator:
    """
    [核心] Definition -> resolved items -> feature pipeline -> cells/header/style.
    Stateless per call; every call gets its own Diagnostics.
    """
    def __init__(
        self,
        catalog: Catalog,
        placeholder_image_url: str = "",
        max_page_limit: Optional[int] = None,
        html_renderer: Optional[HtmlRenderer] = None,
    ):
        self.catalog = catalog
        self.placeholder_image_url = placeholder_image_url
        self.max_page_limit = max_page_limit
        self.html_renderer = html_renderer or HtmlRenderer()

    # --- Phase 1: resolve ---

    async def resolve(
        self,
        definition: TableDefinition,
        params: RenderParams,
        diagnostics: Optional[Diagnostics] = None,
    ) -> ResolvedTable:
        diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        features = definition.settings.features

        resolved = await SourceResolver(self.catalog).resolve(definition.source, diagnostics)
        items = await self._project(resolved.items, diagnostics)

        items = apply_search(items, params.search_term, features.search, diagnostics)
        items = apply_price_range(items, params.price_min, params.price_max, features.price_range, diagnostics)
        items = apply_sort_override(items, params.sort_override, features.sorting, diagnostics)
        page_items, page_info = paginate(
            items, params.page, definition.settings.pagination, features.pagination, self.max_page_limit
        )

        return ResolvedTable(
            definition=definition,
            items=page_items,
            decorations=decorate_rows(page_items, definition.settings),
            pagination=page_info,
            diagnostics=diagnostics,
        )

    async def _project(self, ids: List[int], diagnostics: Diagnostics) -> List[CatalogItem]:
        if not ids:
            return []
        try:
            fetched = await self.catalog.get_items(ids)
        except Exception as e:
            logger.error(f"Catalog item lookup failed: {e}", exc_info=True)
            raise CatalogUnavailable(f"Catalog item lookup failed: {e}") from e

        by_id = {item.id: item for item in fetched}
        items = [by_id[item_id] for item_id in ids if item_id in by_id]
        if len(items) < len(ids):
            diagnostics.resolution(
                "items_not_found",
                f"{len(ids) - len(items)} resolved products could not be loaded and were skipped.",
            )
        return items

    # --- Phase 2: render ---

    def render(self, resolved: ResolvedTable, mode: Union[RenderMode, str]) -> RenderedOutput:
        mode = RenderMode(mode)
        definition = resolved.definition
        diagnostics = resolved.diagnostics
        columns = definition.ordered_columns()

        ctx = RenderContext(
            currency=self.catalog.currency,
            cart=definition.settings.cart,
            diagnostics=diagnostics,
            placeholder_image_url=self.placeholder_image_url,
        )

        rows = []
        for item, decoration in zip(resolved.items, resolved.decorations):
            cells = [Cell(column_id=column.id, content=render_cell(column, item, ctx)) for column in columns]
            rows.append(Row(item_id=item.id, cells=cells, selectable=decoration.selectable, cart=decoration.cart))

        output = RenderedOutput(
            mode=mode,
            table_id=definition.id,
            rows=rows,
            pagination=resolved.pagination,
            features=client_features(definition.settings),
        )

        if mode != RenderMode.REFRESH:
            output.columns = [
                HeaderColumn(
                    id=column.id,
                    type=column.type,
                    heading=column.heading,
                    show_heading=column.advanced.show_heading,
                    width=_css_width(column),
                    visibility_class=visibility_class(column.advanced.visibility),
                )
                for column in columns
            ]
            output.presentation = compile_style(definition.style)
            output.html = self.html_renderer.render(output)

        output.diagnostics = diagnostics.entries
        return output

    async def resolve_and_render(
        self,
        definition: TableDefinition,
        mode: Union[RenderMode, str],
        params: Optional[RenderParams] = None,
    ) -> RenderedOutput:
        resolved = await self.resolve(definition, params or RenderParams())
        return self.render(resolved, mode)
