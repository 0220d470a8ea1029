# producttable/services/table/render_service.py

import logging
from typing import Any, Mapping, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from producttable.core.config import settings
from producttable.core.context import AppContext
from producttable.engine.table.catalog import Catalog
from producttable.engine.table.normalizer import normalize
from producttable.engine.table.orchestrator import TableOrchestrator
from producttable.engine.table.output import RenderMode, RenderParams, RenderedOutput
from producttable.services.catalog.sql_catalog import SqlCatalog
from producttable.services.table.table_service import TableService

logger = logging.getLogger(__name__)

def build_orchestrator(db: Optional[AsyncSession] = None, catalog: Optional[Catalog] = None) -> TableOrchestrator:
    """The orchestrator wired to the SQL catalog and the configured rendering limits."""
    return TableOrchestrator(
        catalog=catalog or SqlCatalog(db),
        placeholder_image_url=settings.PLACEHOLDER_IMAGE_URL,
        max_page_limit=settings.MAX_PAGE_LIMIT,
    )

class RenderService:
    """[Service Layer] Embed, refresh and one-shot preview rendering."""
    def __init__(self, context: AppContext, orchestrator: Optional[TableOrchestrator] = None):
        self.context = context
        self.tables = TableService(context)
        self.orchestrator = orchestrator or build_orchestrator(context.db)

    async def embed(self, table_id: int, params: RenderParams) -> RenderedOutput:
        definition = await self.tables.get(table_id)
        output = await self.orchestrator.resolve_and_render(definition, RenderMode.EMBED, params)
        self._log_diagnostics(output)
        return output

    async def refresh(self, table_id: int, params: RenderParams) -> RenderedOutput:
        definition = await self.tables.get(table_id)
        output = await self.orchestrator.resolve_and_render(definition, RenderMode.REFRESH, params)
        self._log_diagnostics(output)
        return output

    async def preview(self, raw_definition: Mapping[str, Any], params: RenderParams) -> RenderedOutput:
        _ = self.context.actor
        definition = normalize(raw_definition)
        return await self.orchestrator.resolve_and_render(definition, RenderMode.PREVIEW, params)

    def _log_diagnostics(self, output: RenderedOutput) -> None:
        if output.diagnostics:
            codes = ", ".join(f"{d.code}x{d.count}" for d in output.diagnostics)
            logger.info(f"Table {output.table_id} rendered ({output.mode.value}) with diagnostics: {codes}")
