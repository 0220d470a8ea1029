# producttable/services/table/table_service.py

import logging
from typing import Any, Dict, Mapping, Optional

from producttable.core.context import AppContext
from producttable.dao.table.table_dao import ProductTableDao
from producttable.models.table import ProductTable
from producttable.engine.table.definitions import TableDefinition, TableStatus
from producttable.engine.table.normalizer import normalize, migrate_legacy
from producttable.services.exceptions import NotFoundError, RevisionConflictError
from producttable.schemas.table.table_schemas import TableRead, TableSummaryRead, TableListRead

logger = logging.getLogger(__name__)

class TableService:
    """[Service Layer] Persistence of table definitions: get, list, save, delete, defaults."""
    def __init__(self, context: AppContext):
        self.context = context
        self.db = context.db
        self.dao = ProductTableDao(context.db)

    # --- 读取 ---

    async def get(self, table_id: int, include_drafts: Optional[bool] = None) -> TableDefinition:
        """
        Loads and normalizes a stored definition. Drafts are only visible to editors;
        to everyone else they do not exist.
        """
        record = await self._get_record(table_id, include_drafts)
        return self._to_definition(record)

    async def get_read(self, table_id: int) -> TableRead:
        self._ensure_editor()
        record = await self._get_record(table_id, include_drafts=True)
        return self._to_read(record)

    async def list(
        self,
        status: Optional[TableStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> TableListRead:
        self._ensure_editor()
        records = await self.dao.list_tables(status=status, search=search, page=page, limit=limit)
        total = await self.dao.count_tables(status=status, search=search)
        return TableListRead(
            items=[TableSummaryRead.model_validate(record) for record in records],
            total=total,
            page=page,
            limit=limit,
        )

    def defaults(self) -> TableDefinition:
        return normalize({})

    # --- 写入 ---

    async def save(
        self,
        raw_definition: Mapping[str, Any],
        table_id: Optional[int] = None,
        expected_revision: Optional[int] = None,
    ) -> TableRead:
        """
        Full replace. Inserts when `table_id` is None (id and revision 1 assigned here),
        otherwise updates with an optimistic revision check.
        """
        self._ensure_editor()
        # 先规范化: 非法定义在触碰数据库之前就被拒绝
        definition = normalize({k: v for k, v in raw_definition.items() if k != "id"})
        values = self._to_values(definition)

        if table_id is None:
            record = await self.dao.add(ProductTable(**values, revision=1))
            logger.info(f"Created table {record.id} ('{record.title}').")
            return self._to_read(record)

        record = await self._get_record(table_id, include_drafts=True)
        base_revision = expected_revision if expected_revision is not None else record.revision
        if base_revision != record.revision:
            raise RevisionConflictError(
                f"Table {table_id} was modified (revision {record.revision}, expected {base_revision}).",
                current_revision=record.revision,
            )

        # 旧版 blob 在首次保存时被结构化定义取代
        updated = await self.dao.bump_revision(table_id, base_revision, {**values, "legacy_config": None})
        if updated == 0:
            latest = await self._get_record(table_id, include_drafts=True, refresh=True)
            raise RevisionConflictError(
                f"Table {table_id} was modified concurrently.", current_revision=latest.revision
            )

        record = await self._get_record(table_id, include_drafts=True, refresh=True)
        logger.info(f"Saved table {table_id} at revision {record.revision}.")
        return self._to_read(record)

    async def delete(self, table_id: int) -> None:
        self._ensure_editor()
        deleted = await self.dao.delete_where({"id": table_id})
        if not deleted:
            raise NotFoundError(f"Table {table_id} not found.")
        logger.info(f"Deleted table {table_id}.")

    # --- 内部工具 ---

    def _ensure_editor(self) -> None:
        # actor 缺失时抛出 PermissionDeniedError
        _ = self.context.actor

    async def _get_record(
        self, table_id: int, include_drafts: Optional[bool] = None, refresh: bool = False
    ) -> ProductTable:
        if include_drafts is None:
            include_drafts = self.context.is_editor

        record = await self.dao.get_by_pk(table_id)
        if record is not None and refresh:
            # 条件 UPDATE 绕过了 ORM, 重新加载会话中的实例
            await self.db.refresh(record)

        if record is None or (record.status != TableStatus.PUBLISHED and not include_drafts):
            raise NotFoundError(f"Table {table_id} not found.")
        return record

    def _to_definition(self, record: ProductTable) -> TableDefinition:
        if record.is_structured:
            definition = normalize({
                "title": record.title,
                "status": record.status.value,
                "source": record.source,
                "columns": record.columns,
                "settings": record.settings,
                "style": record.style,
            })
        elif record.legacy_config is not None:
            logger.warning(f"Table {record.id} only carries a legacy configuration; migrating on read.")
            definition = migrate_legacy(record.legacy_config, title=record.title)
            definition = definition.model_copy(update={"status": record.status})
        else:
            definition = normalize({"title": record.title, "status": record.status.value})
        return definition.with_id(record.id)

    def _to_values(self, definition: TableDefinition) -> Dict[str, Any]:
        dumped = definition.dump()
        return {
            "title": definition.title,
            "status": definition.status,
            "source": dumped["source"],
            "columns": dumped["columns"],
            "settings": dumped["settings"],
            "style": dumped["style"],
        }

    def _to_read(self, record: ProductTable) -> TableRead:
        return TableRead(
            id=record.id,
            revision=record.revision,
            definition=self._to_definition(record).dump(),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
