# producttable/dao/table/table_dao.py

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from producttable.dao.base_dao import BaseDao
from producttable.models.table import ProductTable
from producttable.engine.table.definitions import TableStatus

class ProductTableDao(BaseDao[ProductTable]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(ProductTable, db_session)

    async def list_tables(
        self,
        status: Optional[TableStatus] = None,
        search: Optional[str] = None,
        page: int = 0,
        limit: int = 0,
    ) -> list[ProductTable]:
        """Newest first; `search` is a case-insensitive title substring."""
        return await self.get_list(
            where=self._filters(status, search),
            order=[ProductTable.created_at.desc(), ProductTable.id.desc()],
            page=page,
            limit=limit,
        )

    async def count_tables(self, status: Optional[TableStatus] = None, search: Optional[str] = None) -> int:
        return await self.count(where=self._filters(status, search))

    async def bump_revision(self, table_id: int, expected_revision: int, values: dict) -> int:
        """Conditional full replace; returns 0 when the stored revision moved on."""
        return await self.update_where(
            where=[ProductTable.id == table_id, ProductTable.revision == expected_revision],
            values={**values, "revision": expected_revision + 1},
        )

    def _filters(self, status: Optional[TableStatus], search: Optional[str]) -> list:
        conditions = []
        if status is not None:
            conditions.append(ProductTable.status == status)
        if search:
            conditions.append(ProductTable.title.ilike(f"%{search}%"))
        return conditions
