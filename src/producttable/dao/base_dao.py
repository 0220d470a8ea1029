from typing import Type, TypeVar, Generic, Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import inspect, and_, func, select, update, delete
from sqlalchemy.orm import selectinload
from sqlalchemy.sql.selectable import Select
from producttable.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)

class BaseDao(Generic[ModelType]):
    def __init__(self, model_class: Type[ModelType], db_session: AsyncSession):
        self.model: Type[ModelType] = model_class
        self.db_session: AsyncSession = db_session
        primary_keys = inspect(model_class).primary_key
        if not primary_keys:
            raise ValueError(f"Model {model_class.__name__} does not have a primary key.")
        self.pk: str = primary_keys[0].name

    # ==============================================================================
    # 1. 实体/对象方法 (Object Methods)
    #    - 输入和输出都应该是 ORM 对象实例
    # ==============================================================================

    async def get_list(
        self,
        where: Optional[dict | list] = None,
        withs: Optional[list] = None,
        order: Optional[list] = None,
        page: int = 0,
        limit: int = 0,
    ) -> list[ModelType]:
        stmt = self._quick_query(
            where=where, withs=withs, order=order, page=page, limit=limit
        )
        executed = await self.db_session.execute(stmt)
        return list(executed.scalars().all())

    async def get_one(
        self,
        where: Optional[dict | list] = None,
        withs: Optional[list] = None,
        order: Optional[list] = None
    ) -> Optional[ModelType]:
        stmt = self._quick_query(where=where, withs=withs, order=order)
        executed = await self.db_session.execute(stmt)
        return executed.scalars().first()

    async def get_by_pk(self, pk_value: Any, withs: Optional[list] = None) -> Optional[ModelType]:
        return await self.get_one(where={self.pk: pk_value}, withs=withs)

    async def count(self, where: Optional[dict | list] = None) -> int:
        subquery_stmt = self._quick_query(where=where).subquery()
        count_stmt = select(func.count()).select_from(subquery_stmt)
        executed = await self.db_session.execute(count_stmt)
        return executed.scalar() or 0

    async def add(self, instance: ModelType) -> ModelType:
        self.db_session.add(instance)
        await self.db_session.flush()
        await self.db_session.refresh(instance)
        return instance

    # ==============================================================================
    # 2. 数据/批量方法 (Data/Bulk Methods)
    # ==============================================================================

    async def update_where(self, where: dict | list, values: dict) -> int:
        if not where or not values:
            return 0
        conditions = self._where_format(where)
        stmt = update(self.model).where(*conditions).values(values)
        executed = await self.db_session.execute(stmt)
        return executed.rowcount

    async def delete_where(self, where: dict | list) -> int:
        if not where:
            return 0
        conditions = self._where_format(where)
        stmt = delete(self.model).where(*conditions)
        executed = await self.db_session.execute(stmt)
        return executed.rowcount

    # ==============================================================================
    # 3. 查询构建辅助方法 (Query Building Helpers)
    # ==============================================================================

    def _quick_query(
        self,
        stmt: Optional[Select] = None,
        where: Optional[dict | list] = None,
        withs: Optional[list] = None,
        order: Optional[list] = None,
        page: int = 0,
        limit: int = 0,
    ) -> Select:
        """
        一个线性的、清晰的查询构建方法。
        """
        if stmt is None:
            stmt = select(self.model)

        if where is not None:
            stmt = stmt.filter(*self._where_format(where))

        if withs:
            stmt = stmt.options(*[selectinload(getattr(self.model, name)) for name in withs])

        if order is not None:
            stmt = stmt.order_by(*order)

        if page > 0 and limit > 0:
            stmt = self._paginate(stmt=stmt, page=page, limit=limit)

        return stmt

    def _where_format(self, conditions: list | dict) -> list:
        if not conditions:
            return []

        processed_conditions = []
        if isinstance(conditions, list):
            processed_conditions = list(conditions)
        elif isinstance(conditions, dict):
            processed_conditions = [getattr(self.model, field) == value for field, value in conditions.items()]
        if len(processed_conditions) > 1:
            processed_conditions = [and_(*processed_conditions)]
        return processed_conditions

    def _paginate(self, stmt: Select, page: int = 0, limit: int = 0) -> Select:
        page = int(page)
        limit = int(limit)
        if page > 0 and limit > 0:
            stmt = stmt.limit(limit).offset((page - 1) * limit)
        return stmt
