# producttable/models/table.py

from sqlalchemy import Column, Integer, String, JSON, DateTime, Enum as PgEnum, func, Index
from producttable.db.base import Base
from producttable.engine.table.definitions import TableStatus

class ProductTable(Base):
    __tablename__ = 'product_tables'

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False, default="Untitled Table")
    status = Column(PgEnum(TableStatus), nullable=False, default=TableStatus.DRAFT, index=True)

    # 规范化后的 camelCase 定义, 原样存储
    source = Column(JSON, nullable=True)
    columns = Column(JSON, nullable=True)
    settings = Column(JSON, nullable=True)
    style = Column(JSON, nullable=True)

    # 旧版不透明配置; 读取时迁移为结构化定义
    legacy_config = Column(JSON, nullable=True, comment="Opaque pre-structured configuration blob")

    revision = Column(Integer, nullable=False, default=1, comment="Optimistic concurrency counter")
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('ix_product_tables_created_at', 'created_at'),
    )

    @property
    def is_structured(self) -> bool:
        return any(block is not None for block in (self.source, self.columns, self.settings, self.style))
