# producttable/services/system/system_service.py

import logging
from sqlalchemy.exc import SQLAlchemyError

from producttable.core.config import settings
from producttable.core.context import AppContext
from producttable.dao.catalog.product_dao import CatalogProductDao
from producttable.dao.table.table_dao import ProductTableDao
from producttable.schemas.system.system_schemas import SystemStatusRead

logger = logging.getLogger(__name__)

class SystemService:
    """[Service Layer] Editor dashboard status: catalog availability and counts."""
    def __init__(self, context: AppContext):
        self.context = context
        self.product_dao = CatalogProductDao(context.db)
        self.table_dao = ProductTableDao(context.db)

    async def status(self) -> SystemStatusRead:
        _ = self.context.actor

        catalog_available = True
        product_count = 0
        try:
            product_count = await self.product_dao.count_published()
        except SQLAlchemyError as e:
            # 目录不可用时状态页仍然可用
            logger.warning(f"Catalog product count failed: {e}")
            catalog_available = False
            await self.context.db.rollback()

        return SystemStatusRead(
            catalog_available=catalog_available,
            product_count=product_count,
            table_count=await self.table_dao.count_tables(),
            version=settings.APP_VERSION,
        )
