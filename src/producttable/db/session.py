from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from producttable.core.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    # 获取连接时测试连通性, 并定期回收空闲连接
    pool_pre_ping=True,
    pool_recycle=3600,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
    class_=AsyncSession
)

# 依赖项：为每个API请求提供一个独立的数据库会话
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a transactional scope around a request.
    Commits when the request completes, rolls back on any exception.
    """
    async with SessionLocal() as session:
        async with session.begin():
            yield session
