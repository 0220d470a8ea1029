# tests/conftest.py

from typing import AsyncGenerator, Callable, Dict
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine, async_sessionmaker
from sqlalchemy.pool import NullPool

from scripts.seed_initial_data import seed_all_data
from producttable.main import app
from producttable.core.config import settings
from producttable.core.context import AppContext
from producttable.core.security import create_access_token, get_api_key_hash
from producttable.api.dependencies.authentication import OperatorContext
from producttable.db.base import Base
from producttable.db.session import get_db
import producttable.models  # noqa: F401

EDITOR_API_KEY = "pt-editor-test-key"

# ==============================================================================
# 1. 数据库和 Seeding Fixtures
# ==============================================================================

@pytest.fixture(scope="function")
async def sqlite_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    每个测试一个全新的 SQLite 文件数据库。
    使用 NullPool 确保每个会话拿到独立连接 (预览 WebSocket 会自行打开会话)。
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'producttable.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # [关键] 调用与生产相同的 seeding 脚本, 并提交
    seed_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with seed_session() as db:
        async with db.begin():
            await seed_all_data(db)

    yield engine
    await engine.dispose()

@pytest.fixture(scope="function")
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=sqlite_engine, class_=AsyncSession
    )

@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        try:
            yield session
        finally:
            # 测试结束后回滚, 已提交的种子数据随数据库文件一起丢弃
            await session.rollback()
            await session.close()

# ==============================================================================
# 2. 上下文 Fixtures (Service-level)
# ==============================================================================

@pytest.fixture
def editor_context(db_session: AsyncSession) -> AppContext:
    return AppContext(db=db_session, operator=OperatorContext(operator_id="editor-1", method="token"))

@pytest.fixture
def public_context(db_session: AsyncSession) -> AppContext:
    return AppContext(db=db_session, operator=None)

# ==============================================================================
# 3. API Client Fixtures
# ==============================================================================

@pytest.fixture(scope="function")
async def client(db_session: AsyncSession, session_factory, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    """
    只覆盖最底层的依赖项 (get_db)，让 FastAPI 的 DI 系统构建所有上层依赖。
    """
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.state.session_factory = session_factory
    monkeypatch.setattr(settings, "EDITOR_API_KEY_HASH", get_api_key_hash(EDITOR_API_KEY))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
    if hasattr(app.state, "session_factory"):
        del app.state.session_factory

@pytest.fixture
def auth_headers_factory() -> Callable[..., Dict[str, str]]:
    def _factory(operator_id: str = "editor-1") -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(subject=operator_id)}"}
    return _factory

@pytest.fixture
def auth_headers(auth_headers_factory) -> Dict[str, str]:
    return auth_headers_factory()

@pytest.fixture
def api_key_headers() -> Dict[str, str]:
    return {"Api-Key": EDITOR_API_KEY}
