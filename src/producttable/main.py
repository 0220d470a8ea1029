# producttable/main.py

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from producttable.core.config import settings
from producttable.db.session import SessionLocal, engine
from producttable.api.router import router
from producttable.engine.table.errors import DefinitionError, CatalogUnavailable
from producttable.services.exceptions import (
    ServiceException, PermissionDeniedError, NotFoundError, RevisionConflictError,
)
from producttable.middleware import AuthenticationMiddleware

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # WebSocket 预览会话按周期打开数据库会话
    app.state.session_factory = SessionLocal
    logger.info(f"Product table service starting ({settings.APP_ENV}).")

    yield

    # --- 清理 ---
    logger.info("Disposing database engine...")
    await engine.dispose()

app = FastAPI(
    title="Product Table Service",
    version=settings.APP_VERSION,
    lifespan=lifespan
)

app.add_middleware(AuthenticationMiddleware)

#设置允许访问的域名
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"])

app.include_router(router)

def _envelope(status_code: int, msg: str, data=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": status_code, "msg": msg, "data": data},
    )

@app.exception_handler(DefinitionError)
async def definition_exception_handler(request: Request, exc: DefinitionError):
    """
    非法的表格定义 (ShapeError / ConfigError)，返回 422 并指明出错字段。
    """
    return _envelope(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        exc.message,
        {"error": type(exc).__name__, "field": exc.field},
    )

@app.exception_handler(CatalogUnavailable)
async def catalog_unavailable_exception_handler(request: Request, exc: CatalogUnavailable):
    logger.error(f"Catalog unavailable while serving {request.url.path}: {exc.message}")
    return _envelope(status.HTTP_503_SERVICE_UNAVAILABLE, "Product catalog is unavailable")

@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return _envelope(status.HTTP_404_NOT_FOUND, exc.message)

@app.exception_handler(RevisionConflictError)
async def revision_conflict_exception_handler(request: Request, exc: RevisionConflictError):
    """
    乐观并发冲突，返回 409 并附带当前版本号。
    """
    return _envelope(status.HTTP_409_CONFLICT, exc.message, {"current_revision": exc.current_revision})

@app.exception_handler(PermissionDeniedError)
async def permission_denied_exception_handler(request: Request, exc: PermissionDeniedError):
    """
    专门处理权限不足的异常，并返回 403 Forbidden。
    """
    return _envelope(status.HTTP_403_FORBIDDEN, exc.message)

@app.exception_handler(ServiceException)
async def service_exception_handler(request: Request, exc: ServiceException):
    # 处理所有来自服务层的、可预期的业务逻辑错误
    logger.warning(f"Service error on {request.url.path}: {exc.message}")
    return _envelope(status.HTTP_400_BAD_REQUEST, exc.message)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # 重写 FastAPI 默认的 HTTPException 处理器，以匹配我们的响应格式
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": exc.status_code, "msg": exc.detail, "data": None},
        headers=exc.headers,
    )

@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # 这个处理器只处理真正未预料到的服务器内部错误
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return _envelope(500, "Internal Server Error")
