import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog.config import settings
from catalog.database import init_db
from catalog.logging_config import setup_logging
from catalog.routers import index, books, authors, genres, bookinstances
from catalog.utils.errors import CatalogError

# 导入所有 model 使 SQLAlchemy 注册表结构
import catalog.models  # noqa: F401

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期：启动时建表"""
    await init_db()
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} 已启动")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="图书馆目录 API - 书籍、作者、类型与书籍副本管理",
    lifespan=lifespan,
)

# CORS 中间件
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 统一异常处理
@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} 失败: {exc.detail}", exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "code": exc.code})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} 未处理的异常")
    return JSONResponse(status_code=500, content={"detail": "服务器内部错误", "code": "INTERNAL_ERROR"})


# 注册路由
app.include_router(index.router)
app.include_router(books.router)
app.include_router(authors.router)
app.include_router(genres.router)
app.include_router(bookinstances.router)


@app.get("/health", tags=["系统"])
async def health_check():
    """健康检查接口"""
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }
