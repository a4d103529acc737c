"""
Draw2Real - FastAPI主应用
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from draw2real.core.config import settings
from draw2real.api.v1.router import api_router
from draw2real.core.log_utils import setup_logging, get_logger
from draw2real.core.ai.registry import register_all_providers
from draw2real.core.redis import redis_client
from draw2real.db.database import close_db, init_db
from draw2real.services.container import AppServices

# 初始化日志系统
setup_logging()

# 在导入其他模块之前完成日志设置
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时执行
    logger.info("应用启动中...")

    if settings.db_auto_create:
        await init_db()
        logger.info("数据表检查完成")

    if settings.session_cache_backend == "redis":
        await redis_client.initialize()

    register_all_providers()
    app.state.services = AppServices.build()

    logger.info("应用启动完成")

    yield

    # 关闭时执行
    await app.state.services.close()
    if redis_client.initialized:
        await redis_client.close()
    await close_db()
    logger.info("应用关闭")


# 创建FastAPI应用实例
app = FastAPI(
    title=settings.project_name,
    version=settings.app_version,
    description="把孩子的手绘画作变成写实图片",
    openapi_url=f"{settings.api_v1_str}/openapi.json",
    docs_url=f"{settings.api_v1_str}/docs",
    redoc_url=f"{settings.api_v1_str}/redoc",
    lifespan=lifespan
)

# 添加CORS中间件 - 确保在所有路由之前添加
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册API路由
app.include_router(api_router, prefix=settings.api_v1_str)

# 本地存储适配器的文件由应用直接提供
if settings.storage_adapter == "local":
    storage_dir = Path(settings.absolute_storage_dir)
    storage_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.storage_static_mount, StaticFiles(directory=storage_dir), name="storage")


@app.get("/")
def read_root():
    """根路径"""
    return {
        "message": "Draw2Real API",
        "version": settings.app_version,
        "docs": f"{settings.api_v1_str}/docs"
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
        log_level=settings.log_level.lower()
    )
