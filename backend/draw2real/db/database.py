"""
数据库配置模块
SQLAlchemy异步引擎、会话工厂与建表
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from draw2real.core.config import settings

# 服务在每次操作时自行打开会话，连接不跨请求复用
engine = create_async_engine(
    settings.async_database_url,
    echo=settings.db_echo,
    poolclass=NullPool
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

Base = declarative_base()


async def init_db(bind: AsyncEngine = engine) -> None:
    """按模型定义创建缺失的数据表（积分、推荐、画廊）"""
    # 导入模型以注册到Base.metadata
    from draw2real.models import credit, gallery, referral  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
