"""
测试配置和fixtures
为所有测试提供共享的配置和fixtures

环境变量必须在导入 draw2real 之前设置，全局配置在导入时读取。
"""

import os
import tempfile

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DB_AUTO_CREATE", "false")
os.environ.setdefault("APP_DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "ERROR")
os.environ.setdefault("SECRET_KEY", "unit-test-secret")
os.environ.setdefault("STORAGE_ADAPTER", "local")
os.environ.setdefault("LOCAL_STORAGE_DIR", tempfile.mkdtemp(prefix="draw2real-storage-"))
os.environ.setdefault("SESSION_CACHE_BACKEND", "memory")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("STRIPE_SECRET_KEY", "")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from draw2real.core.storage.adapters.local import LocalStorageAdapter
from draw2real.db.database import init_db
from draw2real.services.credits.ledger_service import CreditLedgerService
from draw2real.services.credits.referral_service import ReferralService
from draw2real.services.drawing.capture_service import DrawingCaptureService
from draw2real.services.drawing.session_cache import InMemoryTTLCache
from draw2real.services.gallery.gallery_service import GalleryService
from draw2real.services.image.image_store_service import ImageStoreService
from tests.utils.mock_utils import image_http_client, no_backoff, no_sleep


@pytest_asyncio.fixture
async def db_engine():
    """每个测试使用独立的SQLite内存数据库"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def ledger(session_factory):
    return CreditLedgerService(session_factory, max_attempts=2)


@pytest.fixture
def referrals(session_factory, ledger):
    return ReferralService(session_factory, ledger, bonus_credits=5)


@pytest.fixture
def gallery(session_factory):
    return GalleryService(session_factory)


@pytest.fixture
def drawings():
    return DrawingCaptureService(InMemoryTTLCache(ttl=60))


@pytest.fixture
def local_storage(tmp_path):
    return LocalStorageAdapter(root_dir=str(tmp_path / "storage"), base_url="http://testserver/static")


@pytest_asyncio.fixture
async def http_client():
    client = image_http_client()
    yield client
    await client.aclose()


@pytest.fixture
def image_store(local_storage, http_client):
    return ImageStoreService(
        local_storage,
        http_client=http_client,
        backoff=no_backoff,
        sleep=no_sleep,
    )


# 测试标记配置
def pytest_configure(config):
    """配置pytest标记"""
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "interface: 接口测试（TestClient，无需启动服务）")
    config.addinivalue_line("markers", "logging: 日志相关测试")
    config.addinivalue_line("markers", "credits: 积分账本与推荐测试")
    config.addinivalue_line("markers", "drawing: 画作捕获测试")
    config.addinivalue_line("markers", "storage: 图片存储测试")
    config.addinivalue_line("markers", "generation: 生成流程测试")
    config.addinivalue_line("markers", "payments: 积分购买测试")
