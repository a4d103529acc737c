"""
服务装配
应用启动时创建一次，保存在 app.state.services 中供各端点使用
"""

from dataclasses import dataclass
from typing import Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from draw2real.core.config import settings
from draw2real.core.log_utils import get_logger
from draw2real.core.storage import get_storage_service
from draw2real.core.storage.abc import BaseStorage
from draw2real.db.database import AsyncSessionLocal
from draw2real.services.credits import CreditLedgerService, ReferralService
from draw2real.services.drawing import DrawingCaptureService, SessionCache, create_session_cache
from draw2real.services.gallery import GalleryService
from draw2real.services.generation import (
    GenerationAIService,
    GenerationOrchestrator,
    GenerationTaskManager,
)
from draw2real.services.image import ImageStoreService
from draw2real.services.payments import CheckoutService

logger = get_logger(__name__)


@dataclass
class AppServices:
    """应用级服务集合"""
    ledger: CreditLedgerService
    referrals: ReferralService
    drawings: DrawingCaptureService
    image_store: ImageStoreService
    gallery: GalleryService
    ai_service: GenerationAIService
    orchestrator: GenerationOrchestrator
    task_manager: GenerationTaskManager
    checkout: CheckoutService
    http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def build(
        cls,
        session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
        cache: Optional[SessionCache] = None,
        storage: Optional[BaseStorage] = None,
        ai_service: Optional[GenerationAIService] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ) -> "AppServices":
        """
        按配置装配所有服务，参数用于在测试中替换外部依赖

        Raises:
            ConfigurationError: 存储适配器配置不完整
        """
        if http_client is None:
            http_client = httpx.AsyncClient(
                timeout=settings.remote_fetch_timeout,
                follow_redirects=True
            )

        ledger = CreditLedgerService(session_factory)
        referrals = ReferralService(session_factory, ledger)
        drawings = DrawingCaptureService(cache or create_session_cache())
        image_store = ImageStoreService(storage or get_storage_service(), http_client=http_client)
        gallery = GalleryService(session_factory)
        ai_service = ai_service or GenerationAIService.from_settings()
        orchestrator = GenerationOrchestrator(
            ledger=ledger,
            drawings=drawings,
            ai_service=ai_service,
            image_store=image_store,
            gallery=gallery
        )

        logger.info(
            "服务装配完成: storage={storage}, session_cache={cache}",
            storage=image_store.storage.ADAPTER_NAME,
            cache=type(cache).__name__ if cache else settings.session_cache_backend
        )
        return cls(
            ledger=ledger,
            referrals=referrals,
            drawings=drawings,
            image_store=image_store,
            gallery=gallery,
            ai_service=ai_service,
            orchestrator=orchestrator,
            task_manager=GenerationTaskManager(orchestrator),
            checkout=CheckoutService(ledger, referrals),
            http_client=http_client
        )

    async def close(self) -> None:
        """取消进行中的生成并释放外部连接"""
        await self.task_manager.shutdown()
        await self.ai_service.close()
        if self.http_client is not None:
            await self.http_client.aclose()
