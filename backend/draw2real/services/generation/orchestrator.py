"""
生成流程编排器
驱动一次生成尝试走完 描述 → 合成 → 持久化 的状态机

begin() 在请求内执行：校验画作、占用会话、扣减积分，拒绝时抛出 GenerationRejected。
run() 在后台执行：任何步骤失败都转换为 Failed 终态，不向外抛出异常（取消时重新抛出 CancelledError）。
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from draw2real.core.ai.exceptions import AIProviderError
from draw2real.core.config import settings
from draw2real.core.log_messages import LogMessages
from draw2real.core.log_utils import get_logger
from draw2real.core.retry import BackoffFunc, exponential_backoff, retry_async
from draw2real.core.storage.exceptions import RemoteImageError
from draw2real.services.credits.ledger_service import CreditLedgerService
from draw2real.services.drawing.capture_service import DrawingCaptureService
from draw2real.services.gallery.gallery_service import GalleryService
from draw2real.services.image.image_store_service import ImageStoreError, ImageStoreService
from .ai_service import GenerationAIService
from .attempt import GenerationAttempt, InFlightGuard
from .exceptions import (
    GenerationCancelledError,
    GenerationInProgressError,
    NoCreditsError,
    NoImageError,
)
from .state import Begin, Described, Persisted, StepFailed, Synthesized

logger = get_logger(__name__)

CANCELLED_MESSAGE = "Generation cancelled"


class GenerationOrchestrator:
    """生成流程编排器"""

    def __init__(
        self,
        ledger: CreditLedgerService,
        drawings: DrawingCaptureService,
        ai_service: GenerationAIService,
        image_store: ImageStoreService,
        gallery: GalleryService,
        guard: Optional[InFlightGuard] = None,
        gallery_max_attempts: Optional[int] = None,
        backoff: Optional[BackoffFunc] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.ledger = ledger
        self.drawings = drawings
        self.ai_service = ai_service
        self.image_store = image_store
        self.gallery = gallery
        self.guard = guard or InFlightGuard()
        self._gallery_max_attempts = gallery_max_attempts or settings.gallery_write_max_attempts
        self._backoff = backoff or exponential_backoff()
        self._sleep = sleep

    async def begin(self, user_id: str, session_id: str) -> GenerationAttempt:
        """
        Idle → Describing

        积分在任何外部调用之前扣减：按尝试计费，失败不退还。

        Raises:
            NoImageError: 会话中没有画作
            GenerationInProgressError: 该会话已有进行中的生成
            NoCreditsError: 积分不足
            CreditLedgerError: 积分账本不可用
        """
        drawing = await self.drawings.get(session_id)
        if drawing is None:
            logger.info(LogMessages.GENERATION_REJECTED, user_id=user_id, reason=NoImageError.reason)
            raise NoImageError()

        if not self.guard.acquire(session_id):
            logger.info(LogMessages.GENERATION_REJECTED, user_id=user_id, reason=GenerationInProgressError.reason)
            raise GenerationInProgressError()

        try:
            charged = await self.ledger.deduct(user_id, 1)
        except BaseException:
            self.guard.release(session_id)
            raise

        if not charged:
            self.guard.release(session_id)
            logger.info(LogMessages.GENERATION_REJECTED, user_id=user_id, reason=NoCreditsError.reason)
            raise NoCreditsError()

        attempt = GenerationAttempt(user_id=user_id, session_id=session_id, drawing=drawing)
        attempt.apply(Begin())
        logger.info(LogMessages.GENERATION_STARTED, attempt_id=attempt.id, user_id=user_id)
        return attempt

    async def run(self, attempt: GenerationAttempt) -> GenerationAttempt:
        """执行流程直到终态，返回同一个attempt"""
        try:
            await self._run_steps(attempt)
        except GenerationCancelledError:
            self._fail(attempt, CANCELLED_MESSAGE)
        except asyncio.CancelledError:
            self._fail(attempt, CANCELLED_MESSAGE)
            raise
        except AIProviderError as e:
            self._fail(attempt, self._ai_failure_message(attempt, e))
        except RemoteImageError as e:
            logger.error(LogMessages.GENERATION_FAILED, exception=e, attempt_id=attempt.id, reason="fetch")
            self._fail(attempt, "Could not download the generated image")
        except ImageStoreError as e:
            logger.error(LogMessages.GENERATION_FAILED, exception=e, attempt_id=attempt.id, reason="store")
            self._fail(attempt, "Could not save the generated image")
        except Exception as e:
            logger.error(LogMessages.GENERATION_FAILED, exception=e, attempt_id=attempt.id, reason="unexpected")
            self._fail(attempt, "Something went wrong while generating your image")
        finally:
            self.guard.release(attempt.session_id)
        return attempt

    def abandon(self, attempt: GenerationAttempt, message: str = CANCELLED_MESSAGE) -> None:
        """将尚未开始执行就被取消的尝试置为失败并释放会话"""
        self._fail(attempt, message)
        self.guard.release(attempt.session_id)

    async def _run_steps(self, attempt: GenerationAttempt) -> None:
        token = attempt.token

        # Describing
        token.raise_if_cancelled()
        description = await self.ai_service.describe(attempt.drawing)
        attempt.apply(Described(description))
        self._log_state(attempt)

        # Synthesizing
        token.raise_if_cancelled()
        synthesis_url = await self.ai_service.synthesize(description)
        attempt.apply(Synthesized(synthesis_url))
        self._log_state(attempt)

        # Persisting
        stamp = int(time.time() * 1000)
        token.raise_if_cancelled()
        original_url = await self.image_store.upload_original(
            attempt.drawing,
            self._object_name(attempt, "original", stamp, attempt.drawing.extension)
        )
        attempt.original_image_url = original_url

        token.raise_if_cancelled()
        generated = await self.image_store.fetch_as_portable(synthesis_url)

        token.raise_if_cancelled()
        generated_url = await self.image_store.upload_generated(
            generated,
            self._object_name(attempt, "generated", stamp, generated.extension)
        )

        await self._record_gallery(attempt, original_url, generated_url, description)

        attempt.apply(Persisted(generated_image_url=generated_url, original_image_url=original_url))
        logger.info(LogMessages.GENERATION_SUCCEEDED, attempt_id=attempt.id, url=generated_url)

    async def _record_gallery(
        self,
        attempt: GenerationAttempt,
        original_url: Optional[str],
        generated_url: str,
        description: str
    ) -> None:
        """写入画廊记录，有限次数重试，最终失败只记录日志"""
        try:
            await retry_async(
                lambda: self.gallery.record(
                    generated_image_url=generated_url,
                    original_image_url=original_url,
                    prompt=description,
                    user_id=attempt.user_id
                ),
                max_attempts=self._gallery_max_attempts,
                backoff=self._backoff,
                operation_name="write_gallery_record",
                sleep=self._sleep
            )
        except Exception as e:
            logger.error(LogMessages.GALLERY_WRITE_FAILED, exception=e, attempt_id=attempt.id)

    def _fail(self, attempt: GenerationAttempt, message: str) -> None:
        if attempt.is_terminal:
            return
        attempt.apply(StepFailed(message))
        if message == CANCELLED_MESSAGE:
            logger.info(LogMessages.GENERATION_CANCELLED, attempt_id=attempt.id)
        else:
            logger.warning(LogMessages.GENERATION_FAILED, attempt_id=attempt.id, reason=message)

    @staticmethod
    def _ai_failure_message(attempt: GenerationAttempt, error: AIProviderError) -> str:
        if attempt.state.tag == "describing":
            return f"Could not describe your drawing: {error.message}"
        return f"Could not create the realistic image: {error.message}"

    @staticmethod
    def _object_name(attempt: GenerationAttempt, kind: str, stamp: int, extension: str) -> str:
        return f"{attempt.user_id}/{kind}-{stamp}-{attempt.id[:8]}.{extension}"

    @staticmethod
    def _log_state(attempt: GenerationAttempt) -> None:
        logger.debug(LogMessages.GENERATION_STATE, attempt_id=attempt.id, state=attempt.state.tag)
