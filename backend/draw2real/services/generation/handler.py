"""
生成业务处理器
处理生成请求的异常映射与响应组装
"""

from typing import Any, Dict

from fastapi import HTTPException, status

from draw2real.core.log_utils import get_logger
from draw2real.services.credits.ledger_service import CreditLedgerError
from .attempt import GenerationAttempt
from .exceptions import (
    GenerationInProgressError,
    GenerationRejected,
    NoCreditsError,
    NoImageError,
)
from .task_manager import GenerationTaskManager

logger = get_logger(__name__)

# 拒绝原因 → HTTP状态码
REJECTION_STATUS = {
    NoImageError.reason: status.HTTP_400_BAD_REQUEST,
    NoCreditsError.reason: status.HTTP_402_PAYMENT_REQUIRED,
    GenerationInProgressError.reason: status.HTTP_409_CONFLICT,
}


def attempt_to_dict(attempt: GenerationAttempt) -> Dict[str, Any]:
    """将生成尝试转换为响应数据"""
    return {
        "attempt_id": attempt.id,
        "state": attempt.state.tag,
        "status": attempt.status,
        "is_generating": not attempt.is_terminal,
        "elapsed_seconds": round(attempt.elapsed_seconds, 1),
        "description": attempt.description,
        "original_image_url": attempt.original_image_url,
        "generated_image_url": attempt.generated_image_url,
        "error": attempt.error_detail,
        "created_at": attempt.created_at.isoformat(),
        "finished_at": attempt.finished_at.isoformat() if attempt.finished_at else None,
    }


class GenerationHandler:
    """生成业务处理器"""

    def __init__(self, task_manager: GenerationTaskManager):
        self.task_manager = task_manager

    async def handle_start(self, user_id: str) -> Dict[str, Any]:
        """
        开始生成

        Raises:
            HTTPException: 400 没有画作；402 积分不足；409 已有进行中的生成；500 其他错误
        """
        try:
            attempt = await self.task_manager.start(user_id, session_id=user_id)
            return attempt_to_dict(attempt)

        except GenerationRejected as e:
            raise HTTPException(
                status_code=REJECTION_STATUS.get(e.reason, status.HTTP_400_BAD_REQUEST),
                detail=e.message
            )
        except CreditLedgerError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e)
            )
        except Exception as e:
            logger.error("生成请求处理异常", exception=e, user_id=user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not start the generation"
            )

    async def handle_get_current(self, user_id: str) -> Dict[str, Any]:
        """
        查询当前会话最近一次生成

        Raises:
            HTTPException: 404 没有生成记录
        """
        attempt = self.task_manager.current(user_id)
        if attempt is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No generation has been started yet"
            )
        return attempt_to_dict(attempt)

    async def handle_cancel(self, user_id: str) -> Dict[str, Any]:
        """
        取消进行中的生成

        Raises:
            HTTPException: 404 没有进行中的生成
        """
        cancelled = await self.task_manager.cancel(user_id)
        if not cancelled:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="There is no generation in progress"
            )
        logger.info("用户取消生成: {user_id}", user_id=user_id)
        return attempt_to_dict(self.task_manager.current(user_id))
