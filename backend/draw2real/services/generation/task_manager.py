"""
生成任务管理器
在后台执行生成尝试，供前端轮询状态与取消
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from draw2real.core.config import settings
from draw2real.core.log_utils import get_logger
from .attempt import GenerationAttempt
from .orchestrator import GenerationOrchestrator

logger = get_logger(__name__)


class GenerationTaskManager:
    """
    生成任务管理器

    职责：
    1. start() 在请求内完成 begin()，随后以asyncio任务在后台执行 run()
    2. 保存每个会话最近一次的生成尝试，供轮询；已结束的尝试超过保留时间后移除
    3. 取消单个会话的任务，或在应用关闭时取消全部任务
    """

    def __init__(self, orchestrator: GenerationOrchestrator, retention_seconds: Optional[int] = None):
        self.orchestrator = orchestrator
        if retention_seconds is None:
            retention_seconds = settings.generation_attempt_retention
        self._retention = timedelta(seconds=retention_seconds)
        self._attempts: Dict[str, GenerationAttempt] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    async def start(self, user_id: str, session_id: str) -> GenerationAttempt:
        """
        开始一次生成

        Raises:
            GenerationRejected: 画作缺失、已有进行中的生成或积分不足
        """
        self._prune()
        attempt = await self.orchestrator.begin(user_id, session_id)
        self._attempts[session_id] = attempt

        task = asyncio.create_task(
            self.orchestrator.run(attempt),
            name=f"generation-{attempt.id}"
        )
        self._tasks[session_id] = task
        task.add_done_callback(lambda finished: self._on_task_done(attempt, finished))
        return attempt

    def _on_task_done(self, attempt: GenerationAttempt, task: asyncio.Task) -> None:
        if self._tasks.get(attempt.session_id) is task:
            del self._tasks[attempt.session_id]
        # 任务在开始执行前就被取消时，run() 没有机会写入终态
        if not attempt.is_terminal:
            self.orchestrator.abandon(attempt)

    def current(self, session_id: str) -> Optional[GenerationAttempt]:
        """会话最近一次的生成尝试"""
        self._prune()
        return self._attempts.get(session_id)

    async def wait(self, session_id: str) -> Optional[GenerationAttempt]:
        """等待会话当前的任务结束"""
        attempt = self._attempts.get(session_id)
        task = self._tasks.get(session_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        return attempt

    def _prune(self) -> None:
        """移除超过保留时间的已结束尝试"""
        cutoff = datetime.now(timezone.utc) - self._retention
        expired = [
            session_id for session_id, attempt in self._attempts.items()
            if attempt.is_terminal
            and session_id not in self._tasks
            and attempt.finished_at is not None
            and attempt.finished_at <= cutoff
        ]
        for session_id in expired:
            del self._attempts[session_id]

    async def cancel(self, session_id: str) -> bool:
        """
        取消会话进行中的生成

        Returns:
            bool: 存在进行中的生成并已取消时返回True
        """
        attempt = self._attempts.get(session_id)
        if attempt is None or attempt.is_terminal:
            return False

        attempt.token.cancel()
        task = self._tasks.get(session_id)
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        if not attempt.is_terminal:
            self.orchestrator.abandon(attempt)
        return True

    async def shutdown(self) -> None:
        """取消所有进行中的任务（应用关闭时调用）"""
        tasks = list(self._tasks.values())
        for attempt in self._attempts.values():
            if not attempt.is_terminal:
                attempt.token.cancel()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("已取消{count}个进行中的生成任务", count=len(tasks))
