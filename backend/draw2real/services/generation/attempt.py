"""
生成任务数据结构
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Set

from draw2real.core.storage.models import ImagePayload
from draw2real.utils.id_utils import generate_uuid
from .exceptions import GenerationCancelledError
from .state import (
    Described,
    Failed,
    GenerationEvent,
    GenerationState,
    Idle,
    Succeeded,
    is_terminal,
    transition,
)


class CancellationToken:
    """协作式取消标记，在每次外部调用前检查"""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise GenerationCancelledError("Generation cancelled")


class InFlightGuard:
    """按会话记录进行中的生成任务，同一会话同时只允许一个"""

    def __init__(self) -> None:
        self._sessions: Set[str] = set()

    def acquire(self, session_id: str) -> bool:
        if session_id in self._sessions:
            return False
        self._sessions.add(session_id)
        return True

    def release(self, session_id: str) -> None:
        self._sessions.discard(session_id)

    def is_active(self, session_id: str) -> bool:
        return session_id in self._sessions


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class GenerationAttempt:
    """
    一次生成尝试

    只由编排器通过 apply() 修改；进入终态后不再变化，也不会自动重试。
    进入终态时释放画作数据，已结束的尝试只保留状态信息。
    """
    user_id: str
    session_id: str
    drawing: Optional[ImagePayload] = field(repr=False)
    id: str = field(default_factory=generate_uuid)
    state: GenerationState = field(default_factory=Idle)
    description: Optional[str] = None
    original_image_url: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None
    token: CancellationToken = field(default_factory=CancellationToken, repr=False)
    done: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    def apply(self, event: GenerationEvent) -> GenerationState:
        self.state = transition(self.state, event)
        if isinstance(event, Described):
            self.description = event.description
        if is_terminal(self.state):
            self.finished_at = _utcnow()
            self.drawing = None
            self.done.set()
        return self.state

    @property
    def status(self) -> str:
        if isinstance(self.state, Succeeded):
            return "succeeded"
        if isinstance(self.state, Failed):
            return "failed"
        return "pending"

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.state)

    @property
    def generated_image_url(self) -> Optional[str]:
        if isinstance(self.state, Succeeded):
            return self.state.generated_image_url
        return None

    @property
    def error_detail(self) -> Optional[str]:
        if isinstance(self.state, Failed):
            return self.state.error
        return None

    @property
    def elapsed_seconds(self) -> float:
        end = self.finished_at or _utcnow()
        return (end - self.created_at).total_seconds()
