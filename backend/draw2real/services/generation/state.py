"""
生成流程状态机

状态: Idle → Describing → Synthesizing → Persisting → Succeeded
      Describing / Synthesizing / Persisting 均可进入 Failed
Succeeded 与 Failed 为终态，没有任何出边。
所有状态变更只通过 transition() 完成。
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from .exceptions import InvalidTransitionError


# ==================== 状态 ====================

@dataclass(frozen=True)
class Idle:
    tag: ClassVar[str] = "idle"


@dataclass(frozen=True)
class Describing:
    tag: ClassVar[str] = "describing"


@dataclass(frozen=True)
class Synthesizing:
    tag: ClassVar[str] = "synthesizing"
    description: str


@dataclass(frozen=True)
class Persisting:
    tag: ClassVar[str] = "persisting"
    description: str
    synthesis_url: str


@dataclass(frozen=True)
class Succeeded:
    tag: ClassVar[str] = "succeeded"
    description: str
    generated_image_url: str
    original_image_url: Optional[str] = None


@dataclass(frozen=True)
class Failed:
    tag: ClassVar[str] = "failed"
    error: str
    failed_during: str


GenerationState = Union[Idle, Describing, Synthesizing, Persisting, Succeeded, Failed]

TERMINAL_STATES = (Succeeded, Failed)


# ==================== 事件 ====================

@dataclass(frozen=True)
class Begin:
    """用户触发生成，且画作与积分检查均已通过"""


@dataclass(frozen=True)
class Described:
    description: str


@dataclass(frozen=True)
class Synthesized:
    image_url: str


@dataclass(frozen=True)
class Persisted:
    generated_image_url: str
    original_image_url: Optional[str] = None


@dataclass(frozen=True)
class StepFailed:
    error: str


GenerationEvent = Union[Begin, Described, Synthesized, Persisted, StepFailed]


def is_terminal(state: GenerationState) -> bool:
    return isinstance(state, TERMINAL_STATES)


def transition(state: GenerationState, event: GenerationEvent) -> GenerationState:
    """
    计算状态转换结果（纯函数）

    Raises:
        InvalidTransitionError: 当前状态不接受该事件
    """
    if isinstance(state, Idle) and isinstance(event, Begin):
        return Describing()

    if isinstance(state, Describing) and isinstance(event, Described):
        if not event.description or not event.description.strip():
            raise InvalidTransitionError(state.tag, "described (empty description)")
        return Synthesizing(description=event.description)

    if isinstance(state, Synthesizing) and isinstance(event, Synthesized):
        if not event.image_url:
            raise InvalidTransitionError(state.tag, "synthesized (missing image url)")
        return Persisting(description=state.description, synthesis_url=event.image_url)

    if isinstance(state, Persisting) and isinstance(event, Persisted):
        if not event.generated_image_url:
            raise InvalidTransitionError(state.tag, "persisted (missing generated url)")
        return Succeeded(
            description=state.description,
            generated_image_url=event.generated_image_url,
            original_image_url=event.original_image_url
        )

    if isinstance(state, (Describing, Synthesizing, Persisting)) and isinstance(event, StepFailed):
        return Failed(error=event.error, failed_during=state.tag)

    raise InvalidTransitionError(state.tag, type(event).__name__)
