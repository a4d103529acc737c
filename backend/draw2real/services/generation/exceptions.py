"""
生成流程异常定义
"""


class GenerationRejected(Exception):
    """
    生成请求在开始前被拒绝（输入错误），拒绝时不会调用任何外部服务，也不会修改任何状态

    Attributes:
        message: 面向用户的提示
        reason: 机器可读的拒绝原因
    """

    reason = "rejected"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NoImageError(GenerationRejected):
    reason = "no_image"

    def __init__(self, message: str = "Please capture or upload a drawing first") -> None:
        super().__init__(message)


class NoCreditsError(GenerationRejected):
    reason = "no_credits"

    def __init__(self, message: str = "You have no credits left. Buy more to keep creating") -> None:
        super().__init__(message)


class GenerationInProgressError(GenerationRejected):
    reason = "in_progress"

    def __init__(self, message: str = "A generation is already running for this session") -> None:
        super().__init__(message)


class InvalidTransitionError(Exception):
    """状态机收到当前状态不接受的事件"""

    def __init__(self, state: str, event: str) -> None:
        super().__init__(f"Invalid transition from '{state}' on '{event}'")
        self.state = state
        self.event = event


class GenerationCancelledError(Exception):
    """生成任务已被取消"""
