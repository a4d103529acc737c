"""
重试工具模块
提供带有限次数与指数退避的异步重试组合子，供图片存储、画廊记录写入和积分账本共享
"""

import asyncio
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from draw2real.core.config import settings
from draw2real.core.log_messages import LogMessages
from draw2real.core.log_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

BackoffFunc = Callable[[int], float]


def exponential_backoff(
    base: Optional[float] = None,
    factor: Optional[float] = None,
    max_delay: Optional[float] = None
) -> BackoffFunc:
    """
    构建指数退避函数

    返回的函数接收已失败的次数（从1开始），返回下一次重试前的等待秒数：
    base * factor ** (failures - 1)，并以 max_delay 为上限。
    """
    base = settings.retry_delay_base if base is None else base
    factor = settings.retry_backoff_factor if factor is None else factor
    max_delay = settings.retry_max_delay if max_delay is None else max_delay

    def _delay(failures: int) -> float:
        return min(base * (factor ** (failures - 1)), max_delay)

    return _delay


async def retry_async(
    func: Callable[[], Awaitable[T]],
    max_attempts: int,
    backoff: Optional[BackoffFunc] = None,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    operation_name: str = "operation",
    on_retry: Optional[Callable[[int, BaseException], None]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    以有限次数重试异步操作

    Args:
        func: 无参协程工厂，每次尝试都会重新调用
        max_attempts: 最大尝试次数（含首次）
        backoff: 退避函数，默认使用配置中的指数退避
        retry_on: 需要重试的异常类型，其他异常直接抛出
        operation_name: 日志中使用的操作名
        on_retry: 每次失败后、等待前的回调
        sleep: 等待函数，测试中可替换

    Returns:
        func 最后一次成功的返回值

    Raises:
        最后一次尝试抛出的异常
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    backoff = backoff or exponential_backoff()

    attempt = 1
    while True:
        try:
            return await func()
        except retry_on as e:
            if attempt >= max_attempts:
                logger.error(
                    LogMessages.RETRY_EXHAUSTED,
                    exception=e,
                    operation_name=operation_name,
                    max_attempts=max_attempts
                )
                raise

            delay = backoff(attempt)
            logger.warning(
                LogMessages.RETRY_ATTEMPT,
                operation_name=operation_name,
                attempt=attempt,
                max_attempts=max_attempts,
                delay=delay
            )
            if on_retry is not None:
                on_retry(attempt, e)
            await sleep(delay)
            attempt += 1
