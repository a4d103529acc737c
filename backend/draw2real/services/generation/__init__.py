"""
画作生成模块
"""

from .ai_service import GenerationAIService
from .attempt import CancellationToken, GenerationAttempt, InFlightGuard
from .exceptions import (
    GenerationCancelledError,
    GenerationInProgressError,
    GenerationRejected,
    InvalidTransitionError,
    NoCreditsError,
    NoImageError,
)
from .orchestrator import GenerationOrchestrator
from .task_manager import GenerationTaskManager

__all__ = [
    'GenerationAIService',
    'CancellationToken',
    'GenerationAttempt',
    'InFlightGuard',
    'GenerationCancelledError',
    'GenerationInProgressError',
    'GenerationRejected',
    'InvalidTransitionError',
    'NoCreditsError',
    'NoImageError',
    'GenerationOrchestrator',
    'GenerationTaskManager',
]
