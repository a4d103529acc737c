"""
生成任务管理器单元测试
"""

import asyncio

import pytest

from draw2real.models.credit import CreditKind
from draw2real.services.generation.exceptions import NoCreditsError
from draw2real.services.generation.orchestrator import CANCELLED_MESSAGE, GenerationOrchestrator
from draw2real.services.generation.task_manager import GenerationTaskManager
from tests.utils.factories import make_payload
from tests.utils.mock_utils import DESCRIPTION, MockBuilder, no_backoff, no_sleep

USER_ID = "user-1"


@pytest.fixture
def ai_service():
    return MockBuilder.create_mock_ai_service()


@pytest.fixture
def task_manager(ledger, drawings, image_store, gallery, ai_service):
    orchestrator = GenerationOrchestrator(
        ledger=ledger,
        drawings=drawings,
        ai_service=ai_service,
        image_store=image_store,
        gallery=gallery,
        backoff=no_backoff,
        sleep=no_sleep,
    )
    return GenerationTaskManager(orchestrator)


async def _prepare(ledger, drawings, credits=1):
    await ledger.credit(USER_ID, credits, kind=CreditKind.PURCHASE, description="seed")
    await drawings.set(USER_ID, make_payload("PNG"))


def _block_describe(ai_service):
    """让describe挂起直到测试放行，返回 (已开始事件, 放行事件)"""
    started = asyncio.Event()
    release = asyncio.Event()

    async def _describe(_drawing):
        started.set()
        await release.wait()
        return DESCRIPTION

    ai_service.describe.side_effect = _describe
    return started, release


@pytest.mark.unit
@pytest.mark.generation
class TestGenerationTaskManager:
    """任务管理器测试"""

    @pytest.mark.asyncio
    async def test_start_runs_in_background(self, task_manager, ledger, drawings):
        await _prepare(ledger, drawings)

        attempt = await task_manager.start(USER_ID, USER_ID)
        assert task_manager.current(USER_ID) is attempt

        finished = await task_manager.wait(USER_ID)

        assert finished is attempt
        assert attempt.status == "succeeded"
        assert await ledger.get_balance(USER_ID) == 0

    @pytest.mark.asyncio
    async def test_rejection_is_raised_from_start(self, task_manager, drawings):
        await drawings.set(USER_ID, make_payload("PNG"))

        with pytest.raises(NoCreditsError):
            await task_manager.start(USER_ID, USER_ID)

        assert task_manager.current(USER_ID) is None

    @pytest.mark.asyncio
    async def test_cancel_running_generation(self, task_manager, ledger, drawings, ai_service):
        await _prepare(ledger, drawings)
        started, _release = _block_describe(ai_service)

        attempt = await task_manager.start(USER_ID, USER_ID)
        await started.wait()

        assert await task_manager.cancel(USER_ID) is True
        assert attempt.status == "failed"
        assert attempt.error_detail == CANCELLED_MESSAGE
        assert not task_manager.orchestrator.guard.is_active(USER_ID)
        ai_service.synthesize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancel_before_task_starts(self, task_manager, ledger, drawings, ai_service):
        await _prepare(ledger, drawings)

        attempt = await task_manager.start(USER_ID, USER_ID)
        assert await task_manager.cancel(USER_ID) is True

        assert attempt.error_detail == CANCELLED_MESSAGE
        assert not task_manager.orchestrator.guard.is_active(USER_ID)

    @pytest.mark.asyncio
    async def test_cancel_without_running_generation(self, task_manager, ledger, drawings):
        assert await task_manager.cancel(USER_ID) is False

        await _prepare(ledger, drawings)
        await task_manager.start(USER_ID, USER_ID)
        await task_manager.wait(USER_ID)

        assert await task_manager.cancel(USER_ID) is False

    @pytest.mark.asyncio
    async def test_new_generation_allowed_after_finish(self, task_manager, ledger, drawings):
        await _prepare(ledger, drawings, credits=2)

        first = await task_manager.start(USER_ID, USER_ID)
        await task_manager.wait(USER_ID)
        second = await task_manager.start(USER_ID, USER_ID)
        await task_manager.wait(USER_ID)

        assert first.id != second.id
        assert task_manager.current(USER_ID) is second
        assert await ledger.get_balance(USER_ID) == 0

    @pytest.mark.asyncio
    async def test_shutdown_cancels_everything(self, task_manager, ledger, drawings, ai_service):
        await _prepare(ledger, drawings)
        started, _release = _block_describe(ai_service)

        attempt = await task_manager.start(USER_ID, USER_ID)
        await started.wait()
        await task_manager.shutdown()

        assert attempt.status == "failed"
        assert not task_manager.orchestrator.guard.is_active(USER_ID)

    @pytest.mark.asyncio
    async def test_finished_attempt_releases_drawing(self, task_manager, ledger, drawings):
        await _prepare(ledger, drawings)

        attempt = await task_manager.start(USER_ID, USER_ID)
        assert attempt.drawing is not None

        await task_manager.wait(USER_ID)

        assert attempt.is_terminal
        assert attempt.drawing is None

    @pytest.mark.asyncio
    async def test_finished_attempts_are_pruned_after_retention(self, task_manager, ledger, drawings):
        await _prepare(ledger, drawings)
        expiring = GenerationTaskManager(task_manager.orchestrator, retention_seconds=0)

        attempt = await expiring.start(USER_ID, USER_ID)
        assert expiring.current(USER_ID) is attempt

        finished = await expiring.wait(USER_ID)

        assert finished is attempt
        assert expiring.current(USER_ID) is None
