"""Tests for the scheduled job trigger."""

import asyncio
import logging
import unittest
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.context.models import RequestContext
from app.context.service import ContextService
from app.services.scheduler import CRON_JOB_ID, SchedulerService
from tests.conftest import UUID4_PATTERN, make_config


def _scheduler(enabled: bool, **kwargs) -> SchedulerService:
    cfg = make_config(cron_enabled=enabled).cron
    context_service = kwargs.pop("context_service", None) or ContextService()
    return SchedulerService(cfg, context_service, **kwargs)


class TestHandleCronJob(unittest.IsolatedAsyncioTestCase):
    """Trigger behaviour with a mocked context service."""

    def setUp(self):
        self.context_service = MagicMock(spec=ContextService)
        self.context_service.run_with_context_async = AsyncMock(return_value=None)

    async def test_disabled_job_does_nothing(self):
        service = _scheduler(False, context_service=self.context_service)

        await service.handle_cron_job()

        self.context_service.run_with_context_async.assert_not_called()

    async def test_enabled_job_runs_once_with_fresh_uuid(self):
        service = _scheduler(True, context_service=self.context_service)

        await service.handle_cron_job()

        self.context_service.run_with_context_async.assert_awaited_once()
        context = self.context_service.run_with_context_async.await_args.args[0]
        assert isinstance(context, RequestContext)
        assert UUID4_PATTERN.match(context.execution_id)

    async def test_each_run_mints_a_new_execution_id(self):
        service = _scheduler(True, context_service=self.context_service)

        await service.handle_cron_job()
        await service.handle_cron_job()

        ids = {
            call.args[0].execution_id
            for call in self.context_service.run_with_context_async.await_args_list
        }
        assert len(ids) == 2

    async def test_context_errors_are_contained(self):
        self.context_service.run_with_context_async.side_effect = RuntimeError(
            "Context execution error"
        )
        service = _scheduler(True, context_service=self.context_service)

        await service.handle_cron_job()

        self.context_service.run_with_context_async.assert_awaited_once()


@pytest.mark.asyncio
async def test_job_body_observes_its_own_execution_id():
    context_service = ContextService()
    seen: list[str | None] = []

    async def job():
        await asyncio.sleep(0)
        seen.append(context_service.get_execution_id())

    service = _scheduler(True, context_service=context_service, job=job)

    await service.handle_cron_job()

    assert len(seen) == 1
    assert UUID4_PATTERN.match(seen[0])
    assert context_service.get_context() is None


@pytest.mark.asyncio
async def test_failing_job_is_logged_not_raised(caplog):
    caplog.set_level(logging.DEBUG, logger="app.services.scheduler")

    async def job():
        raise ValueError("job exploded")

    service = _scheduler(True, job=job)

    await service.handle_cron_job()

    failures = [r for r in caplog.records if r.getMessage() == "cron_job_failed"]
    assert len(failures) == 1
    assert failures[0].levelno == logging.ERROR
    assert failures[0].error == "job exploded"
    assert UUID4_PATTERN.match(failures[0].execution_id)


@pytest.mark.asyncio
async def test_disabled_job_logs_only_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="app.services.scheduler")

    await _scheduler(False).handle_cron_job()

    messages = [(r.levelno, r.getMessage()) for r in caplog.records]
    assert messages == [(logging.DEBUG, "cron_job_disabled")]


@pytest.mark.asyncio
async def test_slow_job_emits_warning(caplog):
    caplog.set_level(logging.DEBUG, logger="app.services.scheduler")

    async def job():
        await asyncio.sleep(0.02)

    await _scheduler(True, job=job, slow_threshold_ms=5).handle_cron_job()

    slow = [r for r in caplog.records if r.getMessage() == "cron_job_slow_execution"]
    assert len(slow) == 1
    assert slow[0].levelno == logging.WARNING
    assert slow[0].duration_ms > 5


@pytest.mark.asyncio
async def test_fast_job_has_no_slow_warning(caplog):
    caplog.set_level(logging.DEBUG, logger="app.services.scheduler")

    await _scheduler(True).handle_cron_job()

    messages = [r.getMessage() for r in caplog.records]
    assert "cron_job_executed" in messages
    assert "cron_job_slow_execution" not in messages


@pytest.mark.asyncio
async def test_default_job_logs_execution_id_and_interval(caplog):
    caplog.set_level(logging.INFO, logger="app.services.scheduler")

    await _scheduler(True).handle_cron_job()

    executed = [r for r in caplog.records if r.getMessage() == "cron_job_executed"]
    assert len(executed) == 1
    assert UUID4_PATTERN.match(executed[0].execution_id)
    assert executed[0].interval_minutes == 30


@pytest.mark.asyncio
async def test_start_and_stop_register_the_job():
    service = _scheduler(True)

    await service.start()
    try:
        assert service.is_running
        assert service.get_next_run_time(CRON_JOB_ID) is not None
        await service.start()  # second start is a no-op
        assert service.is_running
    finally:
        await service.stop()

    assert not service.is_running
    assert service.get_next_run_time() is None
