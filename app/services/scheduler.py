"""Background scheduler for the periodic execution-context job."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.context.models import RequestContext

if TYPE_CHECKING:
    from app.config import CronConfig
    from app.context.service import ContextService

logger = logging.getLogger(__name__)

CRON_JOB_ID = "execution_context_job"
DEFAULT_SLOW_THRESHOLD_MS = 1000.0


class SchedulerService:
    """Runs the periodic job, each run inside its own execution context."""

    def __init__(
        self,
        cfg: CronConfig,
        context_service: ContextService,
        *,
        job: Callable[[], Awaitable[None]] | None = None,
        slow_threshold_ms: float = DEFAULT_SLOW_THRESHOLD_MS,
    ) -> None:
        """Initialize scheduler service.

        Args:
            cfg: Cron section of the application configuration
            context_service: Accessor used to scope each run
            job: Coroutine function executed on each run; defaults to logging
                the run's execution ID
            slow_threshold_ms: Runs slower than this emit a slow-execution warning
        """
        self.cfg = cfg
        self.context_service = context_service
        self.slow_threshold_ms = slow_threshold_ms
        self._job = job or self._log_execution
        self._scheduler: AsyncIOScheduler | None = None
        self._started = False

    async def start(self) -> None:
        """Start the scheduler and register the every-30-minutes job."""
        if self._started:
            logger.warning("scheduler_already_started")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.handle_cron_job,
            trigger=CronTrigger(minute="*/30"),
            id=CRON_JOB_ID,
            name="Execution Context Job",
            replace_existing=True,
            max_instances=1,  # Prevent overlapping runs
        )
        self._scheduler.start()
        self._started = True
        logger.info(
            "scheduler_started",
            extra={
                "job_id": CRON_JOB_ID,
                "enabled": self.cfg.enabled,
                "interval_minutes": self.cfg.interval_minutes,
            },
        )

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if self._scheduler and self._started:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            self._started = False
            logger.info("scheduler_stopped")

    async def handle_cron_job(self) -> None:
        """Run one scheduled job inside a fresh execution context.

        Never raises: a failing run is logged and the scheduler keeps going.
        """
        if not self.cfg.enabled:
            logger.debug("cron_job_disabled")
            return

        context = RequestContext.new()
        start = time.perf_counter()
        try:
            await self.context_service.run_with_context_async(context, self._job)
        except Exception as e:
            logger.exception(
                "cron_job_failed",
                extra={"execution_id": context.execution_id, "error": str(e)},
            )
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            if duration_ms > self.slow_threshold_ms:
                logger.warning(
                    "cron_job_slow_execution",
                    extra={
                        "execution_id": context.execution_id,
                        "duration_ms": round(duration_ms, 2),
                        "threshold_ms": self.slow_threshold_ms,
                    },
                )

    async def _log_execution(self) -> None:
        logger.info(
            "cron_job_executed",
            extra={
                "execution_id": self.context_service.get_execution_id(),
                "interval_minutes": self.cfg.interval_minutes,
            },
        )

    def get_next_run_time(self, job_id: str = CRON_JOB_ID) -> datetime | None:
        """Get next scheduled run time for a job.

        Returns:
            Next run time or None if job doesn't exist or scheduler not started
        """
        if not self._scheduler or not self._started:
            return None
        job = self._scheduler.get_job(job_id)
        return job.next_run_time if job else None

    @property
    def is_running(self) -> bool:
        return self._started and self._scheduler is not None
