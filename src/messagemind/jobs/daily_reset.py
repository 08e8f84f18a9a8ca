"""Daily reset job scheduled with APScheduler."""

from collections.abc import Awaitable, Callable
from datetime import datetime

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from messagemind.utils import now

logger = structlog.get_logger(__name__)

ResetCallable = Callable[[], Awaitable[None]]

JOB_ID = "daily_reset"


async def run_daily_reset() -> None:
    """Default reset hook. Per-user counters are reset by the services that own them."""
    logger.info("daily_reset_run", at=now().isoformat())


class DailyResetJob:
    """Runs a reset callable once a day on a cron schedule."""

    def __init__(
        self,
        reset: ResetCallable = run_daily_reset,
        cron: str = "0 0 * * *",
        timezone: str = "UTC",
    ) -> None:
        self._reset = reset
        self._trigger = CronTrigger.from_crontab(cron, timezone=timezone)
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """Start the scheduler. Must be called from a running event loop."""
        if self.running:
            logger.warning("daily_reset_already_running")
            return

        self._scheduler = AsyncIOScheduler(
            job_defaults={
                "coalesce": True,  # Collapse missed runs into one
                "max_instances": 1,
                "misfire_grace_time": 60,
            }
        )
        self._scheduler.add_job(self._run, self._trigger, id=JOB_ID, replace_existing=True)
        self._scheduler.start()
        logger.info("daily_reset_scheduled", next_run=str(self.next_run_time()))

    def stop(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("daily_reset_stopped")

    def next_run_time(self) -> datetime | None:
        if self._scheduler is None:
            return None
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    async def _run(self) -> None:
        try:
            await self._reset()
        except Exception:
            logger.exception("daily_reset_failed")
