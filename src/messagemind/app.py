from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

import structlog

from messagemind.config import Config
from messagemind.jobs.daily_reset import DailyResetJob
from messagemind.utils import now
from messagemind.web.paths import API_PREFIX

logger = structlog.get_logger(__name__)

WebhookHandler = Callable[[bytes, str | None], Awaitable[None]]
ResetJobFactory = Callable[[Config], DailyResetJob]


async def acknowledge_webhook(payload: bytes, signature: str | None) -> None:
    """Default Stripe webhook handler: record receipt only."""
    logger.info("stripe_webhook_received", size=len(payload), signed=signature is not None)


def create_daily_reset_job(config: Config) -> DailyResetJob:
    return DailyResetJob(cron=config.daily_reset_cron, timezone=config.daily_reset_timezone)


class App:
    """Application context shared by the HTTP pipeline, the listener and background jobs.

    One instance is built at startup and handed to the FastAPI app and the
    server, so several independent instances can coexist in tests.
    """

    def __init__(
        self,
        config: Config,
        webhook_handler: WebhookHandler = acknowledge_webhook,
        reset_job_factory: ResetJobFactory = create_daily_reset_job,
    ) -> None:
        self.config = config
        self._webhook_handler = webhook_handler
        self._reset_job_factory = reset_job_factory
        self.reset_job: DailyResetJob | None = None
        self._jobs_started = False

    @property
    def expose_error_details(self) -> bool:
        """Fault messages are returned to clients in development only."""
        return self.config.debug

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Stop background jobs when the server shuts down."""
        try:
            yield
        finally:
            self.stop_background_jobs()

    async def on_listening(self) -> None:
        """Called by the server once the listening socket is bound."""
        port = self.config.port
        logger.info("server_running", port=port)
        logger.info("server_environment", environment=self.config.environment)
        logger.info("api_available", url=f"http://localhost:{port}{API_PREFIX}")
        self.start_background_jobs()

    def start_background_jobs(self) -> bool:
        """Start the daily reset job, at most once and never in the test environment.

        Returns True when the job was started by this call.
        """
        if self.config.is_test or self._jobs_started:
            return False
        self._jobs_started = True
        self.reset_job = self._reset_job_factory(self.config)
        self.reset_job.start()
        return True

    def stop_background_jobs(self) -> None:
        if self.reset_job is not None:
            self.reset_job.stop()

    async def handle_stripe_webhook(self, payload: bytes, signature: str | None) -> None:
        """Pass the untouched webhook body to the configured handler."""
        await self._webhook_handler(payload, signature)

    def health(self) -> dict[str, Any]:
        return {"status": "ok", "environment": self.config.environment, "timestamp": now().isoformat()}
