"""Uvicorn server runner with custom configuration."""

import signal
import socket
import sys
from types import FrameType

import structlog
import uvicorn
from uvicorn.config import LOGGING_CONFIG

from messagemind.app import App
from messagemind.config import Config
from messagemind.web.server import create_fastapi_app

logger = structlog.get_logger(__name__)

STARTUP_FAILURE = 3


class ApiServer(uvicorn.Server):
    """Uvicorn server that reports back to the App once the socket is bound."""

    def __init__(self, config: uvicorn.Config, app: App) -> None:
        super().__init__(config)
        self.context = app

    async def startup(self, sockets: list[socket.socket] | None = None) -> None:
        await super().startup(sockets=sockets)
        if self.started and not self.should_exit:
            await self.context.on_listening()

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        """Stop accepting connections and let uvicorn drain in-flight requests.

        The signal is not re-raised after shutdown, so the process exits with status 0.
        A second SIGINT forces an immediate exit.
        """
        logger.info("shutdown_signal_received", signal=signal.Signals(sig).name)
        if self.should_exit and sig == signal.SIGINT:
            self.force_exit = True
        else:
            self.should_exit = True


def run_server(app: App, config: Config) -> None:
    """Run the Uvicorn server with custom logging configuration."""
    fastapi_app = create_fastapi_app(app, config)

    log_config = LOGGING_CONFIG.copy()
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"

    server_config = uvicorn.Config(
        fastapi_app,
        host=config.host,
        port=config.port,
        log_config=log_config,
        access_log=True,
        timeout_graceful_shutdown=config.shutdown_timeout,
    )
    server = ApiServer(server_config, app)
    server.run()

    if not server.started:
        logger.error("server_failed_to_start", host=config.host, port=config.port)
        sys.exit(STARTUP_FAILURE)
