"""Application entry point for MessageMind backend server."""

from messagemind.app import App
from messagemind.config import Config
from messagemind.logging import setup_logging
from messagemind.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
