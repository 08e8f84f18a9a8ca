import logging

import structlog

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("apscheduler", "asyncio")


def shared_processors() -> list[structlog.types.Processor]:
    """Processors applied to both structlog events and plain stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def build_formatter(debug: bool) -> structlog.stdlib.ProcessorFormatter:
    render: list[structlog.types.Processor]
    if debug:
        # ConsoleRenderer prints tracebacks itself
        render = [structlog.dev.ConsoleRenderer()]
    else:
        render = [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render],
    )


def setup_logging(debug: bool) -> None:
    """Send structlog and stdlib logging through one root handler.

    Development gets colored console lines, any other environment one JSON
    object per line.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter(debug))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
