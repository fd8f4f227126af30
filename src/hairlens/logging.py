import logging

import structlog

from hairlens.config import Config


def setup_logging(config: Config) -> None:
    """Route stdlib and structlog output through one renderer chosen by config.debug."""
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(message)s",
    )

    # Storage drivers are chatty at DEBUG
    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer() if config.debug else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
