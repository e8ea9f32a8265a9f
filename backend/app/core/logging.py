import logging
import sys

import structlog


def _stderr_logger(*_args) -> structlog.PrintLogger:
    # looked up per logger so a swapped sys.stderr is honoured
    return structlog.PrintLogger(sys.stderr)


def configure_logging(level: str = "INFO", to_stderr: bool = False) -> None:
    """Render structlog events as JSON lines on stdout, or stderr for command line tools."""
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder({structlog.processors.CallsiteParameter.MODULE}),
    ]

    structlog.configure(
        processors=shared_processors
        + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        logger_factory=_stderr_logger if to_stderr else structlog.PrintLoggerFactory(),
    )

    logging.basicConfig(level=level.upper())


def configure_cli_logging(level: str = "WARNING") -> None:
    """Keep stdout for report output; events go to stderr."""
    configure_logging(level, to_stderr=True)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
