"""structlog configuration for the API process.

Events go through stdlib logging so uvicorn and library loggers share one
output stream.
"""

import logging

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from geev.config import Settings

# Libraries that log every request or pooled connection at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "redis")


def _add_app_info(settings: Settings) -> Processor:
    def processor(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app_version", settings.app_version)
        event_dict.setdefault("environment", settings.environment)
        return event_dict

    return processor


def setup_logging(settings: Settings) -> None:
    """Configure structlog with a JSON renderer, or a console one when ``log_format`` is not "json"."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    as_json = settings.log_format == "json"

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_app_info(settings),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if as_json:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=settings.debug))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level, format="%(message)s")
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
