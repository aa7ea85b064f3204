"""
structlog configuration.

Every entry is one JSON line carrying level, logger, timestamp, the
service name and whatever request context the HTTP middleware bound.
"""

import logging
import sys

import structlog
from structlog.stdlib import BoundLogger, LoggerFactory

SERVICE_NAME = "wink"
_NOISY_LOGGERS = ("psycopg.pool", "uvicorn.access", "httpx")


def setup_logging(log_level: str = "INFO") -> None:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _tag_service,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def _tag_service(_logger, _method_name: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def get_logger(name: str | None = None) -> BoundLogger:
    return structlog.get_logger(name)


def log_request(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    user_id: str | None = None,
) -> None:
    """One line per HTTP request; 4xx/5xx are logged as warnings."""
    fields = {
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": duration_ms,
    }
    if user_id:
        fields["user_id"] = user_id

    logger = get_logger("wink.http")
    if status_code >= 400:
        logger.warning("Request failed", **fields)
    else:
        logger.info("Request handled", **fields)
