"""structlog 기반 애플리케이션 로깅 설정.

Application logging setup. Request/response traffic goes to Axiom through
the middleware; service-level events (reminder cancellation failures,
lost approval races, blocked approvals) are emitted as JSON lines here.
"""

import logging

import structlog

from shiftledger.config import settings


def setup_logging() -> None:
    level = settings.LOG_LEVEL.upper()
    logging.basicConfig(format="%(message)s", level=getattr(logging, level, logging.INFO))
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
