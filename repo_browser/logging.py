# repo_browser/logging.py
from __future__ import annotations
import logging, sys, structlog

_REDACTED_KEYS = {"authorization", "token", "github_token"}


def _redact_secrets(_logger, _method, event_dict):
    for key in list(event_dict):
        if key.lower() in _REDACTED_KEYS:
            event_dict[key] = "***"
    return event_dict


def setup_logging(level: str = "INFO"):
    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stdout,
    )
    # httpx logs every upstream request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return structlog.get_logger("repo_browser")
