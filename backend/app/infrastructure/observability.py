"""Structured Logging — JSON formatter, setup, and request logging middleware.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (orcid_id, put_code, error_code, status_code, ...) surfaced when present
    - JSON format in production, human-readable in development
    - Every HTTP request logged once on completion with method, path, status, duration

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once on startup via lifespan
    - Authorization headers are never logged (bearer tokens are long-lived on ORCID)
"""

import logging
import json
import time
from datetime import datetime, timezone

from fastapi import Request

logger = logging.getLogger("app.requests")

_EXTRA_KEYS = (
    "orcid_id", "put_code", "error_code", "attempt", "upstream_status",
    "method", "path", "status_code", "duration_ms",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


async def log_requests(request: Request, call_next):
    """HTTP middleware: one log line per request."""
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000, 1)
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response
