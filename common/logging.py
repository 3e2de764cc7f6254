"""Logging helpers with request correlation."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

from flask import Flask, g, request

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
BASE_LOGGER = "vector_space"


def get_logger(name: str = BASE_LOGGER) -> logging.Logger:
    """Return ``name`` as a child of the project logger.

    Only the base logger carries a handler; children propagate to it.
    """

    base = logging.getLogger(BASE_LOGGER)
    if not base.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        base.addHandler(handler)
        base.setLevel(logging.INFO)
    if name == BASE_LOGGER or name.startswith(BASE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{BASE_LOGGER}.{name}")


def _request_context() -> dict[str, Any]:
    return {
        "request_id": getattr(g, "request_id", "-"),
        "path": request.path,
        "method": request.method,
    }


def install_request_logging(app: Flask) -> None:
    logger = get_logger(f"{BASE_LOGGER}.http")

    @app.before_request
    def _begin_request() -> None:
        g.request_id = uuid.uuid4().hex
        g.request_started = time.perf_counter()

    @app.after_request
    def _after_request(response):
        duration_ms = 0.0
        if hasattr(g, "request_started"):
            duration_ms = (time.perf_counter() - g.request_started) * 1000
        logger.info(
            "%s %s -> %s (%.2f ms)",
            request.method,
            request.path,
            response.status_code,
            duration_ms,
            extra={**_request_context(), "status": response.status_code},
        )
        response.headers.setdefault("X-Request-ID", getattr(g, "request_id", ""))
        return response

    @app.teardown_request
    def _teardown_request(exc):  # pragma: no cover - flask hooks
        if exc is not None:
            logger.exception("request error", extra=_request_context())


__all__ = ["BASE_LOGGER", "get_logger", "install_request_logging"]
