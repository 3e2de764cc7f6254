"""Configuration classes for the Flask application."""

from __future__ import annotations

import os
import secrets


def _load_secret() -> str:
    """Return the Flask secret key for the current process."""

    secret = os.environ.get("VECTOR_SPACE_SECRET")
    if secret:
        return secret
    # Per-process key; the API is stateless and issues no sessions.
    return secrets.token_urlsafe(64)


class BaseConfig:
    SECRET_KEY = _load_secret()
    MAX_CONTENT_LENGTH = 2 * 1024 * 1024  # 2 MiB of JSON
    RESPONSE_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
        "Referrer-Policy": "no-referrer",
        "Cache-Control": "no-store",
    }


class TestingConfig(BaseConfig):
    TESTING = True


__all__ = ["BaseConfig", "TestingConfig"]
