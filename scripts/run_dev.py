"""Development entry point for the Vector Space API."""

import os

from app import create_app
from common.logging import get_logger

logger = get_logger("vector_space.dev")


def _resolve_port() -> int:
    value = os.getenv("VECTOR_SPACE_PORT") or os.getenv("PORT") or "5001"
    try:
        return int(value)
    except ValueError as exc:
        raise SystemExit(
            f"Invalid port '{value}'. Set VECTOR_SPACE_PORT to a number."
        ) from exc


def _resolve_host() -> str:
    return os.getenv("VECTOR_SPACE_HOST", "127.0.0.1")


if __name__ == "__main__":
    app = create_app()
    host, port = _resolve_host(), _resolve_port()
    plugins = ", ".join(item["blueprint"] for item in app.config["PLUGIN_MANIFESTS"])
    logger.info("serving %s on http://%s:%d", plugins or "no plugins", host, port)
    app.run(host=host, port=port, debug=os.getenv("VECTOR_SPACE_DEBUG") == "1")
