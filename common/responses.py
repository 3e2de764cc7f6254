"""Standardized JSON envelopes returned by every plugin endpoint."""

from __future__ import annotations

from typing import Any, Mapping

from flask import Response, jsonify

from .errors import AppError


def ok(data: Any, *, status: int = 200, notifications: list[Mapping[str, str]] | None = None) -> Response:
    """Return a success envelope.

    ``notifications`` carries short user-facing messages emitted while the
    request ran (basis changes, finished operations); it is omitted when empty.
    """

    payload: dict[str, Any] = {"success": True, "data": data}
    if notifications:
        payload["notifications"] = list(notifications)
    response = jsonify(payload)
    response.status_code = status
    return response


def fail(
    error: AppError | Mapping[str, Any],
    *,
    status: int | None = None,
    notifications: list[Mapping[str, str]] | None = None,
) -> Response:
    """Return a standardized failure envelope."""

    if isinstance(error, AppError):
        payload: dict[str, Any] = {"success": False, "error": error.to_dict()}
        code = status or error.status_code
    else:
        payload = {"success": False, "error": dict(error)}
        code = status or 400
    if notifications:
        payload["notifications"] = list(notifications)
    response = jsonify(payload)
    response.status_code = code
    return response


__all__ = ["ok", "fail"]
