"""Validation primitives for plugin APIs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, TypeVar

import pydantic
from pydantic import BaseModel


class ValidationError(ValueError):
    """Raised when validation fails."""

    def __init__(self, message: str, *, details: Any | None = None):
        super().__init__(message)
        self.details = details


class SchemaModel(BaseModel):
    """Strict base model for request/response validation."""

    model_config = pydantic.ConfigDict(extra="forbid", str_strip_whitespace=True)


TModel = TypeVar("TModel", bound=SchemaModel)


def parse_model(model: type[TModel], payload: Mapping[str, Any] | None) -> TModel:
    payload = payload or {}
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError("Invalid request payload", details=exc.errors(include_url=False, include_context=False)) from exc


@dataclass(slots=True)
class ScriptLimit:
    """Upper bounds on the script text accepted for one evaluation pass."""

    max_chars: int
    max_lines: int

    @classmethod
    def from_settings(
        cls,
        settings: Mapping[str, Any] | None,
        *,
        default_max_chars: int,
        default_max_lines: int,
    ) -> "ScriptLimit":
        """Build a :class:`ScriptLimit` from ``config.yml`` plugin settings.

        Missing or malformed values fall back to the supplied defaults so
        misconfiguration never raises at request time.
        """

        max_chars = default_max_chars
        max_lines = default_max_lines

        if settings:
            try:
                max_chars = int(settings.get("max_script_chars"))
            except (TypeError, ValueError):
                max_chars = default_max_chars

            try:
                max_lines = int(settings.get("max_script_lines"))
            except (TypeError, ValueError):
                max_lines = default_max_lines

        return cls(max_chars=max(max_chars, 1), max_lines=max(max_lines, 1))


def enforce_script_limit(script: str, limit: ScriptLimit) -> None:
    if len(script) > limit.max_chars:
        raise ValidationError("Script exceeds allowed size")
    if len(script.splitlines()) > limit.max_lines:
        raise ValidationError("Script has too many lines")


__all__ = [
    "ValidationError",
    "SchemaModel",
    "parse_model",
    "ScriptLimit",
    "enforce_script_limit",
]
