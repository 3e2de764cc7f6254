"""API routes for the Vector Space plugin."""

from __future__ import annotations

from typing import Any

import pydantic
from flask import Blueprint, Response, current_app, request
from pydantic import Field

from common.errors import NotFoundAppError, OperationAppError, ValidationAppError
from common.responses import fail, ok
from common.validation import (
    ScriptLimit,
    SchemaModel,
    ValidationError,
    enforce_script_limit,
    parse_model,
)

from ..core import (
    OPERATIONS,
    BasisState,
    Matrix,
    NotificationLog,
    SceneDocumentError,
    SceneObject,
    Status,
    VisualizationMode,
    apply_scene_transform,
    dump_scene,
    evaluate,
    load_scene,
    run_operation,
)
from ..core.persistence import SceneObjectModel

ERROR_PREFIX = "vector_space"


class EvaluatePayload(SchemaModel):
    # Leading blank lines shift line ids, so the script is taken verbatim.
    model_config = pydantic.ConfigDict(extra="forbid", str_strip_whitespace=False)

    script: str
    objects: list[SceneObjectModel] = Field(default_factory=list)
    visualization_mode: VisualizationMode | None = None


class OperationPayload(SchemaModel):
    operand_ids: list[str] = Field(min_length=1)
    objects: list[SceneObjectModel] = Field(default_factory=list)


class BasisPayload(SchemaModel):
    ids: list[str]
    objects: list[SceneObjectModel] = Field(default_factory=list)
    current_basis_ids: list[str] = Field(default_factory=list)


class TransformPayload(SchemaModel):
    matrix: list[list[float]] = Field(min_length=2, max_length=3)
    objects: list[SceneObjectModel] = Field(default_factory=list)


def _settings() -> dict[str, Any]:
    return current_app.config.get("PLUGIN_SETTINGS", {}).get("vector_space", {}) or {}


def _script_limit() -> ScriptLimit:
    return ScriptLimit.from_settings(_settings(), default_max_chars=20_000, default_max_lines=500)


def _default_mode() -> VisualizationMode:
    try:
        return VisualizationMode(_settings().get("default_visualization_mode", VisualizationMode.NONE.value))
    except ValueError:
        return VisualizationMode.NONE


def _invalid_request(exc: ValidationError) -> Response:
    return fail(
        ValidationAppError(
            message=str(exc),
            code=f"{ERROR_PREFIX}.invalid_request",
            details={"errors": getattr(exc, "details", None)},
        )
    )


def _objects_by_id(models: list) -> dict[str, SceneObject]:
    return {model.id: model.build() for model in models}


api_bp = Blueprint("vector_space", __name__, url_prefix="/api/vector_space")


@api_bp.get("/operations")
def list_operations() -> Response:
    return ok(
        {
            "operations": [
                {"name": name, "label": operation.label} for name, operation in OPERATIONS.items()
            ]
        }
    )


@api_bp.post("/evaluate")
def evaluate_script() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(EvaluatePayload, raw_payload)
        enforce_script_limit(payload.script, _script_limit())
    except ValidationError as exc:
        return _invalid_request(exc)

    existing = {model.name: model.build() for model in payload.objects}
    if len(existing) != len(payload.objects):
        return fail(ValidationAppError(message="Object names must be unique", code=f"{ERROR_PREFIX}.invalid_request"))

    result = evaluate(payload.script, existing, payload.visualization_mode or _default_mode())
    return ok(result.to_dict())


@api_bp.post("/operations/<name>")
def operation(name: str) -> Response:
    if name not in OPERATIONS:
        return fail(NotFoundAppError(message=f"Unknown operation '{name}'", code=f"{ERROR_PREFIX}.unknown_operation"))
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(OperationPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)

    notifications = NotificationLog()
    result = run_operation(name, payload.operand_ids, _objects_by_id(payload.objects), notifications)
    if not result.ok:
        return fail(
            OperationAppError.from_status(
                result.status.value,
                f"{OPERATIONS[name].label} failed",
                prefix=ERROR_PREFIX,
            ),
            notifications=notifications.entries,
        )
    return ok(result.to_dict(), notifications=notifications.entries)


@api_bp.post("/basis")
def set_basis() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(BasisPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)

    notifications = NotificationLog()
    state = BasisState(basis_ids=tuple(payload.current_basis_ids), notify=notifications)
    result = state.set_basis(payload.ids, _objects_by_id(payload.objects))
    if not result.ok:
        return fail(
            OperationAppError(
                message=notifications.entries[-1]["message"],
                code=f"{ERROR_PREFIX}.{result.status.value}",
                details={"status": result.status.value, "basis_vector_ids": list(state.basis_ids)},
            ),
            notifications=notifications.entries,
        )
    return ok({"basis_vector_ids": list(state.basis_ids)}, notifications=notifications.entries)


@api_bp.post("/transform")
def transform_scene() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(TransformPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)

    size = len(payload.matrix)
    if any(len(row) != size for row in payload.matrix):
        return fail(
            OperationAppError.from_status(
                Status.DIMENSION_MISMATCH.value,
                "Scene transforms need a 2x2 or 3x3 matrix",
                prefix=ERROR_PREFIX,
            )
        )
    matrix = Matrix(id="scene-transform", name="T", values=payload.matrix)
    objects = apply_scene_transform(_objects_by_id(payload.objects), matrix)
    return ok({"objects": {object_id: obj.to_dict() for object_id, obj in objects.items()}})


@api_bp.post("/scene/normalize")
def normalize_scene() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        document = load_scene(raw_payload)
    except SceneDocumentError as exc:
        return fail(
            ValidationAppError(
                message=str(exc),
                code=f"{ERROR_PREFIX}.invalid_document",
                details={"errors": exc.details},
            )
        )
    return ok(dump_scene(document))


blueprints = [api_bp]


__all__ = [
    "blueprints",
    "evaluate_script",
    "list_operations",
    "normalize_scene",
    "operation",
    "set_basis",
    "transform_scene",
]
