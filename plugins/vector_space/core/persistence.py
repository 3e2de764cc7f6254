"""Plain-dict scene documents.

A document captures everything needed to restore a workspace: the objects,
the active basis, the visualization mode and the script text. Loading
validates the document with pydantic and rebuilds the frozen scene objects;
``load_scene(dump_scene(...))`` reproduces its input exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, Literal, Mapping, Union

import pydantic
from pydantic import Field

from common.validation import SchemaModel

from .scene import (
    MATRIX_COLOR,
    POINT_COLOR,
    VECTOR_COLOR,
    Derivation,
    DerivationKind,
    Matrix,
    Point,
    SceneObject,
    Vector,
    VisualizationMode,
)

DOCUMENT_VERSION = 1

Coordinates = Annotated[list[float], Field(min_length=1, max_length=3)]


class SceneDocumentError(ValueError):
    """Raised when a scene document cannot be loaded."""

    def __init__(self, message: str, *, details: Any | None = None):
        super().__init__(message)
        self.details = details


class DerivationModel(SchemaModel):
    kind: DerivationKind
    operands: tuple[str, str]


class VectorModel(SchemaModel):
    type: Literal["vector"]
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    start: Coordinates = Field(default_factory=lambda: [0.0, 0.0, 0.0])
    end: Coordinates
    # Derived from start/end; accepted so that ``to_dict`` output loads as-is.
    components: Coordinates | None = None
    color: str = VECTOR_COLOR
    visible: bool = True
    derivation: DerivationModel | None = None

    def build(self) -> Vector:
        derivation = None
        if self.derivation is not None:
            derivation = Derivation(kind=self.derivation.kind, operands=self.derivation.operands)
        return Vector(
            id=self.id,
            name=self.name,
            start=tuple(self.start),
            end=tuple(self.end),
            color=self.color,
            visible=self.visible,
            derivation=derivation,
        )


class PointModel(SchemaModel):
    type: Literal["point"]
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    position: Coordinates
    color: str = POINT_COLOR
    visible: bool = True

    def build(self) -> Point:
        return Point(id=self.id, name=self.name, position=tuple(self.position), color=self.color, visible=self.visible)


class MatrixModel(SchemaModel):
    type: Literal["matrix"]
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    values: list[list[float]] = Field(min_length=1)
    color: str = MATRIX_COLOR
    visible: bool = True

    @pydantic.field_validator("values")
    @classmethod
    def _rectangular(cls, values: list[list[float]]) -> list[list[float]]:
        if not values[0] or any(len(row) != len(values[0]) for row in values):
            raise ValueError("Matrix rows must be non-empty and of equal length")
        return values

    def build(self) -> Matrix:
        return Matrix(id=self.id, name=self.name, values=self.values, color=self.color, visible=self.visible)


SceneObjectModel = Annotated[Union[VectorModel, PointModel, MatrixModel], Field(discriminator="type")]


class SceneDocumentModel(SchemaModel):
    # Script text is kept verbatim, including surrounding whitespace.
    model_config = pydantic.ConfigDict(extra="forbid", str_strip_whitespace=False)

    version: Literal[1] = DOCUMENT_VERSION
    objects: list[SceneObjectModel] = Field(default_factory=list)
    basis_vector_ids: list[str] = Field(default_factory=list)
    visualization_mode: VisualizationMode = VisualizationMode.NONE
    script: str = ""

    @pydantic.model_validator(mode="after")
    def _check_references(self) -> "SceneDocumentModel":
        ids = [obj.id for obj in self.objects]
        if len(set(ids)) != len(ids):
            raise ValueError("Object ids must be unique")
        vector_ids = {obj.id for obj in self.objects if obj.type == Vector.type}
        missing = [object_id for object_id in self.basis_vector_ids if object_id not in vector_ids]
        if missing:
            raise ValueError(f"Basis refers to unknown vectors: {', '.join(missing)}")
        return self


@dataclass(slots=True)
class SceneDocument:
    objects: dict[str, SceneObject] = field(default_factory=dict)
    basis_vector_ids: tuple[str, ...] = ()
    visualization_mode: VisualizationMode = VisualizationMode.NONE
    script: str = ""

    def by_name(self) -> dict[str, SceneObject]:
        return {obj.name: obj for obj in self.objects.values()}


def dump_scene(document: SceneDocument) -> dict[str, Any]:
    return {
        "version": DOCUMENT_VERSION,
        "objects": [obj.to_dict() for obj in document.objects.values()],
        "basis_vector_ids": list(document.basis_vector_ids),
        "visualization_mode": document.visualization_mode.value,
        "script": document.script,
    }


def load_scene(payload: Mapping[str, Any]) -> SceneDocument:
    try:
        model = SceneDocumentModel.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise SceneDocumentError("Invalid scene document", details=exc.errors(include_url=False, include_context=False)) from exc
    return SceneDocument(
        objects={obj.id: obj.build() for obj in model.objects},
        basis_vector_ids=tuple(model.basis_vector_ids),
        visualization_mode=model.visualization_mode,
        script=model.script,
    )


__all__ = [
    "DOCUMENT_VERSION",
    "SceneDocument",
    "SceneDocumentError",
    "SceneDocumentModel",
    "SceneObjectModel",
    "dump_scene",
    "load_scene",
]
