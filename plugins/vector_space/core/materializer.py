"""Turn evaluated values into scene objects with stable identities."""

from __future__ import annotations

import ast
import dataclasses
from dataclasses import dataclass
from typing import Mapping

import numpy as np

from .scene import (
    CROSS_PRODUCT_COLOR,
    MATRIX_COLOR,
    VECTOR_COLOR,
    Derivation,
    DerivationKind,
    Matrix,
    SceneObject,
    Vector,
    to_triple,
)


@dataclass(frozen=True, slots=True)
class VectorShape:
    components: tuple[float, float, float]


@dataclass(frozen=True, slots=True)
class MatrixShape:
    rows: tuple[tuple[float, ...], ...]


def classify(value: object) -> VectorShape | MatrixShape | None:
    """Rank-1 arrays of length 1-3 are vectors, rectangular rank-2 arrays are matrices.

    Everything else (scalars, longer vectors, higher ranks) has no scene
    representation.
    """

    if not isinstance(value, np.ndarray) or value.size == 0:
        return None
    if value.ndim == 1 and len(value) <= 3:
        return VectorShape(to_triple(value.tolist()))
    if value.ndim == 2:
        return MatrixShape(tuple(tuple(float(x) for x in row) for row in value))
    return None


def shape_value(shape: VectorShape | MatrixShape) -> np.ndarray:
    """The value later lines see for a materialized name."""

    if isinstance(shape, VectorShape):
        return np.array(shape.components, dtype=float)
    return np.array(shape.rows, dtype=float)


class IdRegistry:
    """Explicit name to id map threaded through one evaluation pass.

    Seeded from the caller's snapshot, so an object keeps its id for as long
    as its name is unchanged. New names get an id equal to the name, suffixed
    when that id is already taken by another name.
    """

    def __init__(self, ids: Mapping[str, str] | None = None):
        self._ids: dict[str, str] = dict(ids or {})

    @classmethod
    def from_objects(cls, objects: Mapping[str, SceneObject]) -> "IdRegistry":
        return cls({name: obj.id for name, obj in objects.items()})

    def resolve(self, name: str) -> str:
        if name in self._ids:
            return self._ids[name]
        taken = set(self._ids.values())
        candidate, suffix = name, 1
        while candidate in taken:
            suffix += 1
            candidate = f"{name}-{suffix}"
        self._ids[name] = candidate
        return candidate

    def as_dict(self) -> dict[str, str]:
        return dict(self._ids)


def derivation_for(expression: ast.expr) -> Derivation | None:
    """Single-step provenance: a call or binary operation over two names."""

    if isinstance(expression, ast.Call) and isinstance(expression.func, ast.Name):
        args = expression.args
        if len(args) == 2 and all(isinstance(arg, ast.Name) for arg in args):
            kind = DerivationKind.CROSS_PRODUCT if expression.func.id == "cross" else DerivationKind.OTHER
            return Derivation(kind=kind, operands=(args[0].id, args[1].id))
    if isinstance(expression, ast.BinOp):
        if isinstance(expression.left, ast.Name) and isinstance(expression.right, ast.Name):
            return Derivation(kind=DerivationKind.OTHER, operands=(expression.left.id, expression.right.id))
    return None


def materialize(
    name: str,
    shape: VectorShape | MatrixShape,
    registry: IdRegistry,
    previous: SceneObject | None = None,
    derivation: Derivation | None = None,
) -> SceneObject:
    """Build the scene object for ``name``.

    A previous object of the same type contributes its color and visibility;
    it is never modified.
    """

    object_id = registry.resolve(name)
    if isinstance(shape, VectorShape):
        if isinstance(previous, Vector):
            base = dataclasses.replace(previous, id=object_id, name=name, start=(0.0, 0.0, 0.0))
        else:
            base = Vector(id=object_id, name=name, color=VECTOR_COLOR)
        if derivation is not None and derivation.kind is DerivationKind.CROSS_PRODUCT:
            color = CROSS_PRODUCT_COLOR
        elif base.color == CROSS_PRODUCT_COLOR:
            color = VECTOR_COLOR
        else:
            color = base.color
        return dataclasses.replace(base, end=shape.components, color=color, derivation=derivation)

    if isinstance(previous, Matrix):
        return dataclasses.replace(previous, id=object_id, name=name, values=shape.rows)
    return Matrix(id=object_id, name=name, values=shape.rows, color=MATRIX_COLOR)


__all__ = [
    "IdRegistry",
    "MatrixShape",
    "VectorShape",
    "classify",
    "derivation_for",
    "materialize",
    "shape_value",
]
