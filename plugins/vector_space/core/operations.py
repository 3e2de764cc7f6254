"""Direct operations on selected scene objects.

These bypass the script: the caller passes object ids, the operation
resolves them against a snapshot, runs the linear-algebra routine and
reports a short message to a notification sink. New objects receive fresh
ids; the snapshot is never modified.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from common.logging import get_logger

from . import linalg
from .basis import NotificationSink, log_notification
from .linalg import Result, Status
from .scene import (
    CROSS_PRODUCT_COLOR,
    Derivation,
    DerivationKind,
    Matrix,
    Point,
    SceneObject,
    Vector,
)

logger = get_logger("vector_space.operations")

RESULT_COLOR = "#ffffff"


def _new_id() -> str:
    return uuid.uuid4().hex


def _vector(name: str, components: Sequence[float], **kwargs: Any) -> Vector:
    return Vector.from_components(id=_new_id(), name=name, components=components, color=kwargs.pop("color", RESULT_COLOR), **kwargs)


def _map(result: Result, build: Callable[[Any], Any]) -> Result:
    if not result.ok:
        return Result.failure(result.status)
    return Result.success(build(result.payload))


def vector_sum(a: Vector, b: Vector) -> Result[Vector]:
    return _map(linalg.add_vectors(a, b), lambda comps: _vector(f"{a.name} + {b.name}", comps))


def vector_difference(a: Vector, b: Vector) -> Result[Vector]:
    return _map(linalg.subtract_vectors(a, b), lambda comps: _vector(f"{a.name} - {b.name}", comps))


def dot(a: Vector, b: Vector) -> Result[float]:
    return linalg.dot_product(a, b)


def cross(a: Vector, b: Vector) -> Result[Vector]:
    derivation = Derivation(kind=DerivationKind.CROSS_PRODUCT, operands=(a.name, b.name))
    return _map(
        linalg.cross_product(a, b),
        lambda comps: _vector(f"{a.name} x {b.name}", comps, color=CROSS_PRODUCT_COLOR, derivation=derivation),
    )


def projection(a: Vector, b: Vector) -> Result[Vector]:
    return _map(linalg.project_vector(a, b), lambda comps: _vector(f"proj_{b.name}({a.name})", comps))


def matrix_product(m1: Matrix, m2: Matrix) -> Result[Matrix]:
    return _map(
        linalg.multiply_matrices(m1, m2),
        lambda rows: Matrix(id=_new_id(), name=f"{m1.name}{m2.name}", values=rows, color=m1.color, visible=m1.visible),
    )


def inverse(m: Matrix) -> Result[Matrix]:
    return _map(
        linalg.invert_matrix(m),
        lambda rows: Matrix(id=_new_id(), name=f"{m.name}^-1", values=rows, color=m.color, visible=m.visible),
    )


def eigen(m: Matrix) -> Result[linalg.EigenDecomposition]:
    return linalg.calculate_eigen(m)


def coordinates(v: Vector, *basis: Vector) -> Result[tuple[float, ...]]:
    return linalg.get_vector_coordinates_in_basis(v, basis)


def transform(obj: Vector | Point, m: Matrix) -> Result[Vector | Point]:
    return linalg.apply_transform_to_object(obj, m)


def _subspace(prefix: str, result: Result[tuple[tuple[float, ...], ...]]) -> Result[tuple[Vector, ...]]:
    """Wrap a subspace basis as vectors; bases living in more than 3 dimensions have no scene form."""

    if result.ok and any(len(vec) > 3 for vec in result.payload):
        return Result.failure(Status.DIMENSION_MISMATCH)
    return _map(result, lambda vectors: tuple(_vector(f"{prefix} {i + 1}", vec) for i, vec in enumerate(vectors)))


def kernel(m: Matrix) -> Result[tuple[Vector, ...]]:
    return _subspace(f"ker {m.name}", linalg.find_kernel(m))


def image(m: Matrix) -> Result[tuple[Vector, ...]]:
    return _subspace(f"im {m.name}", linalg.find_image(m))


def orthogonal_complement(*vectors: Vector) -> Result[tuple[Vector, ...]]:
    return _subspace("complement", linalg.find_orthogonal_complement(vectors))


@dataclass(frozen=True, slots=True)
class Operation:
    label: str
    signature: tuple[type, ...]
    handler: Callable[..., Result]
    variadic: type | None = None
    min_operands: int = 0

    def accepts(self, operands: Sequence[SceneObject]) -> bool:
        fixed = len(self.signature)
        if self.variadic is None and len(operands) != fixed:
            return False
        if len(operands) < max(fixed, self.min_operands):
            return False
        for index, obj in enumerate(operands):
            expected = self.signature[index] if index < fixed else self.variadic
            if not isinstance(obj, expected):
                return False
        return True


OPERATIONS: dict[str, Operation] = {
    "sum": Operation("Vector sum", (Vector, Vector), vector_sum),
    "difference": Operation("Vector difference", (Vector, Vector), vector_difference),
    "dot": Operation("Dot product", (Vector, Vector), dot),
    "cross": Operation("Cross product", (Vector, Vector), cross),
    "projection": Operation("Projection", (Vector, Vector), projection),
    "product": Operation("Matrix product", (Matrix, Matrix), matrix_product),
    "inverse": Operation("Inverse", (Matrix,), inverse),
    "eigen": Operation("Eigen-decomposition", (Matrix,), eigen),
    "coordinates": Operation("Coordinates in basis", (Vector,), coordinates, variadic=Vector, min_operands=2),
    "transform": Operation("Transform", ((Vector, Point), Matrix), transform),
    "kernel": Operation("Kernel", (Matrix,), kernel),
    "image": Operation("Image", (Matrix,), image),
    "complement": Operation("Orthogonal complement", (), orthogonal_complement, variadic=Vector, min_operands=1),
}


def run_operation(
    name: str,
    operand_ids: Sequence[str],
    objects: Mapping[str, SceneObject],
    notify: NotificationSink = log_notification,
) -> Result:
    """Run operation ``name`` on the objects ``operand_ids`` refer to.

    ``objects`` is keyed by id. Unknown operations raise ``KeyError``; every
    numeric or type failure comes back as a failed :class:`Result`.
    """

    operation = OPERATIONS[name]
    operands = [objects.get(object_id) for object_id in operand_ids]
    if any(obj is None for obj in operands) or not operation.accepts(operands):
        notify(f"{operation.label}: select compatible objects", "error")
        return Result.failure(Status.INVALID_TYPE)

    result = operation.handler(*operands)
    if result.ok:
        notify(f"{operation.label} computed", "success")
    else:
        logger.debug("%s failed with %s", name, result.status.value)
        notify(f"{operation.label} failed: {result.status.value}", "error")
    return result


def apply_scene_transform(objects: Mapping[str, SceneObject], matrix: Matrix) -> dict[str, SceneObject]:
    """Apply ``matrix`` to every vector; objects it cannot transform are kept as-is."""

    transformed: dict[str, SceneObject] = {}
    for object_id, obj in objects.items():
        if isinstance(obj, Vector):
            result = linalg.apply_transform_to_object(obj, matrix)
            transformed[object_id] = result.payload if result.ok else obj
        else:
            transformed[object_id] = obj
    return transformed


__all__ = [
    "OPERATIONS",
    "Operation",
    "apply_scene_transform",
    "coordinates",
    "cross",
    "dot",
    "eigen",
    "image",
    "inverse",
    "kernel",
    "matrix_product",
    "orthogonal_complement",
    "projection",
    "run_operation",
    "transform",
    "vector_difference",
    "vector_sum",
]
