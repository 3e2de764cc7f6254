"""Pure linear-algebra routines returning typed results.

Every public function leaves its inputs untouched and reports failures
through :class:`Result` rather than raising. Inputs may be scene objects
(:class:`Vector`, :class:`Point`, :class:`Matrix`) or plain numeric sequences.

Rank, independence and basis solving use a fixed pivot tolerance
(:data:`PIVOT_TOLERANCE`); they are tolerance-bounded approximations, not
exact symbolic computations.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Sequence, TypeVar

import numpy as np

from .scene import Matrix, Point, Vector

PIVOT_TOLERANCE = 1e-10
EIGEN_IMAG_TOLERANCE = 1e-10

T = TypeVar("T")

VectorLike = Vector | Point | Sequence[float]
MatrixLike = Matrix | Sequence[Sequence[float]]


class Status(str, Enum):
    SUCCESS = "Success"
    DIMENSION_MISMATCH = "DimensionMismatch"
    NOT_SQUARE = "NotSquare"
    NOT_SQUARE_MATRIX = "NotSquareMatrix"
    SINGULAR = "Singular"
    NOT_IN_3D = "NotIn3D"
    COMPLEX_EIGENVALUES = "ComplexEigenvalues"
    INVALID_BASIS = "InvalidBasis"
    COMPUTATION_FAILED = "ComputationFailed"
    INVALID_TYPE = "InvalidType"


@dataclass(frozen=True)
class Result(Generic[T]):
    status: Status
    payload: T | None = None

    @property
    def ok(self) -> bool:
        return self.status is Status.SUCCESS

    @classmethod
    def success(cls, payload: T) -> "Result[T]":
        return cls(Status.SUCCESS, payload)

    @classmethod
    def failure(cls, status: Status) -> "Result[T]":
        return cls(status, None)

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status.value, "payload": _jsonable(self.payload)}


@dataclass(frozen=True, slots=True)
class EigenDecomposition:
    eigenvalues: tuple[float, ...]
    eigenvectors: tuple[tuple[float, ...], ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "eigenvalues": list(self.eigenvalues),
            "eigenvectors": [list(vec) for vec in self.eigenvectors],
        }


def _jsonable(payload: Any) -> Any:
    if payload is None or isinstance(payload, (bool, int, float, str)):
        return payload
    if hasattr(payload, "to_dict"):
        return payload.to_dict()
    if isinstance(payload, (list, tuple)):
        return [_jsonable(item) for item in payload]
    return payload


def _vector_array(value: VectorLike) -> np.ndarray:
    if isinstance(value, Vector):
        return np.array(value.components, dtype=float)
    if isinstance(value, Point):
        return np.array(value.position, dtype=float)
    arr = np.array(value, dtype=float)
    if arr.ndim != 1 or arr.size == 0:
        raise ValueError("Expected a non-empty list of numbers")
    return arr


def _matrix_array(value: MatrixLike) -> np.ndarray:
    if isinstance(value, Matrix):
        return np.array(value.values, dtype=float)
    arr = np.array(value, dtype=float)
    if arr.ndim != 2 or arr.size == 0:
        raise ValueError("Expected a non-empty rectangular matrix")
    return arr


def _as_tuple(arr: np.ndarray) -> tuple[float, ...]:
    return tuple(float(x) for x in arr)


def _as_rows(arr: np.ndarray) -> tuple[tuple[float, ...], ...]:
    return tuple(_as_tuple(row) for row in arr)


def _pad(vectors: Sequence[np.ndarray]) -> list[np.ndarray]:
    width = max(len(vec) for vec in vectors)
    return [np.pad(vec, (0, width - len(vec))) for vec in vectors]


def _effective_dimension(vectors: Sequence[np.ndarray], *, tolerance: float = PIVOT_TOLERANCE) -> int:
    """Drop trailing components that are zero in every vector (3-padded 2D data)."""

    stacked = np.vstack(vectors)
    significant = np.nonzero(np.any(np.abs(stacked) > tolerance, axis=0))[0]
    return int(significant[-1]) + 1 if significant.size else 0


def row_reduce(matrix: np.ndarray, *, tolerance: float = PIVOT_TOLERANCE) -> tuple[np.ndarray, list[int]]:
    """Return the reduced row echelon form of ``matrix`` and its pivot columns.

    Gauss-Jordan elimination with partial pivoting; a column whose largest
    remaining entry is below ``tolerance`` has no pivot.
    """

    reduced = np.array(matrix, dtype=float)
    rows, cols = reduced.shape
    pivots: list[int] = []
    row = 0
    for col in range(cols):
        if row >= rows:
            break
        pivot = row + int(np.argmax(np.abs(reduced[row:, col])))
        if abs(reduced[pivot, col]) < tolerance:
            reduced[row:, col] = 0.0
            continue
        if pivot != row:
            reduced[[row, pivot]] = reduced[[pivot, row]]
        reduced[row] = reduced[row] / reduced[row, col]
        for other in range(rows):
            if other != row:
                reduced[other] = reduced[other] - reduced[other, col] * reduced[row]
        pivots.append(col)
        row += 1
    return reduced, pivots


def matrix_rank(matrix: MatrixLike, *, tolerance: float = PIVOT_TOLERANCE) -> int:
    _, pivots = row_reduce(_matrix_array(matrix), tolerance=tolerance)
    return len(pivots)


def add_vectors(v1: VectorLike, v2: VectorLike) -> Result[tuple[float, ...]]:
    try:
        a, b = _vector_array(v1), _vector_array(v2)
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)
    if a.shape != b.shape:
        return Result.failure(Status.DIMENSION_MISMATCH)
    return Result.success(_as_tuple(a + b))


def subtract_vectors(v1: VectorLike, v2: VectorLike) -> Result[tuple[float, ...]]:
    try:
        a, b = _vector_array(v1), _vector_array(v2)
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)
    if a.shape != b.shape:
        return Result.failure(Status.DIMENSION_MISMATCH)
    return Result.success(_as_tuple(a - b))


def dot_product(v1: VectorLike, v2: VectorLike) -> Result[float]:
    try:
        a, b = _vector_array(v1), _vector_array(v2)
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)
    if a.shape != b.shape:
        return Result.failure(Status.DIMENSION_MISMATCH)
    return Result.success(float(np.dot(a, b)))


def cross_product(v1: VectorLike, v2: VectorLike) -> Result[tuple[float, float, float]]:
    try:
        a, b = _vector_array(v1), _vector_array(v2)
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)
    if len(a) != 3 or len(b) != 3:
        return Result.failure(Status.NOT_IN_3D)
    x, y, z = (float(c) for c in np.cross(a, b))
    return Result.success((x, y, z))


def project_vector(v: VectorLike, onto: VectorLike) -> Result[tuple[float, ...]]:
    """Orthogonal projection of ``v`` onto the line spanned by ``onto``."""

    try:
        a, b = _vector_array(v), _vector_array(onto)
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)
    if a.shape != b.shape:
        return Result.failure(Status.DIMENSION_MISMATCH)
    denom = float(np.dot(b, b))
    if denom < PIVOT_TOLERANCE:
        return Result.failure(Status.COMPUTATION_FAILED)
    return Result.success(_as_tuple(b * (float(np.dot(a, b)) / denom)))


def multiply_matrices(m1: MatrixLike, m2: MatrixLike) -> Result[tuple[tuple[float, ...], ...]]:
    try:
        a, b = _matrix_array(m1), _matrix_array(m2)
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)
    if a.shape[1] != b.shape[0]:
        return Result.failure(Status.COMPUTATION_FAILED)
    return Result.success(_as_rows(a @ b))


def invert_matrix(matrix: MatrixLike) -> Result[tuple[tuple[float, ...], ...]]:
    try:
        a = _matrix_array(matrix)
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)
    n, m = a.shape
    if n != m:
        return Result.failure(Status.NOT_SQUARE)

    augmented = np.hstack([a, np.eye(n)])
    for col in range(n):
        pivot = col + int(np.argmax(np.abs(augmented[col:, col])))
        if abs(augmented[pivot, col]) < PIVOT_TOLERANCE:
            return Result.failure(Status.SINGULAR)
        if pivot != col:
            augmented[[col, pivot]] = augmented[[pivot, col]]
        augmented[col] = augmented[col] / augmented[col, col]
        for row in range(n):
            if row != col:
                augmented[row] = augmented[row] - augmented[row, col] * augmented[col]
    return Result.success(_as_rows(augmented[:, n:]))


def calculate_eigen(matrix: MatrixLike) -> Result[EigenDecomposition]:
    """Real eigen-decomposition; complex spectra are rejected, not approximated."""

    try:
        a = _matrix_array(matrix)
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)
    if a.shape[0] != a.shape[1]:
        return Result.failure(Status.NOT_SQUARE_MATRIX)
    if not np.all(np.isfinite(a)):
        return Result.failure(Status.COMPUTATION_FAILED)
    try:
        values, vectors = np.linalg.eig(a)
    except np.linalg.LinAlgError:
        return Result.failure(Status.COMPUTATION_FAILED)
    if np.any(np.abs(np.imag(values)) > EIGEN_IMAG_TOLERANCE):
        return Result.failure(Status.COMPLEX_EIGENVALUES)
    real_vectors = np.real(vectors)
    return Result.success(
        EigenDecomposition(
            eigenvalues=_as_tuple(np.real(values)),
            eigenvectors=tuple(_as_tuple(real_vectors[:, i]) for i in range(real_vectors.shape[1])),
        )
    )


def check_linear_dependency(vectors: Sequence[VectorLike]) -> bool:
    """Return True when ``vectors`` are linearly dependent.

    The vectors become the columns of a dimension x count matrix; they are
    dependent when its rank is below the count. More vectors than dimensions
    are always dependent.
    """

    if not vectors:
        return False
    try:
        arrays = _pad([_vector_array(v) for v in vectors])
    except (TypeError, ValueError):
        # Non-vector input is reported as dependent.
        return True
    dimension, count = len(arrays[0]), len(arrays)
    if count > dimension:
        return True
    _, pivots = row_reduce(np.column_stack(arrays))
    return len(pivots) < count


def get_vector_coordinates_in_basis(vector: VectorLike, basis: Sequence[VectorLike]) -> Result[tuple[float, ...]]:
    """Solve ``B @ coords = vector`` where the columns of ``B`` are the basis.

    Components that are zero across the target and every basis vector do not
    count towards the dimension, so a 2-vector basis of the xy-plane resolves
    3-padded planar vectors.
    """

    if not basis:
        return Result.failure(Status.INVALID_BASIS)
    try:
        arrays = _pad([_vector_array(vector)] + [_vector_array(b) for b in basis])
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)

    dimension = _effective_dimension(arrays)
    if len(basis) != dimension:
        return Result.failure(Status.INVALID_BASIS)
    target = arrays[0][:dimension]
    columns = [arr[:dimension] for arr in arrays[1:]]
    if check_linear_dependency(columns):
        return Result.failure(Status.INVALID_BASIS)

    n = dimension
    augmented = np.column_stack(columns + [target])
    for i in range(n):
        pivot = i + int(np.argmax(np.abs(augmented[i:, i])))
        if pivot != i:
            augmented[[i, pivot]] = augmented[[pivot, i]]
        if abs(augmented[i, i]) < PIVOT_TOLERANCE:
            return Result.failure(Status.INVALID_BASIS)
        for k in range(i + 1, n):
            factor = augmented[k, i] / augmented[i, i]
            augmented[k, i:] = augmented[k, i:] - factor * augmented[i, i:]

    solution = np.zeros(n)
    for i in range(n - 1, -1, -1):
        solution[i] = (augmented[i, n] - np.dot(augmented[i, i + 1 : n], solution[i + 1 :])) / augmented[i, i]
    return Result.success(_as_tuple(solution))


def apply_transform_to_object(obj: Vector | Point, matrix: MatrixLike) -> Result[Vector | Point]:
    """Multiply ``matrix`` into a vector's components or a point's position.

    A vector keeps its start and gets a new end; a 2x2 matrix applies to
    objects lying in the xy-plane.
    """

    if not isinstance(obj, (Vector, Point)):
        return Result.failure(Status.INVALID_TYPE)
    try:
        m = _matrix_array(matrix)
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)

    source = np.array(obj.components if isinstance(obj, Vector) else obj.position, dtype=float)
    n = m.shape[0]
    if m.shape[1] != n or n < _effective_dimension([source]) or n not in (2, 3):
        return Result.failure(Status.DIMENSION_MISMATCH)

    transformed = np.zeros(3)
    transformed[:n] = m @ source[:n]
    if isinstance(obj, Vector):
        start = np.array(obj.start)
        return Result.success(dataclasses.replace(obj, end=tuple(float(x) for x in start + transformed)))
    return Result.success(dataclasses.replace(obj, position=tuple(float(x) for x in transformed)))


def find_kernel(matrix: MatrixLike) -> Result[tuple[tuple[float, ...], ...]]:
    """Basis of the null space, one vector per free column of the RREF."""

    try:
        a = _matrix_array(matrix)
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)
    if not np.all(np.isfinite(a)):
        return Result.failure(Status.COMPUTATION_FAILED)
    reduced, pivots = row_reduce(a)
    cols = a.shape[1]
    kernel = []
    for free in (c for c in range(cols) if c not in pivots):
        vec = np.zeros(cols)
        vec[free] = 1.0
        for row, pivot_col in enumerate(pivots):
            vec[pivot_col] = -reduced[row, free]
        kernel.append(_as_tuple(vec))
    return Result.success(tuple(kernel))


def find_image(matrix: MatrixLike) -> Result[tuple[tuple[float, ...], ...]]:
    """Basis of the column space: the original columns at pivot positions."""

    try:
        a = _matrix_array(matrix)
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)
    if not np.all(np.isfinite(a)):
        return Result.failure(Status.COMPUTATION_FAILED)
    _, pivots = row_reduce(a)
    return Result.success(tuple(_as_tuple(a[:, col]) for col in pivots))


def find_orthogonal_complement(vectors: Sequence[VectorLike]) -> Result[tuple[tuple[float, ...], ...]]:
    if not vectors:
        return Result.failure(Status.COMPUTATION_FAILED)
    try:
        arrays = [_vector_array(v) for v in vectors]
    except (TypeError, ValueError):
        return Result.failure(Status.INVALID_TYPE)
    if len({len(arr) for arr in arrays}) != 1:
        return Result.failure(Status.DIMENSION_MISMATCH)
    return find_kernel(np.vstack(arrays))


__all__ = [
    "EIGEN_IMAG_TOLERANCE",
    "PIVOT_TOLERANCE",
    "EigenDecomposition",
    "Result",
    "Status",
    "add_vectors",
    "apply_transform_to_object",
    "calculate_eigen",
    "check_linear_dependency",
    "cross_product",
    "dot_product",
    "find_image",
    "find_kernel",
    "find_orthogonal_complement",
    "get_vector_coordinates_in_basis",
    "invert_matrix",
    "matrix_rank",
    "multiply_matrices",
    "project_vector",
    "row_reduce",
    "subtract_vectors",
]
