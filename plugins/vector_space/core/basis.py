"""Active basis bookkeeping and the notification sink it reports to."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Sequence

from common.logging import get_logger

from .linalg import Result, Status, check_linear_dependency
from .scene import SceneObject, Vector

logger = get_logger("vector_space.basis")

NotificationSink = Callable[[str, str], None]

BASIS_SIZES = (2, 3)


def log_notification(message: str, level: str) -> None:
    if level == "error":
        logger.warning(message)
    else:
        logger.info(message)


@dataclass(slots=True)
class NotificationLog:
    """Sink that keeps notifications in order, e.g. to return them over HTTP."""

    entries: list[dict[str, str]] = field(default_factory=list)

    def __call__(self, message: str, level: str) -> None:
        self.entries.append({"message": message, "level": level})


def resolve_basis(ids: Sequence[str], objects: Mapping[str, SceneObject]) -> Result[tuple[Vector, ...]]:
    """Resolve ``ids`` (keys of ``objects``) to a valid basis of vectors."""

    if len(ids) not in BASIS_SIZES:
        return Result.failure(Status.INVALID_BASIS)
    vectors: list[Vector] = []
    for object_id in ids:
        obj = objects.get(object_id)
        if not isinstance(obj, Vector):
            return Result.failure(Status.INVALID_TYPE)
        vectors.append(obj)
    if check_linear_dependency(vectors):
        return Result.failure(Status.INVALID_BASIS)
    return Result.success(tuple(vectors))


_REJECTIONS = {
    Status.INVALID_TYPE: "Basis can only contain vectors",
    Status.INVALID_BASIS: "Basis vectors must be linearly independent",
}


@dataclass(slots=True)
class BasisState:
    """The active basis; only ever replaced by a validated id list."""

    basis_ids: tuple[str, ...] = ()
    notify: NotificationSink = log_notification

    def set_basis(self, ids: Sequence[str], objects: Mapping[str, SceneObject]) -> Result[tuple[str, ...]]:
        ids = tuple(ids)
        if len(ids) not in BASIS_SIZES:
            self.notify(f"A basis needs 2 or 3 vectors, got {len(ids)}", "error")
            return Result.failure(Status.INVALID_BASIS)

        resolved = resolve_basis(ids, objects)
        if not resolved.ok:
            self.notify(_REJECTIONS.get(resolved.status, "Invalid basis"), "error")
            return Result.failure(resolved.status)

        self.basis_ids = ids
        names = ", ".join(vector.name for vector in resolved.payload)
        self.notify(f"Basis set to ({names})", "success")
        return Result.success(ids)

    def clear(self) -> None:
        self.basis_ids = ()


__all__ = [
    "BASIS_SIZES",
    "BasisState",
    "NotificationLog",
    "NotificationSink",
    "log_notification",
    "resolve_basis",
]
