"""Scene object model shared by the engine, the operations and the API."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Sequence, Union

Triple = tuple[float, float, float]

VECTOR_COLOR = "#ff0000"
MATRIX_COLOR = "#00ff00"
POINT_COLOR = "#0000ff"
CROSS_PRODUCT_COLOR = "#ff00ff"
GHOST_COLOR = "#9e9e9e"
ORIGIN: Triple = (0.0, 0.0, 0.0)


class VisualizationMode(str, Enum):
    NONE = "none"
    TIP_TO_TAIL = "tip-to-tail"
    PARALLELOGRAM = "parallelogram"


class DerivationKind(str, Enum):
    CROSS_PRODUCT = "CrossProduct"
    OTHER = "Other"


def to_triple(values: Sequence[float]) -> Triple:
    """Zero-pad (or accept) up to three components as a float triple."""

    if len(values) > 3:
        raise ValueError(f"Expected at most 3 components, got {len(values)}")
    padded = [float(v) for v in values] + [0.0] * (3 - len(values))
    return (padded[0], padded[1], padded[2])


@dataclass(frozen=True, slots=True)
class Derivation:
    """Provenance of a computed vector; only drives optional extra rendering."""

    kind: DerivationKind
    operands: tuple[str, str]

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "operands": list(self.operands)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Derivation":
        left, right = data["operands"]
        return cls(kind=DerivationKind(data["kind"]), operands=(str(left), str(right)))


@dataclass(frozen=True, slots=True)
class Vector:
    type: ClassVar[str] = "vector"

    id: str
    name: str
    start: Triple = ORIGIN
    end: Triple = ORIGIN
    color: str = VECTOR_COLOR
    visible: bool = True
    derivation: Derivation | None = None
    components: Triple = field(init=False)

    def __post_init__(self) -> None:
        start = to_triple(self.start)
        end = to_triple(self.end)
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)
        object.__setattr__(self, "components", (end[0] - start[0], end[1] - start[1], end[2] - start[2]))

    @classmethod
    def from_components(cls, id: str, name: str, components: Sequence[float], **kwargs: Any) -> "Vector":
        start = to_triple(kwargs.pop("start", ORIGIN))
        comps = to_triple(components)
        end = (start[0] + comps[0], start[1] + comps[1], start[2] + comps[2])
        return cls(id=id, name=name, start=start, end=end, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "start": list(self.start),
            "end": list(self.end),
            "components": list(self.components),
            "color": self.color,
            "visible": self.visible,
        }
        if self.derivation is not None:
            payload["derivation"] = self.derivation.to_dict()
        return payload


@dataclass(frozen=True, slots=True)
class Point:
    type: ClassVar[str] = "point"

    id: str
    name: str
    position: Triple = ORIGIN
    color: str = POINT_COLOR
    visible: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", to_triple(self.position))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "position": list(self.position),
            "color": self.color,
            "visible": self.visible,
        }


@dataclass(frozen=True, slots=True)
class Matrix:
    type: ClassVar[str] = "matrix"

    id: str
    name: str
    values: tuple[tuple[float, ...], ...]
    color: str = MATRIX_COLOR
    visible: bool = True

    def __post_init__(self) -> None:
        rows = tuple(tuple(float(v) for v in row) for row in self.values)
        if not rows or not rows[0]:
            raise ValueError("Matrix must have at least one non-empty row")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError("Matrix rows must have equal length")
        object.__setattr__(self, "values", rows)

    @property
    def shape(self) -> tuple[int, int]:
        return len(self.values), len(self.values[0])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "values": [list(row) for row in self.values],
            "color": self.color,
            "visible": self.visible,
        }


SceneObject = Union[Vector, Point, Matrix]


def object_from_dict(data: Mapping[str, Any]) -> SceneObject:
    """Rebuild a scene object from its ``to_dict`` form."""

    kind = data.get("type")
    common = {
        "id": str(data["id"]),
        "name": str(data["name"]),
        "visible": bool(data.get("visible", True)),
    }
    if "color" in data:
        common["color"] = str(data["color"])
    if kind == Vector.type:
        derivation = data.get("derivation")
        return Vector(
            start=to_triple(data.get("start", ORIGIN)),
            end=to_triple(data["end"]),
            derivation=Derivation.from_dict(derivation) if derivation else None,
            **common,
        )
    if kind == Point.type:
        return Point(position=to_triple(data["position"]), **common)
    if kind == Matrix.type:
        return Matrix(values=data["values"], **common)
    raise ValueError(f"Unknown scene object type {kind!r}")


@dataclass(slots=True)
class EvaluationResult:
    """Outcome of one evaluation pass."""

    new_objects: dict[str, SceneObject] = field(default_factory=dict)
    temp_objects: list[SceneObject] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "new_objects": {obj_id: obj.to_dict() for obj_id, obj in self.new_objects.items()},
            "temp_objects": [obj.to_dict() for obj in self.temp_objects],
            "errors": dict(self.errors),
        }


__all__ = [
    "CROSS_PRODUCT_COLOR",
    "GHOST_COLOR",
    "MATRIX_COLOR",
    "ORIGIN",
    "POINT_COLOR",
    "VECTOR_COLOR",
    "Derivation",
    "DerivationKind",
    "EvaluationResult",
    "Matrix",
    "Point",
    "SceneObject",
    "Triple",
    "Vector",
    "VisualizationMode",
    "object_from_dict",
    "to_triple",
]
