"""Ghost vectors that illustrate vector addition and subtraction."""

from __future__ import annotations

import ast
import uuid
from typing import Mapping

from .scene import GHOST_COLOR, SceneObject, Triple, Vector, VisualizationMode


def _operands(expression: ast.expr) -> tuple[str, str, str] | None:
    if not isinstance(expression, ast.BinOp) or not isinstance(expression.op, (ast.Add, ast.Sub)):
        return None
    if not isinstance(expression.left, ast.Name) or not isinstance(expression.right, ast.Name):
        return None
    symbol = "+" if isinstance(expression.op, ast.Add) else "-"
    return expression.left.id, symbol, expression.right.id


def _shift(point: Triple, by: Triple) -> Triple:
    return (point[0] + by[0], point[1] + by[1], point[2] + by[2])


def _ghost(name: str, start: Triple, components: Triple) -> Vector:
    return Vector.from_components(
        id=f"ghost-{uuid.uuid4().hex}",
        name=name,
        components=components,
        start=start,
        color=GHOST_COLOR,
    )


def generate_ghosts(
    expression: ast.expr,
    scene: Mapping[str, SceneObject],
    mode: VisualizationMode,
) -> list[Vector]:
    """Return the helper vectors for ``left +/- right``, or nothing.

    Tip-to-tail places the (negated, for ``-``) right operand at the left
    operand's end point; parallelogram adds the left operand placed at the
    right operand's end point as well.
    """

    if mode is VisualizationMode.NONE:
        return []
    operands = _operands(expression)
    if operands is None:
        return []
    left_name, symbol, right_name = operands
    left, right = scene.get(left_name), scene.get(right_name)
    if not isinstance(left, Vector) or not isinstance(right, Vector):
        return []

    u = left.components
    w = right.components if symbol == "+" else (-right.components[0], -right.components[1], -right.components[2])
    right_label = right_name if symbol == "+" else f"-{right_name}"
    origin = left.start

    ghosts = [_ghost(f"{right_label} @ {left_name}", _shift(origin, u), w)]
    if mode is VisualizationMode.PARALLELOGRAM:
        ghosts.append(_ghost(f"{left_name} @ {right_label}", _shift(origin, w), u))
    return ghosts


__all__ = ["generate_ghosts"]
