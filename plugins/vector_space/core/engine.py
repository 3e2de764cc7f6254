"""Single evaluation pass: parse, evaluate line by line, materialize."""

from __future__ import annotations

import ast
from dataclasses import dataclass
from typing import Mapping

from common.logging import get_logger

from .evaluator import SymbolTable, Value, evaluate_expression
from .hints import generate_ghosts
from .materializer import IdRegistry, classify, derivation_for, materialize, shape_value
from .parser import EvaluationError, ParsedLine, desugar, parse_script
from .scene import EvaluationResult, SceneObject, VisualizationMode

logger = get_logger("vector_space.engine")


@dataclass(frozen=True, slots=True)
class _Assignment:
    line: ParsedLine
    expression: ast.expr
    value: Value


def _evaluate_lines(
    lines: list[ParsedLine],
    table: SymbolTable,
    errors: dict[str, str],
) -> list[_Assignment]:
    assignments: list[_Assignment] = []
    for line in lines:
        if line.error is not None:
            errors[line.line_id] = line.error
            continue
        try:
            expression = desugar(line.expression, table.kinds())
            value = evaluate_expression(expression, table)
        except EvaluationError as exc:
            errors[line.line_id] = str(exc)
            continue
        except (ArithmeticError, ValueError, RecursionError) as exc:
            logger.debug("%s failed outside the evaluator checks: %r", line.line_id, exc)
            errors[line.line_id] = f"Evaluation failed: {exc}"
            continue
        if not line.is_assignment:
            continue
        shape = classify(value)
        table.bind(line.target, shape_value(shape) if shape is not None else value)
        assignments.append(_Assignment(line=line, expression=expression, value=value))
    return assignments


def evaluate(
    script: str,
    existing_objects: Mapping[str, SceneObject],
    visualization_mode: VisualizationMode | str = VisualizationMode.NONE,
) -> EvaluationResult:
    """Evaluate ``script`` against a snapshot of the scene keyed by name.

    Every call starts from fresh state; ``existing_objects`` is read, never
    modified. A failing line is reported in ``errors`` under its line id and
    does not stop later lines.
    """

    mode = VisualizationMode(visualization_mode)
    result = EvaluationResult()

    lines = parse_script(script)

    table = SymbolTable.from_objects(existing_objects.values())
    assignments = _evaluate_lines(lines, table, result.errors)

    registry = IdRegistry.from_objects(existing_objects)
    scene: dict[str, SceneObject] = dict(existing_objects)
    for assignment in assignments:
        name = assignment.line.target
        shape = classify(assignment.value)
        if shape is None:
            scene.pop(name, None)
            continue
        obj = materialize(
            name,
            shape,
            registry,
            previous=scene.get(name),
            derivation=derivation_for(assignment.expression),
        )
        result.new_objects[obj.id] = obj
        scene[name] = obj
        result.temp_objects.extend(generate_ghosts(assignment.expression, scene, mode))

    logger.debug(
        "evaluated %d lines: %d objects, %d ghosts, %d errors",
        len(lines),
        len(result.new_objects),
        len(result.temp_objects),
        len(result.errors),
    )
    return result


__all__ = ["evaluate"]
