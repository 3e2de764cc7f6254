"""Evaluation of parsed expressions against a per-pass symbol table."""

from __future__ import annotations

import ast
import math
from typing import Callable, Iterable, Mapping, Union

import numpy as np

from . import linalg
from .parser import CONSTANTS, EvaluationError, Kind
from .scene import Matrix, SceneObject, Vector

Value = Union[float, np.ndarray]

_CONSTANT_VALUES: dict[str, float] = {name: getattr(math, name) for name in CONSTANTS}


def kind_of(value: Value) -> Kind:
    if isinstance(value, np.ndarray):
        if value.ndim == 1:
            return Kind.VECTOR
        if value.ndim == 2:
            return Kind.MATRIX
        return Kind.UNKNOWN
    return Kind.SCALAR


def describe(value: Value) -> str:
    kind = kind_of(value)
    if kind == Kind.VECTOR:
        return f"vector of length {len(value)}"
    if kind == Kind.MATRIX:
        rows, cols = value.shape
        return f"{rows}x{cols} matrix"
    return kind.value


class SymbolTable:
    """Name to value bindings for a single evaluation pass."""

    def __init__(self, values: Mapping[str, Value] | None = None):
        self._values: dict[str, Value] = dict(values or {})

    @classmethod
    def from_objects(cls, objects: Iterable[SceneObject]) -> "SymbolTable":
        table = cls()
        for obj in objects:
            if isinstance(obj, Vector):
                table.bind(obj.name, np.array(obj.components, dtype=float))
            elif isinstance(obj, Matrix):
                table.bind(obj.name, np.array(obj.values, dtype=float))
        return table

    def bind(self, name: str, value: Value) -> None:
        self._values[name] = value

    def lookup(self, name: str) -> Value:
        if name in self._values:
            return self._values[name]
        if name in _CONSTANT_VALUES:
            return _CONSTANT_VALUES[name]
        raise EvaluationError(f"Undefined symbol '{name}'")

    def kinds(self) -> dict[str, Kind]:
        return {name: kind_of(value) for name, value in self._values.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._values


def _require(value: Value, kind: Kind, func: str) -> None:
    if kind_of(value) != kind:
        raise EvaluationError(f"{func}() expects a {kind.value}, got {describe(value)}")


def _unwrap(result: linalg.Result, func: str):
    if not result.ok:
        raise EvaluationError(f"{func}() failed: {result.status.value}")
    return result.payload


def _dot(a: Value, b: Value) -> Value:
    _require(a, Kind.VECTOR, "dot")
    _require(b, Kind.VECTOR, "dot")
    return _unwrap(linalg.dot_product(a, b), "dot")


def _cross(a: Value, b: Value) -> Value:
    _require(a, Kind.VECTOR, "cross")
    _require(b, Kind.VECTOR, "cross")
    return np.array(_unwrap(linalg.cross_product(a, b), "cross"))


def _proj(a: Value, b: Value) -> Value:
    _require(a, Kind.VECTOR, "proj")
    _require(b, Kind.VECTOR, "proj")
    return np.array(_unwrap(linalg.project_vector(a, b), "proj"))


def _norm(v: Value) -> Value:
    if kind_of(v) == Kind.SCALAR:
        return abs(v)
    return float(np.linalg.norm(v))


def _normalize(v: Value) -> Value:
    _require(v, Kind.VECTOR, "normalize")
    length = float(np.linalg.norm(v))
    if length < linalg.PIVOT_TOLERANCE:
        raise EvaluationError("normalize() of a zero vector")
    return v / length


def _transpose(m: Value) -> Value:
    _require(m, Kind.MATRIX, "transpose")
    return m.T.copy()


def _inv(m: Value) -> Value:
    _require(m, Kind.MATRIX, "inv")
    return np.array(_unwrap(linalg.invert_matrix(m), "inv"))


def _det(m: Value) -> Value:
    _require(m, Kind.MATRIX, "det")
    if m.shape[0] != m.shape[1]:
        raise EvaluationError(f"det() expects a square matrix, got {describe(m)}")
    return float(np.linalg.det(m))


def _rank(m: Value) -> Value:
    _require(m, Kind.MATRIX, "rank")
    return float(linalg.matrix_rank(m))


def _identity(n: Value) -> Value:
    _require(n, Kind.SCALAR, "identity")
    if not math.isfinite(n) or n != int(n) or not 1 <= n <= 3:
        raise EvaluationError("identity() expects 1, 2 or 3")
    return np.eye(int(n))


def _scalar(fn: Callable[[float], float], name: str) -> Callable[[Value], Value]:
    def wrapped(value: Value) -> Value:
        _require(value, Kind.SCALAR, name)
        try:
            return fn(value)
        except (ValueError, OverflowError) as exc:
            raise EvaluationError(f"{name}() failed: {exc}") from exc

    return wrapped


FUNCTIONS: dict[str, Callable[..., Value]] = {
    "dot": _dot,
    "cross": _cross,
    "proj": _proj,
    "norm": _norm,
    "normalize": _normalize,
    "transpose": _transpose,
    "inv": _inv,
    "det": _det,
    "rank": _rank,
    "identity": _identity,
    "sqrt": _scalar(math.sqrt, "sqrt"),
    "sin": _scalar(math.sin, "sin"),
    "cos": _scalar(math.cos, "cos"),
    "tan": _scalar(math.tan, "tan"),
    "asin": _scalar(math.asin, "asin"),
    "acos": _scalar(math.acos, "acos"),
    "atan": _scalar(math.atan, "atan"),
    "exp": _scalar(math.exp, "exp"),
    "log": _scalar(math.log, "log"),
    "abs": _scalar(abs, "abs"),
}


def _mismatch(op: str, left: Value, right: Value) -> EvaluationError:
    return EvaluationError(f"Dimension mismatch: cannot apply '{op}' to {describe(left)} and {describe(right)}")


def _add_sub(op: ast.operator, left: Value, right: Value) -> Value:
    symbol = "+" if isinstance(op, ast.Add) else "-"
    left_kind, right_kind = kind_of(left), kind_of(right)
    if left_kind == right_kind == Kind.SCALAR:
        return left + right if symbol == "+" else left - right
    if left_kind != right_kind or np.shape(left) != np.shape(right):
        raise _mismatch(symbol, left, right)
    return left + right if symbol == "+" else left - right


def _multiply(left: Value, right: Value) -> Value:
    left_kind, right_kind = kind_of(left), kind_of(right)
    if Kind.SCALAR in (left_kind, right_kind):
        return left * right
    if left_kind == Kind.MATRIX and right.shape[0] == left.shape[1]:
        return left @ right
    if left_kind == Kind.VECTOR and right_kind == Kind.MATRIX and len(left) == right.shape[0]:
        return left @ right
    raise _mismatch("*", left, right)


def _divide(left: Value, right: Value) -> Value:
    if kind_of(right) != Kind.SCALAR:
        raise EvaluationError(f"Cannot divide by a {describe(right)}")
    if right == 0:
        raise EvaluationError("Division by zero")
    return left / right


def _power(left: Value, right: Value) -> Value:
    left_kind, right_kind = kind_of(left), kind_of(right)
    if right_kind != Kind.SCALAR:
        raise _mismatch("^", left, right)
    if left_kind == Kind.SCALAR:
        try:
            value = left**right
        except (OverflowError, ZeroDivisionError) as exc:
            raise EvaluationError(f"Power failed: {exc}") from exc
        if isinstance(value, complex):
            raise EvaluationError("Complex results are not supported")
        return value
    if left_kind == Kind.MATRIX:
        if left.shape[0] != left.shape[1]:
            raise EvaluationError(f"Matrix power needs a square matrix, got {describe(left)}")
        if not math.isfinite(right) or right != int(right):
            raise EvaluationError("Matrix power needs an integer exponent")
        try:
            return np.linalg.matrix_power(left, int(right))
        except np.linalg.LinAlgError as exc:
            raise EvaluationError("Matrix is singular") from exc
    raise _mismatch("^", left, right)


def _list_literal(elements: list[Value]) -> Value:
    if not elements:
        return np.zeros(0)
    kinds = {kind_of(element) for element in elements}
    if kinds == {Kind.SCALAR}:
        return np.array(elements, dtype=float)
    if kinds == {Kind.VECTOR}:
        if len({len(element) for element in elements}) != 1:
            raise EvaluationError("Matrix rows must have equal length")
        return np.vstack(elements)
    raise EvaluationError("List elements must all be numbers or all be rows of numbers")


def _eval_node(node: ast.AST, table: SymbolTable) -> Value:
    if isinstance(node, ast.Constant):
        try:
            return float(node.value)
        except OverflowError as exc:
            raise EvaluationError("Number is too large") from exc
    if isinstance(node, ast.Name):
        return table.lookup(node.id)
    if isinstance(node, ast.List):
        return _list_literal([_eval_node(element, table) for element in node.elts])
    if isinstance(node, ast.UnaryOp):
        operand = _eval_node(node.operand, table)
        return -operand if isinstance(node.op, ast.USub) else operand
    if isinstance(node, ast.BinOp):
        left = _eval_node(node.left, table)
        right = _eval_node(node.right, table)
        if isinstance(node.op, (ast.Add, ast.Sub)):
            return _add_sub(node.op, left, right)
        if isinstance(node.op, ast.Mult):
            return _multiply(left, right)
        if isinstance(node.op, ast.Div):
            return _divide(left, right)
        if isinstance(node.op, ast.Pow):
            return _power(left, right)
        raise EvaluationError("Operator not permitted")  # pragma: no cover - guarded by the parser
    if isinstance(node, ast.Call) and isinstance(node.func, ast.Name):
        func = FUNCTIONS.get(node.func.id)
        if func is None:
            raise EvaluationError(f"Unknown function '{node.func.id}'")
        args = [_eval_node(arg, table) for arg in node.args]
        try:
            return func(*args)
        except TypeError as exc:
            raise EvaluationError(f"Wrong number of arguments for {node.func.id}()") from exc
    raise EvaluationError("Unsupported syntax")  # pragma: no cover - guarded by the parser


def evaluate_expression(expression: ast.expr, table: SymbolTable) -> Value:
    """Evaluate a validated (and desugared) expression tree."""

    value = _eval_node(expression, table)
    if isinstance(value, np.ndarray):
        if value.ndim > 2:
            raise EvaluationError("Unsupported shape")
        if not np.all(np.isfinite(value)):
            raise EvaluationError("Result is not finite")
        return value
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        raise EvaluationError("Result is not finite")
    return value


__all__ = ["FUNCTIONS", "SymbolTable", "Value", "describe", "evaluate_expression", "kind_of"]
