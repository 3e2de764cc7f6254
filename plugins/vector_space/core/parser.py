"""Line-oriented parsing of vector-space scripts.

Each non-blank line is either ``name = expression`` or a bare expression.
Lines are parsed with :mod:`ast` (``^`` is read as power) and checked
against a whitelist of node types, so a malformed line only produces an
error for that line.
"""

from __future__ import annotations

import ast
import copy
from dataclasses import dataclass
from enum import Enum
from typing import Mapping


class ExpressionError(ValueError):
    """Base class for per-line script failures."""


class ParseError(ExpressionError):
    """Raised when a line is not a valid assignment or expression."""


class EvaluationError(ExpressionError):
    """Raised when a parsed line cannot be evaluated."""


class Kind(str, Enum):
    SCALAR = "scalar"
    VECTOR = "vector"
    MATRIX = "matrix"
    UNKNOWN = "unknown"


CONSTANTS = frozenset({"pi", "e"})
SCALAR_FUNCTIONS = frozenset({"sqrt", "sin", "cos", "tan", "asin", "acos", "atan", "exp", "log", "abs"})
FUNCTION_KINDS: dict[str, Kind] = {
    **{name: Kind.SCALAR for name in SCALAR_FUNCTIONS},
    "dot": Kind.SCALAR,
    "norm": Kind.SCALAR,
    "det": Kind.SCALAR,
    "rank": Kind.SCALAR,
    "cross": Kind.VECTOR,
    "normalize": Kind.VECTOR,
    "proj": Kind.VECTOR,
    "transpose": Kind.MATRIX,
    "inv": Kind.MATRIX,
    "identity": Kind.MATRIX,
}
RESERVED_NAMES = CONSTANTS | frozenset(FUNCTION_KINDS)

_MAX_LINE_LENGTH = 1024
_MAX_DEPTH = 100


@dataclass(frozen=True, slots=True)
class ParsedLine:
    line_id: str
    index: int
    source: str
    target: str | None = None
    expression: ast.expr | None = None
    error: str | None = None

    @property
    def is_assignment(self) -> bool:
        return self.target is not None


def line_id(index: int) -> str:
    return f"line-{index}"


def _normalize_line(line: str) -> str:
    line = line.strip()
    if len(line) > _MAX_LINE_LENGTH:
        raise ParseError("Line is too long")
    return line.replace("^", "**")


def _validate_name(name: str) -> None:
    if name.startswith("__"):
        raise ParseError("Names starting with __ are not allowed")


def _validate_ast(node: ast.AST, depth: int = 0) -> None:
    if depth > _MAX_DEPTH:
        raise ParseError("Expression is nested too deeply")
    if isinstance(node, ast.BinOp):
        if not isinstance(node.op, (ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Pow)):
            raise ParseError("Operator not permitted")
        _validate_ast(node.left, depth + 1)
        _validate_ast(node.right, depth + 1)
        return
    if isinstance(node, ast.UnaryOp):
        if not isinstance(node.op, (ast.UAdd, ast.USub)):
            raise ParseError("Unary operator not permitted")
        _validate_ast(node.operand, depth + 1)
        return
    if isinstance(node, ast.List):
        for element in node.elts:
            _validate_ast(element, depth + 1)
        return
    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name):
            raise ParseError("Only named functions are permitted")
        if node.keywords:
            raise ParseError("Keyword arguments are not supported")
        _validate_name(node.func.id)
        for arg in node.args:
            _validate_ast(arg, depth + 1)
        return
    if isinstance(node, ast.Name):
        _validate_name(node.id)
        return
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ParseError("Only numeric literals are allowed")
        return
    raise ParseError("Unsupported syntax")


def parse_line(source: str, index: int) -> ParsedLine | None:
    """Parse one line; returns ``None`` for comment-only lines."""

    normalized = _normalize_line(source)
    try:
        module = ast.parse(normalized, mode="exec")
    except SyntaxError as exc:
        raise ParseError(f"Could not parse line: {exc.msg}") from exc
    except (RecursionError, MemoryError) as exc:
        raise ParseError("Expression is nested too deeply") from exc
    if not module.body:
        return None
    if len(module.body) != 1:
        raise ParseError("Expected a single statement per line")

    statement = module.body[0]
    target: str | None = None
    if isinstance(statement, ast.Assign):
        if len(statement.targets) != 1 or not isinstance(statement.targets[0], ast.Name):
            raise ParseError("Assignment target must be a single name")
        target = statement.targets[0].id
        _validate_name(target)
        if target in RESERVED_NAMES:
            raise ParseError(f"'{target}' is a reserved name")
        expression = statement.value
    elif isinstance(statement, ast.Expr):
        expression = statement.value
    else:
        raise ParseError("Only assignments and expressions are supported")

    _validate_ast(expression)
    return ParsedLine(line_id=line_id(index), index=index, source=source, target=target, expression=expression)


def parse_script(script: str) -> list[ParsedLine]:
    """Split ``script`` into lines and parse each one independently."""

    parsed: list[ParsedLine] = []
    for index, raw in enumerate(script.splitlines()):
        if not raw.strip():
            continue
        try:
            line = parse_line(raw, index)
        except ParseError as exc:
            parsed.append(ParsedLine(line_id=line_id(index), index=index, source=raw, error=str(exc)))
            continue
        if line is not None:
            parsed.append(line)
    return parsed


def infer_kind(node: ast.AST, env: Mapping[str, Kind]) -> Kind:
    """Static shape of ``node`` given the kinds of the bound names."""

    if isinstance(node, ast.Constant):
        return Kind.SCALAR
    if isinstance(node, ast.Name):
        if node.id in env:
            return env[node.id]
        return Kind.SCALAR if node.id in CONSTANTS else Kind.UNKNOWN
    if isinstance(node, ast.List):
        kinds = {infer_kind(element, env) for element in node.elts}
        if kinds == {Kind.SCALAR}:
            return Kind.VECTOR
        if kinds == {Kind.VECTOR}:
            return Kind.MATRIX
        return Kind.UNKNOWN
    if isinstance(node, ast.UnaryOp):
        return infer_kind(node.operand, env)
    if isinstance(node, ast.Call) and isinstance(node.func, ast.Name):
        return FUNCTION_KINDS.get(node.func.id, Kind.UNKNOWN)
    if not isinstance(node, ast.BinOp):
        return Kind.UNKNOWN

    left = infer_kind(node.left, env)
    right = infer_kind(node.right, env)
    if Kind.UNKNOWN in (left, right):
        return Kind.UNKNOWN
    if isinstance(node.op, (ast.Add, ast.Sub)):
        return left if left == right else Kind.UNKNOWN
    if isinstance(node.op, ast.Mult):
        if left == Kind.SCALAR:
            return right
        if right == Kind.SCALAR:
            return left
        if left == Kind.VECTOR and right == Kind.VECTOR:
            return Kind.VECTOR
        if Kind.MATRIX in (left, right):
            return Kind.MATRIX if left == right else Kind.VECTOR
        return Kind.UNKNOWN
    if isinstance(node.op, ast.Div):
        return left if right == Kind.SCALAR else Kind.UNKNOWN
    if isinstance(node.op, ast.Pow):
        if left == Kind.VECTOR and right == Kind.VECTOR:
            return Kind.SCALAR
        return left if right == Kind.SCALAR else Kind.UNKNOWN
    return Kind.UNKNOWN


class _VectorProductRewriter(ast.NodeTransformer):
    """Rewrite ``u * v`` to ``cross(u, v)`` and ``u ^ v`` to ``dot(u, v)`` for vectors."""

    _TARGETS = {ast.Mult: "cross", ast.Pow: "dot"}

    def __init__(self, env: Mapping[str, Kind]):
        self.env = env

    def visit_BinOp(self, node: ast.BinOp) -> ast.AST:
        self.generic_visit(node)
        func = self._TARGETS.get(type(node.op))
        if func is None:
            return node
        if infer_kind(node.left, self.env) != Kind.VECTOR or infer_kind(node.right, self.env) != Kind.VECTOR:
            return node
        call = ast.Call(func=ast.Name(id=func, ctx=ast.Load()), args=[node.left, node.right], keywords=[])
        return ast.copy_location(call, node)


def desugar(expression: ast.expr, env: Mapping[str, Kind]) -> ast.expr:
    """Return a rewritten copy of ``expression``; the input tree is untouched."""

    rewritten = _VectorProductRewriter(env).visit(copy.deepcopy(expression))
    return ast.fix_missing_locations(rewritten)


__all__ = [
    "CONSTANTS",
    "EvaluationError",
    "ExpressionError",
    "FUNCTION_KINDS",
    "Kind",
    "ParseError",
    "ParsedLine",
    "RESERVED_NAMES",
    "desugar",
    "infer_kind",
    "line_id",
    "parse_line",
    "parse_script",
]
