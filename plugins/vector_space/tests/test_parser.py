import ast

import pytest

from plugins.vector_space.core.parser import Kind, ParseError, desugar, infer_kind, parse_line, parse_script


def test_parse_script_assignments_and_line_ids():
    lines = parse_script("a = [1, 0, 0]\n\nb = a + [0, 1, 0]\n")
    assert [line.line_id for line in lines] == ["line-0", "line-2"]
    assert [line.target for line in lines] == ["a", "b"]
    assert all(line.error is None for line in lines)


def test_bare_expression_is_not_assignment():
    line = parse_line("1 + 2", 0)
    assert line is not None
    assert not line.is_assignment


def test_comment_lines_are_skipped():
    assert parse_script("# just a note\nx = 2")[0].line_id == "line-1"


def test_error_is_local_to_its_line():
    lines = parse_script("a = [1, 0, 0]\nb = [0, 1,\nc = 3")
    assert [line.line_id for line in lines] == ["line-0", "line-1", "line-2"]
    assert lines[0].error is None
    assert lines[1].error
    assert lines[2].error is None


@pytest.mark.parametrize(
    "source",
    [
        "__import__('os')",
        "a.b = 1",
        "x = 'text'",
        "x = a if b else c",
        "cross = 1",
        "x = True",
        "x = y = 1",
        "x = a % 2",
    ],
)
def test_disallowed_syntax(source):
    with pytest.raises(ParseError):
        parse_line(source, 0)


def test_caret_reads_as_power():
    line = parse_line("x = 2 ^ 3", 0)
    assert isinstance(line.expression, ast.BinOp)
    assert isinstance(line.expression.op, ast.Pow)


def test_infer_kind():
    env = {"a": Kind.VECTOR, "M": Kind.MATRIX, "k": Kind.SCALAR}
    assert infer_kind(ast.parse("[1, 2]", mode="eval").body, env) is Kind.VECTOR
    assert infer_kind(ast.parse("[[1, 2], [3, 4]]", mode="eval").body, env) is Kind.MATRIX
    assert infer_kind(ast.parse("M * a", mode="eval").body, env) is Kind.VECTOR
    assert infer_kind(ast.parse("k * a + a", mode="eval").body, env) is Kind.VECTOR
    assert infer_kind(ast.parse("q + 1", mode="eval").body, env) is Kind.UNKNOWN


def test_desugar_rewrites_vector_products_only():
    env = {"a": Kind.VECTOR, "b": Kind.VECTOR, "k": Kind.SCALAR}
    cross_line = parse_line("c = a * b", 0)
    rewritten = desugar(cross_line.expression, env)
    assert ast.unparse(rewritten) == "cross(a, b)"
    assert isinstance(cross_line.expression, ast.BinOp)

    dot_line = parse_line("d = a ^ b", 0)
    assert ast.unparse(desugar(dot_line.expression, env)) == "dot(a, b)"

    scaled = parse_line("s = k * a", 0)
    assert ast.unparse(desugar(scaled.expression, env)) == "k * a"


def test_deep_nesting_is_a_parse_error():
    with pytest.raises(ParseError, match="nested too deeply"):
        parse_line("x = " + "-" * 150 + "1", 0)
    assert parse_line("x = " + "-" * 20 + "1", 0).target == "x"
