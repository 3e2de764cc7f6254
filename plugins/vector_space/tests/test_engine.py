import pytest

from plugins.vector_space.core import (
    DerivationKind,
    Matrix,
    Point,
    Vector,
    VisualizationMode,
    evaluate,
)
from plugins.vector_space.core.scene import CROSS_PRODUCT_COLOR, MATRIX_COLOR, VECTOR_COLOR


def _by_name(result):
    return {obj.name: obj for obj in result.new_objects.values()}


def test_one_object_per_assigned_name():
    result = evaluate("a = [1, 2]\nM = [[1, 0], [0, 1]]\na = [3, 4, 5]", {})
    assert result.errors == {}
    objects = _by_name(result)
    assert set(objects) == {"a", "M"}
    assert isinstance(objects["a"], Vector)
    assert objects["a"].end == (3.0, 4.0, 5.0)
    assert objects["a"].color == VECTOR_COLOR
    assert isinstance(objects["M"], Matrix)
    assert objects["M"].color == MATRIX_COLOR


def test_ids_are_deterministic_and_idempotent():
    script = "a = [1, 0, 0]\nb = 2 * a"
    first = evaluate(script, {})
    second = evaluate(script, {})
    assert first.new_objects == second.new_objects
    assert set(first.new_objects) == {"a", "b"}


def test_existing_object_keeps_id_color_and_visibility():
    existing = {"a": Vector(id="vec-1", name="a", end=(1, 0, 0), color="#123456", visible=False)}
    result = evaluate("a = [0, 5, 0]", existing)
    updated = result.new_objects["vec-1"]
    assert updated.end == (0.0, 5.0, 0.0)
    assert updated.color == "#123456"
    assert updated.visible is False
    assert existing["a"].end == (1.0, 0.0, 0.0)


def test_existing_objects_are_in_scope():
    existing = {
        "u": Vector(id="u", name="u", end=(1, 2, 0)),
        "R": Matrix(id="R", name="R", values=((0, -1, 0), (1, 0, 0), (0, 0, 1))),
        "P": Point(id="P", name="P", position=(1, 1, 1)),
    }
    result = evaluate("w = R * u", existing)
    assert result.errors == {}
    assert result.new_objects["w"].components == pytest.approx((-2.0, 1.0, 0.0))
    assert "P" in evaluate("x = P", existing).errors["line-0"]


def test_middle_line_error_does_not_stop_others():
    result = evaluate("a = [1, 0, 0]\nb = [0, 1,\nc = [0, 0, 1]", {})
    assert set(_by_name(result)) == {"a", "c"}
    assert list(result.errors) == ["line-1"]


def test_evaluation_errors_are_reported_per_line():
    result = evaluate("a = [1, 2, 3]\nb = [1, 2]\nc = a + [1, 2]\nd = q\ne = 1 / 0", {})
    assert result.errors["line-2"] == (
        "Dimension mismatch: cannot apply '+' to vector of length 3 and vector of length 2"
    )
    assert result.errors["line-3"] == "Undefined symbol 'q'"
    assert result.errors["line-4"] == "Division by zero"
    assert set(_by_name(result)) == {"a", "b"}


def test_scalars_and_long_vectors_produce_no_object():
    result = evaluate("k = 3\nlong = [1, 2, 3, 4]\nv = k * [1, 1]", {})
    assert result.errors == {}
    objects = _by_name(result)
    assert set(objects) == {"v"}
    assert objects["v"].end == (3.0, 3.0, 0.0)


def test_vector_product_operators():
    result = evaluate("a = [1, 0, 0]\nb = [0, 1, 0]\nc = a * b\nd = a ^ b\ne = cross(a, b) + a", {})
    assert result.errors == {}
    objects = _by_name(result)
    assert objects["c"].end == (0.0, 0.0, 1.0)
    assert objects["c"].derivation.kind is DerivationKind.CROSS_PRODUCT
    assert objects["c"].derivation.operands == ("a", "b")
    assert objects["c"].color == CROSS_PRODUCT_COLOR
    assert "d" not in objects
    assert objects["e"].derivation is None


def test_matrix_functions():
    script = "M = [[2, 0], [0, 4]]\nN = inv(M)\nT = transpose([[1, 2], [3, 4]])\nI = identity(3)\nP = M ^ 2"
    objects = _by_name(evaluate(script, {}))
    assert objects["N"].values == ((0.5, 0.0), (0.0, 0.25))
    assert objects["T"].values == ((1.0, 3.0), (2.0, 4.0))
    assert objects["I"].shape == (3, 3)
    assert objects["P"].values == ((4.0, 0.0), (0.0, 16.0))


def test_singular_inverse_is_a_line_error():
    result = evaluate("M = [[1, 2], [2, 4]]\nN = inv(M)", {})
    assert result.errors == {"line-1": "inv() failed: Singular"}


def test_ragged_matrix_literal():
    result = evaluate("M = [[1, 2], [3]]", {})
    assert result.errors == {"line-0": "Matrix rows must have equal length"}


def test_tip_to_tail_ghost():
    result = evaluate("a = [1,0,0]\nb = [0,1,0]\nc = a + b", {}, VisualizationMode.TIP_TO_TAIL)
    assert set(result.new_objects) == {"a", "b", "c"}
    assert len(result.temp_objects) == 1
    ghost = result.temp_objects[0]
    assert ghost.start == (1.0, 0.0, 0.0)
    assert ghost.end == (1.0, 1.0, 0.0)
    assert ghost.id not in result.new_objects


def test_no_ghosts_without_mode():
    result = evaluate("a = [1,0,0]\nb = [0,1,0]\nc = a + b", {})
    assert result.temp_objects == []


def test_mode_accepts_plain_strings():
    result = evaluate("a = [1,0,0]\nb = [0,1,0]\nc = a - b", {}, "parallelogram")
    assert len(result.temp_objects) == 2


@pytest.mark.parametrize(
    "line",
    [
        "big = 1" + "0" * 400,
        "I = identity(1e309)",
        "I = identity(1e309 * 0)",
        "P = [[1, 0], [0, 1]] ^ 1e309",
        "x = " + "-" * 1000 + "1",
    ],
)
def test_numeric_edge_lines_fail_alone(line):
    result = evaluate(f"ok = [1, 0, 0]\n{line}\nb = [0, 1, 0]", {})
    assert set(_by_name(result)) == {"ok", "b"}
    assert list(result.errors) == ["line-1"]
