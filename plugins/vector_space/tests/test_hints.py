import ast

import pytest

from plugins.vector_space.core import Matrix, Vector, VisualizationMode
from plugins.vector_space.core.hints import generate_ghosts
from plugins.vector_space.core.scene import GHOST_COLOR


def _expr(source: str) -> ast.expr:
    return ast.parse(source, mode="eval").body


@pytest.fixture
def scene():
    return {
        "a": Vector(id="a", name="a", end=(2, 0, 0)),
        "b": Vector(id="b", name="b", end=(0, 1, 0)),
        "M": Matrix(id="M", name="M", values=((1, 0), (0, 1))),
    }


def test_tip_to_tail_addition(scene):
    (ghost,) = generate_ghosts(_expr("a + b"), scene, VisualizationMode.TIP_TO_TAIL)
    assert ghost.start == (2.0, 0.0, 0.0)
    assert ghost.end == (2.0, 1.0, 0.0)
    assert ghost.color == GHOST_COLOR
    assert ghost.id.startswith("ghost-")


def test_subtraction_negates_right_operand(scene):
    (ghost,) = generate_ghosts(_expr("a - b"), scene, VisualizationMode.TIP_TO_TAIL)
    assert ghost.start == (2.0, 0.0, 0.0)
    assert ghost.end == (2.0, -1.0, 0.0)


def test_parallelogram_adds_both_translations(scene):
    ghosts = generate_ghosts(_expr("a + b"), scene, VisualizationMode.PARALLELOGRAM)
    assert len(ghosts) == 2
    assert ghosts[1].start == (0.0, 1.0, 0.0)
    assert ghosts[1].end == (2.0, 1.0, 0.0)
    assert ghosts[0].id != ghosts[1].id


@pytest.mark.parametrize("source", ["a + b + b", "a + [0, 1, 0]", "2 * a", "a + M", "a + c"])
def test_only_two_named_vectors_get_ghosts(scene, source):
    assert generate_ghosts(_expr(source), scene, VisualizationMode.PARALLELOGRAM) == []


def test_mode_none_has_no_ghosts(scene):
    assert generate_ghosts(_expr("a + b"), scene, VisualizationMode.NONE) == []
