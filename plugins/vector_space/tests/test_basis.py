from plugins.vector_space.core import BasisState, Matrix, NotificationLog, Status, Vector, resolve_basis


def _objects():
    return {
        "x": Vector(id="x", name="x", end=(1, 0, 0)),
        "y": Vector(id="y", name="y", end=(0, 1, 0)),
        "z": Vector(id="z", name="z", end=(0, 0, 1)),
        "w": Vector(id="w", name="w", end=(1, 1, 1)),
        "x2": Vector(id="x2", name="x2", end=(2, 0, 0)),
        "M": Matrix(id="M", name="M", values=((1, 0), (0, 1))),
    }


def test_set_basis_commits_and_notifies():
    log = NotificationLog()
    state = BasisState(notify=log)
    result = state.set_basis(["x", "y"], _objects())
    assert result.ok
    assert state.basis_ids == ("x", "y")
    assert log.entries == [{"message": "Basis set to (x, y)", "level": "success"}]


def test_four_vectors_rejected_and_previous_basis_kept():
    log = NotificationLog()
    state = BasisState(basis_ids=("x", "y", "z"), notify=log)
    result = state.set_basis(["x", "y", "z", "w"], _objects())
    assert result.status is Status.INVALID_BASIS
    assert state.basis_ids == ("x", "y", "z")
    assert log.entries[-1]["level"] == "error"


def test_dependent_vectors_rejected():
    log = NotificationLog()
    state = BasisState(basis_ids=("x", "y"), notify=log)
    assert state.set_basis(["x", "x2"], _objects()).status is Status.INVALID_BASIS
    assert state.basis_ids == ("x", "y")
    assert log.entries == [{"message": "Basis vectors must be linearly independent", "level": "error"}]


def test_non_vector_or_unknown_ids_rejected():
    state = BasisState(notify=NotificationLog())
    assert state.set_basis(["x", "M"], _objects()).status is Status.INVALID_TYPE
    assert state.set_basis(["x", "missing"], _objects()).status is Status.INVALID_TYPE
    assert state.basis_ids == ()


def test_resolve_basis_and_clear():
    resolved = resolve_basis(["x", "y", "z"], _objects())
    assert [vector.name for vector in resolved.payload] == ["x", "y", "z"]
    state = BasisState(basis_ids=("x", "y"), notify=NotificationLog())
    state.clear()
    assert state.basis_ids == ()
