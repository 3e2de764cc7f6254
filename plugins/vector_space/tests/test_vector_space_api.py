from app import create_app


def _client(**settings):
    app = create_app("TestingConfig")
    if settings:
        app.config["PLUGIN_SETTINGS"]["vector_space"] = settings
    return app.test_client()


def _vector(object_id, end, **extra):
    return {"type": "vector", "id": object_id, "name": extra.pop("name", object_id), "end": end, **extra}


def test_evaluate_endpoint():
    client = _client()
    resp = client.post(
        "/api/vector_space/evaluate",
        json={"script": "a = [1,0,0]\nb = [0,1,0]\nc = a + b", "visualization_mode": "tip-to-tail"},
    )
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["success"] is True
    data = payload["data"]
    assert sorted(data["new_objects"]) == ["a", "b", "c"]
    assert data["new_objects"]["c"]["end"] == [1.0, 1.0, 0.0]
    assert len(data["temp_objects"]) == 1
    assert data["temp_objects"][0]["start"] == [1.0, 0.0, 0.0]
    assert data["errors"] == {}


def test_evaluate_keeps_line_numbers_and_existing_ids():
    client = _client()
    resp = client.post(
        "/api/vector_space/evaluate",
        json={
            "script": "\nv = v * 2\nw = [1, 2,",
            "objects": [_vector("vec-7", [1, 1, 0], name="v")],
        },
    )
    data = resp.get_json()["data"]
    assert data["new_objects"]["vec-7"]["end"] == [2.0, 2.0, 0.0]
    assert list(data["errors"]) == ["line-2"]


def test_evaluate_rejects_oversized_script():
    client = _client(max_script_chars=10, max_script_lines=5)
    resp = client.post("/api/vector_space/evaluate", json={"script": "a = [1, 2, 3]\n"})
    assert resp.status_code == 400
    error = resp.get_json()["error"]
    assert error["code"] == "vector_space.invalid_request"
    assert "size" in error["message"]


def test_evaluate_rejects_bad_payload():
    client = _client()
    resp = client.post("/api/vector_space/evaluate", json={"script": 1, "extra": True})
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_operation_endpoint():
    client = _client()
    resp = client.post(
        "/api/vector_space/operations/cross",
        json={"operand_ids": ["x", "y"], "objects": [_vector("x", [1, 0, 0]), _vector("y", [0, 1, 0])]},
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["data"]["status"] == "Success"
    assert body["data"]["payload"]["components"] == [0.0, 0.0, 1.0]
    assert body["notifications"] == [{"message": "Cross product computed", "level": "success"}]


def test_operation_failure_maps_status_to_error_code():
    client = _client()
    resp = client.post(
        "/api/vector_space/operations/inverse",
        json={
            "operand_ids": ["M"],
            "objects": [{"type": "matrix", "id": "M", "name": "M", "values": [[1, 2], [2, 4]]}],
        },
    )
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"]["code"] == "vector_space.Singular"
    assert body["error"]["details"] == {"status": "Singular"}
    assert body["notifications"][0]["level"] == "error"


def test_unknown_operation():
    client = _client()
    resp = client.post("/api/vector_space/operations/divide", json={"operand_ids": ["x"]})
    assert resp.status_code == 404


def test_operations_listing():
    client = _client()
    names = [item["name"] for item in client.get("/api/vector_space/operations").get_json()["data"]["operations"]]
    assert {"sum", "cross", "inverse", "eigen", "coordinates", "kernel"}.issubset(names)


def test_basis_endpoint_rejects_four_vectors():
    client = _client()
    objects = [
        _vector("x", [1, 0, 0]),
        _vector("y", [0, 1, 0]),
        _vector("z", [0, 0, 1]),
        _vector("w", [1, 1, 1]),
    ]
    ok_resp = client.post("/api/vector_space/basis", json={"ids": ["x", "y"], "objects": objects})
    assert ok_resp.status_code == 200
    assert ok_resp.get_json()["data"]["basis_vector_ids"] == ["x", "y"]

    resp = client.post(
        "/api/vector_space/basis",
        json={"ids": ["x", "y", "z", "w"], "objects": objects, "current_basis_ids": ["x", "y"]},
    )
    assert resp.status_code == 400
    error = resp.get_json()["error"]
    assert error["code"] == "vector_space.InvalidBasis"
    assert error["details"]["basis_vector_ids"] == ["x", "y"]


def test_transform_endpoint():
    client = _client()
    resp = client.post(
        "/api/vector_space/transform",
        json={
            "matrix": [[0, -1], [1, 0]],
            "objects": [_vector("x", [1, 0, 0]), {"type": "point", "id": "P", "name": "P", "position": [1, 2, 3]}],
        },
    )
    assert resp.status_code == 200
    objects = resp.get_json()["data"]["objects"]
    assert objects["x"]["end"] == [0.0, 1.0, 0.0]
    assert objects["P"]["position"] == [1.0, 2.0, 3.0]

    ragged = client.post("/api/vector_space/transform", json={"matrix": [[1, 0], [0]], "objects": []})
    assert ragged.status_code == 400
    assert ragged.get_json()["error"]["code"] == "vector_space.DimensionMismatch"


def test_scene_normalize():
    client = _client()
    resp = client.post(
        "/api/vector_space/scene/normalize",
        json={"objects": [_vector("v", [3, 4])], "basis_vector_ids": [], "script": "v = [3, 4]"},
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["objects"][0]["end"] == [3.0, 4.0, 0.0]
    assert data["visualization_mode"] == "none"

    bad = client.post("/api/vector_space/scene/normalize", json={"objects": [{"type": "circle"}]})
    assert bad.status_code == 400
    assert bad.get_json()["error"]["code"] == "vector_space.invalid_document"


def test_evaluate_keeps_valid_lines_when_a_line_overflows():
    client = _client()
    resp = client.post("/api/vector_space/evaluate", json={"script": "a = [1,0,0]\nI = identity(1e309)"})
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert list(data["new_objects"]) == ["a"]
    assert data["errors"]["line-1"] == "identity() expects 1, 2 or 3"
