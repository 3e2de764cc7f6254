import json

from plugins.vector_space.cli import main


def test_evaluate_command_prints_result(tmp_path, capsys):
    script = tmp_path / "scene.txt"
    script.write_text("a = [1, 0, 0]\nb = [0, 1, 0]\nc = a + b\n", encoding="utf-8")
    saved = tmp_path / "scene.json"

    main(["evaluate", str(script), "--mode", "parallelogram", "--save", str(saved)])

    output = json.loads(capsys.readouterr().out)
    assert sorted(output["new_objects"]) == ["a", "b", "c"]
    assert len(output["temp_objects"]) == 2
    document = json.loads(saved.read_text(encoding="utf-8"))
    assert [item["name"] for item in document["objects"]] == ["a", "b", "c"]
    assert document["visualization_mode"] == "parallelogram"


def test_operate_command_uses_scene_document(tmp_path, capsys):
    scene = tmp_path / "scene.json"
    scene.write_text(
        json.dumps(
            {
                "objects": [
                    {"type": "vector", "id": "x", "name": "x", "end": [1, 0, 0]},
                    {"type": "vector", "id": "y", "name": "y", "end": [0, 1, 0]},
                ]
            }
        ),
        encoding="utf-8",
    )

    main(["operate", "dot", "x", "y", "--scene", str(scene)])

    output = json.loads(capsys.readouterr().out)
    assert output["status"] == "Success"
    assert output["payload"] == 0.0
