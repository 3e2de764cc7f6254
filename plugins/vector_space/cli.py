"""Command line interface for the Vector Space plugin."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from .core import (
    OPERATIONS,
    NotificationLog,
    SceneDocument,
    SceneDocumentError,
    VisualizationMode,
    dump_scene,
    evaluate,
    load_scene,
    run_operation,
)


def _print(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _load_document(path: str | None) -> SceneDocument:
    if not path:
        return SceneDocument()
    try:
        return load_scene(json.loads(Path(path).read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, SceneDocumentError) as exc:
        raise SystemExit(f"Cannot load scene {path}: {exc}") from exc


def command_evaluate(args: argparse.Namespace) -> None:
    script = Path(args.file).read_text(encoding="utf-8")
    document = _load_document(args.scene)
    mode = VisualizationMode(args.mode) if args.mode else document.visualization_mode
    result = evaluate(script, document.by_name(), mode)
    if args.save:
        objects = {obj.name: obj for obj in document.objects.values()}
        objects.update({obj.name: obj for obj in result.new_objects.values()})
        updated = SceneDocument(
            objects={obj.id: obj for obj in objects.values()},
            basis_vector_ids=document.basis_vector_ids,
            visualization_mode=mode,
            script=script,
        )
        Path(args.save).write_text(json.dumps(dump_scene(updated), indent=2), encoding="utf-8")
    _print(result.to_dict())


def command_operate(args: argparse.Namespace) -> None:
    document = _load_document(args.scene)
    notifications = NotificationLog()
    result = run_operation(args.operation, args.ids, document.objects, notifications)
    _print({**result.to_dict(), "notifications": notifications.entries})
    if not result.ok:
        raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Vector Space CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    modes = [mode.value for mode in VisualizationMode]
    evaluate_parser = subparsers.add_parser("evaluate", help="Evaluate a script file")
    evaluate_parser.add_argument("file", help="Script with one 'name = expression' per line")
    evaluate_parser.add_argument("--mode", choices=modes, default=None, help="Visualization mode for ghost vectors")
    evaluate_parser.add_argument("--scene", help="Scene document (JSON) providing existing objects")
    evaluate_parser.add_argument("--save", help="Write the updated scene document to this path")
    evaluate_parser.set_defaults(func=command_evaluate)

    operate_parser = subparsers.add_parser("operate", help="Run an operation on objects of a scene document")
    operate_parser.add_argument("operation", choices=sorted(OPERATIONS), help="Operation name")
    operate_parser.add_argument("ids", nargs="+", help="Operand object ids")
    operate_parser.add_argument("--scene", required=True, help="Scene document (JSON)")
    operate_parser.set_defaults(func=command_operate)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
