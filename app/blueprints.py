"""Blueprint registration helpers."""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Iterable

from flask import Blueprint, Flask

from common.logging import get_logger

logger = get_logger("vector_space.app")


def _iter_blueprints(package: str = "plugins") -> Iterable[Blueprint]:
    """Collect ``blueprints`` (or a single ``bp``) from each ``<plugin>.api``."""

    module_path = Path(__file__).resolve().parent.parent / package
    if not module_path.exists():
        return []
    found: list[Blueprint] = []
    for module_info in pkgutil.iter_modules([str(module_path)]):
        if not module_info.ispkg:
            continue
        if not (module_path / module_info.name / "api").exists():
            continue
        module = importlib.import_module(f"{package}.{module_info.name}.api")
        module_blueprints = getattr(module, "blueprints", None)
        if module_blueprints:
            found.extend(module_blueprints)
            continue
        blueprint = getattr(module, "bp", None)
        if blueprint is not None:
            found.append(blueprint)
    return found


def register_plugin_blueprints(app: Flask) -> None:
    for bp in _iter_blueprints():
        app.register_blueprint(bp)
        logger.debug("registered blueprint %s at %s", bp.name, bp.url_prefix)


__all__ = ["register_plugin_blueprints"]
