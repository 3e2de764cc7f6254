"""Application factory for the Vector Space service."""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Iterable

import yaml
from flask import Flask
from werkzeug.exceptions import HTTPException

from common.errors import AppError, ensure_app_error
from common.logging import get_logger, install_request_logging
from common.responses import fail, ok

from . import config as config_module
from .blueprints import register_plugin_blueprints

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yml"

logger = get_logger("vector_space.app")


def _load_yaml_config(path: Path = CONFIG_PATH) -> dict:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _discover_plugins(package: str = "plugins") -> Iterable[str]:
    """Yield import paths for all plugin packages."""

    package_path = Path(__file__).resolve().parent.parent / package
    if not package_path.exists():
        return []
    for module_info in pkgutil.iter_modules([str(package_path)]):
        if module_info.ispkg:
            yield f"{package}.{module_info.name}"


def _load_manifests(plugin_settings: dict) -> list[dict[str, str]]:
    manifests: list[dict[str, str]] = []
    for dotted in _discover_plugins():
        module = importlib.import_module(dotted)
        manifest = getattr(module, "manifest", None)
        if not manifest:
            continue
        entry = dict(manifest)
        plugin_config = plugin_settings.get(entry.get("blueprint"), {}) or {}
        if plugin_config.get("summary"):
            entry["summary"] = plugin_config["summary"]
        manifests.append(entry)
    manifests.sort(key=lambda item: item["title"].lower())
    return manifests


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)
    app.config.from_object(config_module.BaseConfig)

    yaml_config = _load_yaml_config()
    site_settings = yaml_config.get("site", {}) or {}
    plugin_settings = yaml_config.get("plugins", {}) or {}

    app.config["SITE_SETTINGS"] = site_settings
    if "max_content_length_mb" in site_settings:
        try:
            app.config["MAX_CONTENT_LENGTH"] = int(float(site_settings["max_content_length_mb"]) * 1024 * 1024)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid max_content_length_mb=%r", site_settings["max_content_length_mb"])
    app.config["PLUGIN_SETTINGS"] = plugin_settings

    if config_name:
        config_obj = getattr(config_module, config_name, None)
        if config_obj:
            app.config.from_object(config_obj)

    install_request_logging(app)
    register_plugin_blueprints(app)
    app.config["PLUGIN_MANIFESTS"] = _load_manifests(plugin_settings)

    @app.after_request
    def apply_response_headers(response):
        """Attach strict security headers to every outgoing response."""

        configured = app.config.get("RESPONSE_HEADERS", {})
        for header, value in configured.items():
            if header not in response.headers:
                response.headers[header] = value
        return response

    @app.route("/")
    def home():
        return ok(
            {
                "site": {key: site_settings[key] for key in ("title", "description") if key in site_settings},
                "plugins": app.config["PLUGIN_MANIFESTS"],
            }
        )

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        return fail(error)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return fail(
            AppError(
                message=error.description or error.name,
                code=f"http.{error.code}",
                status_code=error.code or 500,
            )
        )

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):  # pragma: no cover - last resort
        logger.exception("Unhandled error")
        wrapped = ensure_app_error(error, fallback_code="internal_error")
        wrapped.message = "Internal server error"
        return fail(wrapped)

    return app


__all__ = ["create_app"]
