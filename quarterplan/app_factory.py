"""Flask application factory.

Provides:
 - App factory with configuration override
 - Request id + timing middleware with one structured log line per request
 - RFC7807 problem+json error handlers
 - Blueprint registration (tasks, calendar, health)
"""

from __future__ import annotations

import os
import time
import uuid
from typing import Any

from dotenv import load_dotenv
from flask import Flask, g, request
from werkzeug.wrappers.response import Response

from .calendar_api import bp as calendar_api_bp
from .config import Config
from .errors import register_error_handlers
from .health_api import bp as health_bp
from .logging_setup import configure_logging, install_support_log_handler
from .tasks_api import bp as tasks_api_bp


def create_app(config_override: dict[str, Any] | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__)

    # --- Configuration ---
    cfg = Config.from_env()
    if config_override:
        known = {k: v for k, v in config_override.items() if hasattr(cfg, k)}
        if known:
            cfg.override(known)
    if not cfg.tasks_file:
        os.makedirs(app.instance_path, exist_ok=True)
        cfg.tasks_file = os.path.join(app.instance_path, "tasks.json")
    app.config.update(cfg.to_flask_dict())
    if config_override:
        for k, v in config_override.items():  # also allow direct Flask config keys
            if k.isupper():
                app.config[k] = v

    # --- Logging / timing middleware ---
    log = configure_logging(app.config["LOG_LEVEL"])
    install_support_log_handler()
    log.info("tasks file: %s", app.config["TASKS_FILE"])

    @app.before_request
    def _before_req() -> None:
        g._t0 = time.perf_counter()
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())

    @app.after_request
    def _after_req(resp: Response) -> Response:
        dur_ms = int((time.perf_counter() - getattr(g, "_t0", time.perf_counter())) * 1000)
        rid = getattr(g, "request_id", None) or str(uuid.uuid4())
        resp.headers["X-Request-Id"] = rid
        resp.headers["X-Request-Duration-ms"] = str(dur_ms)
        if "Cache-Control" not in resp.headers:
            resp.headers["Cache-Control"] = "no-store"
        log.info(
            {
                "request_id": rid,
                "method": request.method,
                "path": request.path,
                "status": resp.status_code,
                "duration_ms": dur_ms,
            }
        )
        return resp

    # --- Error handling ---
    register_error_handlers(app)

    # --- Blueprints ---
    app.register_blueprint(tasks_api_bp)
    app.register_blueprint(calendar_api_bp)
    app.register_blueprint(health_bp)

    return app


__all__ = ["create_app"]
