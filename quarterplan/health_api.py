from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from .logging_setup import recent_records

bp = Blueprint("health_api", __name__)


@bp.get("/healthz")
def healthz() -> tuple[dict[str, Any], int]:
    # Minimal health endpoint for container orchestrators
    return {"status": "ok"}, 200


@bp.get("/api/support/logs")
def support_logs() -> tuple[dict[str, Any], int]:
    try:
        limit = max(0, min(int(request.args.get("limit", "100")), 500))
    except ValueError:
        limit = 100
    return {"ok": True, "items": recent_records(limit)}, 200
