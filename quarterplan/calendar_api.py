from __future__ import annotations

from datetime import date
from typing import cast

from flask import Blueprint, current_app, jsonify, make_response, redirect, request, url_for
from flask.typing import ResponseReturnValue

from .api_types import ViewMode
from .calendar_service import VIEW_MODES, build_calendar_view
from .errors import BadRequestError, NotFoundError
from .etag import is_not_modified, payload_etag
from .quarter import MONTH_NAMES, build_quarter_structure, quarter_from_date
from .task_store import get_store
from .tasks_service import list_tasks

bp = Blueprint("calendar_api", __name__, url_prefix="/api/calendar")

_CACHE_CONTROL = "private, max-age=0, must-revalidate"


def _parse_quarter(year_param: str, quarter_param: str) -> tuple[int, int]:
    try:
        year = int(year_param)
        quarter = int(quarter_param)
    except ValueError:
        raise NotFoundError("unknown quarter") from None
    if not (1 <= quarter <= 4) or not (1 <= year <= 9998):
        raise NotFoundError("unknown quarter")
    return year, quarter


def _locale() -> str:
    requested = (request.args.get("locale") or "").strip().lower()
    if requested:
        if requested not in MONTH_NAMES:
            raise BadRequestError("unsupported_locale", supported=sorted(MONTH_NAMES))
        return requested
    default = current_app.config.get("DEFAULT_LOCALE") or "en"
    return default if default in MONTH_NAMES else "en"


def _view() -> ViewMode:
    view = request.args.get("view") or "standard"
    if view not in VIEW_MODES:
        raise BadRequestError("invalid_view", supported=list(VIEW_MODES))
    return cast(ViewMode, view)


@bp.get("/current")
def current_quarter() -> ResponseReturnValue:
    key = quarter_from_date(date.today())
    return redirect(url_for("calendar_api.get_quarter", year=key.year, quarter=key.quarter))


@bp.get("/<year>/<quarter>")
def get_quarter(year: str, quarter: str) -> ResponseReturnValue:
    y, q = _parse_quarter(year, quarter)
    locale = _locale()
    view = _view()
    structure = build_quarter_structure(y, q, locale=locale)
    tasks = list_tasks(get_store())
    payload = build_calendar_view(
        structure,
        tasks,
        view=view,
        selected_week=request.args.get("week") or None,
        locale=locale,
    )
    etag = payload_etag(payload)
    if is_not_modified(etag, request.headers.get("If-None-Match")):
        resp = make_response("")
        resp.status_code = 304
    else:
        resp = jsonify(payload)
    resp.headers["ETag"] = etag
    resp.headers["Cache-Control"] = _CACHE_CONTROL
    return resp
