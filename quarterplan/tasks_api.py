"""Tasks API.

JSON endpoints over the task store. Payload checks and store mutations live
in ``tasks_service``; this module only maps them onto HTTP.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request, url_for
from flask.typing import ResponseReturnValue

from .task_store import get_store
from .tasks_service import (
    add_subtask as svc_add_subtask,
    create_task as svc_create_task,
    delete_subtask as svc_delete_subtask,
    delete_task as svc_delete_task,
    get_task as svc_get_task,
    list_tasks as svc_list_tasks,
    update_subtask as svc_update_subtask,
    update_task as svc_update_task,
)

bp = Blueprint("tasks_api", __name__, url_prefix="/api/tasks")


@bp.get("")
def list_tasks() -> ResponseReturnValue:
    tasks = svc_list_tasks(get_store())
    return jsonify([t.to_dict() for t in tasks])


@bp.post("")
def create_task() -> ResponseReturnValue:
    data = request.get_json(silent=True)
    task = svc_create_task(get_store(), data)
    resp = jsonify(task.to_dict())
    resp.status_code = 201
    resp.headers["Location"] = url_for("tasks_api.get_task", task_id=task.id)
    return resp


@bp.put("")
def update_task() -> ResponseReturnValue:
    data = request.get_json(silent=True)
    task = svc_update_task(get_store(), data)
    return jsonify(task.to_dict())


@bp.get("/<task_id>")
def get_task(task_id: str) -> ResponseReturnValue:
    return jsonify(svc_get_task(get_store(), task_id).to_dict())


@bp.delete("/<task_id>")
def delete_task(task_id: str) -> ResponseReturnValue:
    svc_delete_task(get_store(), task_id)
    return jsonify({"ok": True})


@bp.post("/<task_id>/subtasks")
def create_subtask(task_id: str) -> ResponseReturnValue:
    data = request.get_json(silent=True)
    subtask = svc_add_subtask(get_store(), task_id, data)
    return jsonify(subtask), 201


@bp.put("/<task_id>/subtasks")
def update_subtask(task_id: str) -> ResponseReturnValue:
    data = request.get_json(silent=True)
    return jsonify(svc_update_subtask(get_store(), task_id, data))


@bp.delete("/<task_id>/subtasks/<subtask_id>")
def delete_subtask(task_id: str, subtask_id: str) -> ResponseReturnValue:
    svc_delete_subtask(get_store(), task_id, subtask_id)
    return jsonify({"ok": True})
