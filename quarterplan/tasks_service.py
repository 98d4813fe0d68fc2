"""Tasks service layer.

Mutations read the whole store, apply one change and write it back. Dates in
payloads are re-canonicalized to ``YYYY-MM-DD`` before they are stored, and
the (name, start, end) triple is kept unique across tasks.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, cast

from .api_types import FieldError, StoredSubtask, SubtaskPayload
from .errors import BadRequestError, ConflictError, NotFoundError, ValidationError
from .quarter import format_iso_date, parse_iso_date
from .task_store import TaskStore
from .task_utils import (
    Subtask,
    Task,
    create_stored_subtask,
    new_id,
    normalize_subtask,
    normalize_task,
    normalize_tasks,
    parse_date_time,
    validate_subtask_payload,
    validate_task_payload,
)

log = logging.getLogger(__name__)


def _find_index(tasks: list[dict[str, Any]], task_id: str) -> int:
    for i, raw in enumerate(tasks):
        if isinstance(raw, Mapping) and raw.get("id") == task_id:
            return i
    raise NotFoundError("task not found")


def _checked_fields(payload: Mapping[str, str]) -> tuple[str, str, str]:
    """Return (name, start, end) canonicalized, or raise ValidationError."""
    errors: list[FieldError] = []
    name = payload["name"].strip()
    if not name:
        errors.append({"field": "name", "message": "name required"})
    start = parse_iso_date(payload["start"])
    if start is None:
        errors.append({"field": "start", "message": "invalid date"})
    end = parse_iso_date(payload["end"])
    if end is None:
        errors.append({"field": "end", "message": "invalid date"})
    if start is not None and end is not None and start > end:
        errors.append({"field": "end", "message": "end must not be before start"})
    if errors or start is None or end is None:
        raise ValidationError(errors)
    return name, format_iso_date(start), format_iso_date(end)


def list_tasks(store: TaskStore, *, today: date | None = None) -> list[Task]:
    return normalize_tasks(store.read_tasks(), today=today)


def get_task(store: TaskStore, task_id: str) -> Task:
    for task in list_tasks(store):
        if task.id == task_id:
            return task
    raise NotFoundError("task not found")


def create_task(store: TaskStore, payload: object) -> Task:
    data = validate_task_payload(payload)
    if data is None:
        raise BadRequestError("invalid_payload")
    name, start, end = _checked_fields(data)
    raws = store.read_tasks()
    existing = normalize_tasks(raws)
    if any(t.dedup_key == (name, start, end) for t in existing):
        raise ConflictError("task already exists")
    requested_id = payload.get("id") if isinstance(payload, Mapping) else None
    if isinstance(requested_id, str) and any(t.id == requested_id for t in existing):
        raise ConflictError("task id already exists")
    record: dict[str, Any] = {
        "id": requested_id if isinstance(requested_id, str) and requested_id else new_id(),
        "name": name,
        "start": start,
        "end": end,
    }
    raws.append(record)
    store.write_tasks(raws)
    log.info("task created id=%s start=%s end=%s", record["id"], start, end)
    return cast(Task, normalize_task(record))


def update_task(store: TaskStore, payload: object) -> Task:
    data = validate_task_payload(payload, require_id=True)
    if data is None:
        raise BadRequestError("invalid_payload")
    name, start, end = _checked_fields(data)
    task_id = data["id"]
    raws = store.read_tasks()
    idx = _find_index(raws, task_id)
    updated = {**raws[idx], "id": task_id, "name": name, "start": start, "end": end}
    others = [raw for i, raw in enumerate(raws) if i != idx]
    if any(t.dedup_key == (name, start, end) for t in normalize_tasks(others)):
        raise ConflictError("another task already uses these details")
    raws[idx] = updated
    store.write_tasks(raws)
    log.info("task updated id=%s", task_id)
    return cast(Task, normalize_task(updated))


def delete_task(store: TaskStore, task_id: str) -> None:
    raws = store.read_tasks()
    idx = _find_index(raws, task_id)
    del raws[idx]
    store.write_tasks(raws)
    log.info("task deleted id=%s", task_id)


def _subtask_fields(payload: object) -> SubtaskPayload:
    """Accept either {title, timestamp} or the form shape {title, date, time}."""
    if not isinstance(payload, Mapping):
        raise BadRequestError("invalid_payload")
    if "timestamp" in payload:
        data = validate_subtask_payload(payload)
        if data is None:
            raise BadRequestError("invalid_payload")
        return data
    title, date_str, time_str = payload.get("title"), payload.get("date"), payload.get("time")
    if not isinstance(title, str) or not isinstance(date_str, str) or not isinstance(time_str, str):
        raise BadRequestError("invalid_payload")
    timestamp = parse_date_time(date_str, time_str)
    if timestamp is None:
        raise BadRequestError("invalid date or time")
    return {"title": title.strip(), "timestamp": timestamp}


def _raw_subtasks(raw: Mapping[str, Any]) -> list[StoredSubtask]:
    subs = raw.get("subtasks")
    return list(subs) if isinstance(subs, list) else []


def add_subtask(store: TaskStore, task_id: str, payload: object) -> dict[str, Any]:
    fields = _subtask_fields(payload)
    raws = store.read_tasks()
    idx = _find_index(raws, task_id)
    record = create_stored_subtask(fields["title"], fields["timestamp"])
    raws[idx] = {**raws[idx], "subtasks": [*_raw_subtasks(raws[idx]), record]}
    store.write_tasks(raws)
    log.info("subtask created id=%s task=%s", record["id"], task_id)
    return cast(Subtask, normalize_subtask(record)).to_dict()


def update_subtask(store: TaskStore, task_id: str, payload: object) -> dict[str, Any]:
    subtask_id = payload.get("subtaskId") if isinstance(payload, Mapping) else None
    if not isinstance(subtask_id, str) or not subtask_id:
        raise BadRequestError("subtask id is required")
    fields = _subtask_fields(payload)
    raws = store.read_tasks()
    idx = _find_index(raws, task_id)
    subs = _raw_subtasks(raws[idx])
    for i, sub in enumerate(subs):
        if isinstance(sub, Mapping) and sub.get("id") == subtask_id:
            break
    else:
        raise NotFoundError("subtask not found")
    record = create_stored_subtask(fields["title"], fields["timestamp"], subtask_id=subtask_id)
    subs[i] = record
    raws[idx] = {**raws[idx], "subtasks": subs}
    store.write_tasks(raws)
    log.info("subtask updated id=%s task=%s", subtask_id, task_id)
    return cast(Subtask, normalize_subtask(record)).to_dict()


def delete_subtask(store: TaskStore, task_id: str, subtask_id: str) -> None:
    raws = store.read_tasks()
    idx = _find_index(raws, task_id)
    subs = _raw_subtasks(raws[idx])
    kept = [s for s in subs if not (isinstance(s, Mapping) and s.get("id") == subtask_id)]
    if len(kept) == len(subs):
        raise NotFoundError("subtask not found")
    raws[idx] = {**raws[idx], "subtasks": kept}
    store.write_tasks(raws)
    log.info("subtask deleted id=%s task=%s", subtask_id, task_id)


__all__ = [
    "list_tasks",
    "get_task",
    "create_task",
    "update_task",
    "delete_task",
    "add_subtask",
    "update_subtask",
    "delete_subtask",
]
