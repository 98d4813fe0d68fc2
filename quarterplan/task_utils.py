"""Task and sub-task normalization.

Turns raw JSON records (from the store or from request bodies) into trusted
``Task``/``Subtask`` values. Invalid records yield ``None``; callers drop
them from lists or reject the request. Input records are never mutated.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .api_types import StoredSubtask, SubtaskPayload, TaskPayload
from .quarter import add_days, format_iso_date, format_timestamp, parse_iso_date, parse_timestamp

log = logging.getLogger(__name__)

UNTITLED_SUBTASK = "Untitled subtask"
UNTITLED_TASK = "Untitled Task"


@dataclass
class Subtask:
    id: str
    title: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "timestamp": self.timestamp}


@dataclass
class Task:
    id: str
    name: str
    start: str
    end: str
    subtasks: list[Subtask] = field(default_factory=list)
    duration_days: int | None = None

    @property
    def dedup_key(self) -> tuple[str, str, str]:
        return (self.name, self.start, self.end)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "start": self.start,
            "end": self.end,
            "subtasks": [s.to_dict() for s in self.subtasks],
        }
        if self.duration_days is not None:
            out["durationDays"] = self.duration_days
        return out


def new_id() -> str:
    return str(uuid.uuid4())


def _duration(raw: object) -> int:
    if raw is None:
        return 0
    try:
        return int(float(raw))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 0


def _canonical_timestamp(raw: str) -> str | None:
    parsed = parse_timestamp(raw)
    return format_timestamp(parsed) if parsed is not None else None


def normalize_subtask(raw: Mapping[str, Any] | None) -> Subtask | None:
    if not isinstance(raw, Mapping):
        return None
    title = raw.get("title")
    timestamp = raw.get("timestamp")
    if not isinstance(title, str) or not isinstance(timestamp, str):
        return None
    canonical = _canonical_timestamp(timestamp)
    if canonical is None:
        return None
    sid = raw.get("id")
    return Subtask(
        id=sid if isinstance(sid, str) and sid else new_id(),
        title=title.strip() or UNTITLED_SUBTASK,
        timestamp=canonical,
    )


def normalize_task(raw: Mapping[str, Any] | None, today: date | None = None) -> Task | None:
    """Normalize one stored task.

    ``start`` falls back to ``today`` when missing or unparseable. ``end``
    falls back to ``start + durationDays`` (never negative) and is clamped
    so it never precedes ``start``.
    """
    if not isinstance(raw, Mapping):
        return None
    name = raw.get("name")
    if not isinstance(name, str):
        return None

    raw_start = raw.get("start")
    start = parse_iso_date(raw_start) if isinstance(raw_start, str) and raw_start else None
    if start is None:
        start = today or date.today()

    raw_end = raw.get("end")
    end = parse_iso_date(raw_end) if isinstance(raw_end, str) and raw_end else None
    if end is None:
        try:
            end = add_days(start, max(_duration(raw.get("durationDays")), 0))
        except OverflowError:
            end = start
    elif end < start:
        log.debug("task %r ends before it starts; clamping end to start", raw.get("id"))
        end = start

    raw_subtasks = raw.get("subtasks")
    subtasks: list[Subtask] = []
    if isinstance(raw_subtasks, list):
        for item in raw_subtasks:
            sub = normalize_subtask(item)
            if sub is None:
                log.debug("dropping invalid subtask on task %r", raw.get("id"))
                continue
            subtasks.append(sub)

    tid = raw.get("id")
    duration = raw.get("durationDays")
    return Task(
        id=tid if isinstance(tid, str) and tid else new_id(),
        name=name.strip() or UNTITLED_TASK,
        start=format_iso_date(start),
        end=format_iso_date(end),
        subtasks=subtasks,
        duration_days=_duration(duration) if duration is not None else None,
    )


def normalize_tasks(raws: Iterable[Mapping[str, Any] | None], today: date | None = None) -> list[Task]:
    """Normalize a list of stored tasks, dropping invalid ones and duplicates.

    Two tasks sharing name, start and end are considered the same task; the
    first one wins.
    """
    seen: set[tuple[str, str, str]] = set()
    tasks: list[Task] = []
    for raw in raws:
        task = normalize_task(raw, today=today)
        if task is None:
            continue
        if task.dedup_key in seen:
            log.debug("dropping duplicate task %r", task.id)
            continue
        seen.add(task.dedup_key)
        tasks.append(task)
    return tasks


def validate_task_payload(payload: object, require_id: bool = False) -> TaskPayload | None:
    """Structural check for task writes; dates are not parsed here."""
    if not isinstance(payload, Mapping):
        return None
    if require_id and not isinstance(payload.get("id"), str):
        return None
    name, start, end = payload.get("name"), payload.get("start"), payload.get("end")
    if not isinstance(name, str) or not isinstance(start, str) or not isinstance(end, str):
        return None
    out: TaskPayload = {"name": name, "start": start, "end": end}
    if require_id:
        out["id"] = payload["id"]
    return out


def validate_subtask_payload(payload: object) -> SubtaskPayload | None:
    if not isinstance(payload, Mapping):
        return None
    title, timestamp = payload.get("title"), payload.get("timestamp")
    if not isinstance(title, str) or not isinstance(timestamp, str):
        return None
    canonical = _canonical_timestamp(timestamp)
    if canonical is None:
        return None
    return {"title": title.strip(), "timestamp": canonical}


def parse_date_time(date_str: str, time_str: str) -> str | None:
    """Combine ``YYYY-MM-DD`` and ``HH:MM`` into a canonical timestamp."""
    return _canonical_timestamp(f"{date_str}T{time_str}")


def create_stored_subtask(title: str, timestamp: str, subtask_id: str | None = None) -> StoredSubtask:
    return {"id": subtask_id or new_id(), "title": title.strip(), "timestamp": timestamp}


__all__ = [
    "Subtask",
    "Task",
    "UNTITLED_SUBTASK",
    "UNTITLED_TASK",
    "normalize_subtask",
    "normalize_task",
    "normalize_tasks",
    "validate_task_payload",
    "validate_subtask_payload",
    "parse_date_time",
    "create_stored_subtask",
    "new_id",
]
