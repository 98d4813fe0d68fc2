"""Quarter grid view model.

Combines a ``QuarterStructure`` with the normalized task list into what a
grid renderer needs: the visible months and weeks, and for every task row the
weeks it should highlight and the week each sub-task sits in.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from .api_types import ViewMode
from .quarter import (
    QuarterStructure,
    WeekInfo,
    local_date,
    parse_iso_date,
    parse_timestamp,
    shift_quarter,
    week_overlaps_range,
)
from .task_utils import Subtask, Task

VIEW_MODES: tuple[ViewMode, ...] = ("standard", "compact", "single-week")


@dataclass
class TaskRange:
    task: Task
    start: date
    end: date


def _ranges(tasks: list[Task]) -> list[TaskRange]:
    out: list[TaskRange] = []
    for task in tasks:
        start, end = parse_iso_date(task.start), parse_iso_date(task.end)
        if start is None or end is None:
            continue
        out.append(TaskRange(task, start, end))
    return out


def active_week_keys(structure: QuarterStructure, tasks: list[Task]) -> list[str]:
    """Keys of the weeks touched by at least one task."""
    ranges = _ranges(tasks)
    return [
        week.key
        for week in structure.weeks
        if any(week_overlaps_range(week, r.start, r.end) for r in ranges)
    ]


def subtask_week(structure: QuarterStructure, subtask: Subtask) -> WeekInfo | None:
    stamp = parse_timestamp(subtask.timestamp)
    if stamp is None:
        return None
    day = local_date(stamp)
    return next((w for w in structure.weeks if week_overlaps_range(w, day, day)), None)


def resolve_selected_week(structure: QuarterStructure, requested: str | None, active: list[str]) -> str | None:
    """Requested week if it exists, else the first active week, else the first week."""
    if not structure.weeks:
        return None
    keys = [w.key for w in structure.weeks]
    if requested and requested in keys:
        return requested
    return active[0] if active else keys[0]


def build_calendar_view(
    structure: QuarterStructure,
    tasks: list[Task],
    *,
    view: ViewMode = "standard",
    selected_week: str | None = None,
    locale: str = "en",
) -> dict[str, Any]:
    active = active_week_keys(structure, tasks)
    selected = resolve_selected_week(structure, selected_week, active)

    if view == "single-week":
        weeks = [w for w in structure.weeks if w.key == selected]
        months = [m for m in structure.months if any(w in weeks for w in m.weeks)]
        months_out = [
            {**m.to_dict(), "weeks": [w.to_dict() for w in m.weeks if w in weeks]} for m in months
        ]
    else:
        weeks = list(structure.weeks)
        months_out = [m.to_dict() for m in structure.months]

    rows: list[dict[str, Any]] = []
    for r in _ranges(tasks):
        row = r.task.to_dict()
        row["active_week_keys"] = [w.key for w in weeks if week_overlaps_range(w, r.start, r.end)]
        row["subtasks"] = []
        for sub in r.task.subtasks:
            week = subtask_week(structure, sub)
            row["subtasks"].append({**sub.to_dict(), "week_key": week.key if week else None})
        rows.append(row)

    prev_q = shift_quarter(structure.key, -1)
    next_q = shift_quarter(structure.key, 1)
    return {
        "year": structure.year,
        "quarter": structure.quarter,
        "label": structure.label,
        "locale": locale,
        "view": view,
        "months": months_out,
        "weeks": [w.to_dict() for w in weeks],
        "navigation": {
            "previous": {"year": prev_q.year, "quarter": prev_q.quarter},
            "next": {"year": next_q.year, "quarter": next_q.quarter},
        },
        "active_week_keys": active,
        "selected_week_key": selected,
        "tasks": rows,
    }


__all__ = [
    "VIEW_MODES",
    "active_week_keys",
    "subtask_week",
    "resolve_selected_week",
    "build_calendar_view",
]
