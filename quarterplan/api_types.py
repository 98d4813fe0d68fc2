"""Request/record type contracts for the task API.

Stored records come straight out of the JSON store and are loosely typed:
every field may be missing or hold the wrong type, so the shapes below only
describe what a well-behaved client writes. ``quarterplan.task_utils`` is
the only place that turns them into trusted values.

Runtime behavior does not depend on these definitions; they exist for static
analysis.
"""

from __future__ import annotations

from typing import Literal, NotRequired, TypedDict

ViewMode = Literal["standard", "compact", "single-week"]


class StoredSubtask(TypedDict, total=False):
    id: str
    title: str
    timestamp: str


class TaskPayload(TypedDict):
    id: NotRequired[str]
    name: str
    start: str
    end: str


class SubtaskPayload(TypedDict):
    title: str
    timestamp: str


class FieldError(TypedDict):
    field: str
    message: str


__all__ = [
    "ViewMode",
    "StoredSubtask",
    "TaskPayload",
    "SubtaskPayload",
    "FieldError",
]
