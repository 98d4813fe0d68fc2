"""JSON file persistence for raw task records.

The file holds a JSON array of loosely-typed task objects. Records are
returned exactly as stored; normalization happens in ``task_utils``.
There is no locking: concurrent writers can lose updates.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from flask import current_app

log = logging.getLogger(__name__)


class TaskStoreError(RuntimeError):
    pass


class TaskStore:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read_tasks(self) -> list[dict[str, Any]]:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise TaskStoreError(f"task file {self.path} is not valid JSON") from e
        if not isinstance(data, list):
            raise TaskStoreError(f"task file {self.path} does not hold a JSON array")
        return data

    def write_tasks(self, tasks: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(tasks, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        log.debug("wrote %d tasks to %s", len(tasks), self.path)


def get_store() -> TaskStore:
    return TaskStore(current_app.config["TASKS_FILE"])


__all__ = ["TaskStore", "TaskStoreError", "get_store"]
