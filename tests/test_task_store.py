import json

import pytest

from quarterplan.task_store import TaskStore, TaskStoreError


def test_missing_file_reads_as_empty(tmp_path):
    assert TaskStore(tmp_path / "absent.json").read_tasks() == []


def test_write_then_read(tmp_path):
    path = tmp_path / "nested" / "dir" / "tasks.json"
    store = TaskStore(path)
    records = [{"id": "1", "name": "Sääst", "start": "2025-07-01", "end": "2025-07-02", "extra": {"kept": True}}]
    store.write_tasks(records)
    text = path.read_text(encoding="utf-8")
    assert "Sääst" in text
    assert text.endswith("\n")
    assert store.read_tasks() == records


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text("{oops", encoding="utf-8")
    with pytest.raises(TaskStoreError):
        TaskStore(path).read_tasks()


def test_non_list_raises(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps({"tasks": []}), encoding="utf-8")
    with pytest.raises(TaskStoreError):
        TaskStore(path).read_tasks()
