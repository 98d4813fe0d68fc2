import uuid


def _task(**overrides):
    body = {"name": "Roadmap", "start": "2025-07-01", "end": "2025-07-10"}
    body.update(overrides)
    return body


def _assert_problem(r, status, slug):
    assert r.status_code == status
    assert r.mimetype == "application/problem+json"
    data = r.get_json()
    assert data["status"] == status
    assert data["type"].endswith("/" + slug)
    assert "detail" in data
    return data


def test_list_empty_when_file_missing(client):
    r = client.get("/api/tasks")
    assert r.status_code == 200
    assert r.get_json() == []


def test_list_returns_normalized_tasks(client, seed_tasks):
    seed_tasks(
        [
            {"id": "a", "name": " Alpha ", "start": "2025-7-1", "durationDays": 2},
            {"id": "b", "name": "Alpha", "start": "2025-07-01", "end": "2025-07-03"},
            {"id": "c", "start": "2025-07-01"},
            {"id": "d", "name": "Beta", "start": "2025-08-01", "end": "2025-08-02",
             "subtasks": [{"id": "s", "title": "", "timestamp": "2025-08-01T10:00:00Z"}]},
        ]
    )
    data = client.get("/api/tasks").get_json()
    assert [t["id"] for t in data] == ["a", "d"]
    assert data[0]["end"] == "2025-07-03"
    assert data[1]["subtasks"] == [
        {"id": "s", "title": "Untitled subtask", "timestamp": "2025-08-01T10:00:00.000Z"}
    ]


def test_create_task(client, stored_tasks):
    r = client.post("/api/tasks", json=_task(name="  Roadmap ", start="2025-7-1"))
    assert r.status_code == 201
    body = r.get_json()
    assert body["name"] == "Roadmap"
    assert body["start"] == "2025-07-01"
    assert body["subtasks"] == []
    uuid.UUID(body["id"])
    assert r.headers["Location"].endswith(f"/api/tasks/{body['id']}")
    assert stored_tasks() == [{"id": body["id"], "name": "Roadmap", "start": "2025-07-01", "end": "2025-07-10"}]

    got = client.get(r.headers["Location"])
    assert got.status_code == 200
    assert got.get_json()["id"] == body["id"]


def test_create_task_keeps_client_id(client):
    r = client.post("/api/tasks", json=_task(id="client-1"))
    assert r.status_code == 201
    assert r.get_json()["id"] == "client-1"
    r2 = client.post("/api/tasks", json=_task(id="client-1", name="Other"))
    _assert_problem(r2, 409, "conflict")


def test_create_task_invalid_payload(client):
    _assert_problem(client.post("/api/tasks", json={"name": "x", "start": "2025-07-01"}), 400, "bad_request")
    _assert_problem(client.post("/api/tasks", data="not json", content_type="text/plain"), 400, "bad_request")


def test_create_task_rejects_bad_dates(client):
    data = _assert_problem(client.post("/api/tasks", json=_task(start="soon")), 422, "validation_error")
    assert {"field": "start", "message": "invalid date"} in data["errors"]
    data = _assert_problem(
        client.post("/api/tasks", json=_task(start="2025-07-10", end="2025-07-01")), 422, "validation_error"
    )
    assert data["errors"][0]["field"] == "end"
    _assert_problem(client.post("/api/tasks", json=_task(name="  ")), 422, "validation_error")


def test_create_duplicate_task_conflicts(client):
    assert client.post("/api/tasks", json=_task()).status_code == 201
    _assert_problem(client.post("/api/tasks", json=_task(start="2025-7-1")), 409, "conflict")


def test_update_task(client, seed_tasks, stored_tasks):
    seed_tasks(
        [
            {"id": "t1", "name": "A", "start": "2025-07-01", "end": "2025-07-02",
             "subtasks": [{"id": "s1", "title": "x", "timestamp": "2025-07-01T10:00:00.000Z"}]},
            {"id": "t2", "name": "B", "start": "2025-07-01", "end": "2025-07-02"},
        ]
    )
    r = client.put("/api/tasks", json={"id": "t1", "name": "A2", "start": "2025-07-03", "end": "2025-7-9"})
    assert r.status_code == 200
    body = r.get_json()
    assert (body["name"], body["start"], body["end"]) == ("A2", "2025-07-03", "2025-07-09")
    assert [s["id"] for s in body["subtasks"]] == ["s1"]
    assert stored_tasks()[0]["end"] == "2025-07-09"


def test_update_task_errors(client, seed_tasks):
    seed_tasks(
        [
            {"id": "t1", "name": "A", "start": "2025-07-01", "end": "2025-07-02"},
            {"id": "t2", "name": "B", "start": "2025-07-01", "end": "2025-07-02"},
        ]
    )
    _assert_problem(client.put("/api/tasks", json=_task()), 400, "bad_request")
    _assert_problem(client.put("/api/tasks", json=_task(id="missing")), 404, "not_found")
    _assert_problem(
        client.put("/api/tasks", json={"id": "t2", "name": "A", "start": "2025-07-01", "end": "2025-07-02"}),
        409,
        "conflict",
    )
    # saving a task unchanged is not a conflict with itself
    r = client.put("/api/tasks", json={"id": "t1", "name": "A", "start": "2025-07-01", "end": "2025-07-02"})
    assert r.status_code == 200


def test_delete_task(client, seed_tasks, stored_tasks):
    seed_tasks([{"id": "t1", "name": "A", "start": "2025-07-01", "end": "2025-07-02"}])
    r = client.delete("/api/tasks/t1")
    assert r.status_code == 200
    assert stored_tasks() == []
    _assert_problem(client.delete("/api/tasks/t1"), 404, "not_found")
    _assert_problem(client.get("/api/tasks/t1"), 404, "not_found")


def test_add_subtask_from_date_and_time(client, seed_tasks, stored_tasks):
    seed_tasks([{"id": "t1", "name": "A", "start": "2025-07-01", "end": "2025-07-20"}])
    r = client.post("/api/tasks/t1/subtasks", json={"title": " Kickoff ", "date": "2025-07-02", "time": "09:30"})
    assert r.status_code == 201
    sub = r.get_json()
    assert sub["title"] == "Kickoff"
    assert sub["timestamp"].endswith("Z")
    assert stored_tasks()[0]["subtasks"] == [sub]


def test_add_subtask_from_timestamp(client, seed_tasks):
    seed_tasks([{"id": "t1", "name": "A", "start": "2025-07-01", "end": "2025-07-20"}])
    r = client.post("/api/tasks/t1/subtasks", json={"title": "Demo", "timestamp": "2025-07-03T08:00:00+02:00"})
    assert r.status_code == 201
    assert r.get_json()["timestamp"] == "2025-07-03T06:00:00.000Z"


def test_add_subtask_errors(client, seed_tasks):
    seed_tasks([{"id": "t1", "name": "A", "start": "2025-07-01", "end": "2025-07-20"}])
    _assert_problem(client.post("/api/tasks/t1/subtasks", json={"title": "x", "date": "2025-07-02"}), 400, "bad_request")
    data = _assert_problem(
        client.post("/api/tasks/t1/subtasks", json={"title": "x", "date": "2025-07-02", "time": "99:00"}),
        400,
        "bad_request",
    )
    assert data["detail"] == "invalid date or time"
    _assert_problem(
        client.post("/api/tasks/nope/subtasks", json={"title": "x", "date": "2025-07-02", "time": "09:00"}),
        404,
        "not_found",
    )


def test_update_and_delete_subtask(client, seed_tasks, stored_tasks):
    seed_tasks(
        [
            {"id": "t1", "name": "A", "start": "2025-07-01", "end": "2025-07-20",
             "subtasks": [
                 {"id": "s1", "title": "one", "timestamp": "2025-07-02T10:00:00.000Z"},
                 {"id": "s2", "title": "two", "timestamp": "2025-07-03T10:00:00.000Z"},
             ]},
        ]
    )
    r = client.put(
        "/api/tasks/t1/subtasks",
        json={"subtaskId": "s2", "title": "two!", "timestamp": "2025-07-04T10:00:00Z"},
    )
    assert r.status_code == 200
    assert r.get_json() == {"id": "s2", "title": "two!", "timestamp": "2025-07-04T10:00:00.000Z"}
    assert [s["title"] for s in stored_tasks()[0]["subtasks"]] == ["one", "two!"]

    _assert_problem(client.put("/api/tasks/t1/subtasks", json={"title": "x", "timestamp": "2025-07-04T10:00:00Z"}), 400, "bad_request")
    _assert_problem(
        client.put("/api/tasks/t1/subtasks", json={"subtaskId": "zz", "title": "x", "timestamp": "2025-07-04T10:00:00Z"}),
        404,
        "not_found",
    )

    assert client.delete("/api/tasks/t1/subtasks/s1").status_code == 200
    assert [s["id"] for s in stored_tasks()[0]["subtasks"]] == ["s2"]
    _assert_problem(client.delete("/api/tasks/t1/subtasks/s1"), 404, "not_found")


def test_corrupt_store_returns_incident(client, tasks_file):
    tasks_file.write_text("{not json", encoding="utf-8")
    r = client.get("/api/tasks")
    data = _assert_problem(r, 500, "internal_error")
    assert data["incident_id"]


def test_request_id_is_echoed(client):
    r = client.get("/api/tasks", headers={"X-Request-Id": "rid-123"})
    assert r.headers["X-Request-Id"] == "rid-123"
    assert r.headers["Cache-Control"] == "no-store"
    assert "X-Request-Duration-ms" in r.headers
    r404 = client.get("/api/tasks/none", headers={"X-Request-Id": "rid-404"})
    assert r404.get_json()["request_id"] == "rid-404"
