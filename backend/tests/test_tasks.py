"""
Task lifecycle tests.

Verifies:
- startedAt is stamped on the first IN_PROGRESS only
- completedAt is stamped on every COMPLETED
- Transitions are permissive by default and enforced in strict mode
- USER callers only see tasks assigned to them
"""

import pytest


def _create_task(client, headers, **fields):
    payload = {"title": "Repor prateleira", "priority": "HIGH"}
    payload.update(fields)
    resp = client.post("/api/tasks", json=payload, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def _set_status(client, headers, task_id, status):
    return client.put(f"/api/tasks/{task_id}/status", json={"status": status}, headers=headers)


# =============================================================================
# STATUS STATE MACHINE
# =============================================================================


class TestTaskStatus:

    def test_started_at_is_set_only_once(self, client, owner_a, user_a):
        task = _create_task(client, owner_a["headers"], assigneeId=user_a["user"]["id"])
        assert task["status"] == "PENDING"
        assert task["startedAt"] is None

        first = _set_status(client, user_a["headers"], task["id"], "IN_PROGRESS")
        assert first.status_code == 200
        started_at = first.get_json()["startedAt"]
        assert started_at is not None

        back = _set_status(client, user_a["headers"], task["id"], "PENDING")
        assert back.status_code == 200
        assert back.get_json()["startedAt"] == started_at

        again = _set_status(client, user_a["headers"], task["id"], "IN_PROGRESS")
        assert again.status_code == 200
        assert again.get_json()["startedAt"] == started_at

    def test_completed_at_is_stamped(self, client, owner_a):
        task = _create_task(client, owner_a["headers"])
        _set_status(client, owner_a["headers"], task["id"], "IN_PROGRESS")

        done = _set_status(client, owner_a["headers"], task["id"], "COMPLETED")
        assert done.status_code == 200
        assert done.get_json()["status"] == "COMPLETED"
        assert done.get_json()["completedAt"] is not None

    def test_permissive_mode_accepts_any_transition(self, client, owner_a):
        task = _create_task(client, owner_a["headers"])
        resp = _set_status(client, owner_a["headers"], task["id"], "COMPLETED")
        assert resp.status_code == 200
        assert resp.get_json()["startedAt"] is None

    def test_strict_mode_rejects_illegal_transition(self, app, client, owner_a):
        app.config["TASK_STRICT_TRANSITIONS"] = True
        task = _create_task(client, owner_a["headers"])

        resp = _set_status(client, owner_a["headers"], task["id"], "COMPLETED")
        assert resp.status_code == 400
        assert "PENDING -> COMPLETED" in resp.get_json()["error"]

        assert _set_status(client, owner_a["headers"], task["id"], "IN_PROGRESS").status_code == 200
        assert _set_status(client, owner_a["headers"], task["id"], "COMPLETED").status_code == 200

    def test_invalid_status_value(self, client, owner_a):
        task = _create_task(client, owner_a["headers"])
        resp = _set_status(client, owner_a["headers"], task["id"], "DONE")
        assert resp.status_code == 400
        assert resp.get_json()["errors"][0]["field"] == "status"


# =============================================================================
# VISIBILITY AND CRUD
# =============================================================================


class TestTaskAccess:

    def test_user_only_sees_own_tasks(self, client, owner_a, user_a, cashier_a):
        mine = _create_task(client, owner_a["headers"], title="Minha", assigneeId=user_a["user"]["id"])
        other = _create_task(client, owner_a["headers"], title="Outra", assigneeId=cashier_a["user"]["id"])

        listing = client.get("/api/tasks", headers=user_a["headers"]).get_json()
        assert [t["id"] for t in listing["tasks"]] == [mine["id"]]

        assert client.get(f"/api/tasks/{other['id']}", headers=user_a["headers"]).status_code == 404
        assert _set_status(client, user_a["headers"], other["id"], "IN_PROGRESS").status_code == 404

        everything = client.get("/api/tasks", headers=owner_a["headers"]).get_json()
        assert everything["pagination"]["total"] == 2

    def test_ordered_by_priority(self, client, owner_a):
        _create_task(client, owner_a["headers"], title="Baixa", priority="LOW")
        _create_task(client, owner_a["headers"], title="Urgente", priority="URGENT")
        _create_task(client, owner_a["headers"], title="Média", priority="MEDIUM")

        listing = client.get("/api/tasks", headers=owner_a["headers"]).get_json()
        assert [t["title"] for t in listing["tasks"]] == ["Urgente", "Média", "Baixa"]

    def test_assignee_must_belong_to_company(self, client, owner_a, cashier_b):
        resp = client.post(
            "/api/tasks",
            json={"title": "Cruzada", "assigneeId": cashier_b["user"]["id"]},
            headers=owner_a["headers"],
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Funcionário não encontrado"

    @pytest.mark.parametrize("method", ["post", "put", "delete"])
    def test_only_owner_or_admin_manage_tasks(self, client, owner_a, cashier_a, method):
        task = _create_task(client, owner_a["headers"])
        path = "/api/tasks" if method == "post" else f"/api/tasks/{task['id']}"
        resp = getattr(client, method)(path, json={"title": "X"}, headers=cashier_a["headers"])
        assert resp.status_code == 403

    def test_full_update_and_delete(self, client, admin_a, user_a):
        task = _create_task(client, admin_a["headers"])
        resp = client.put(
            f"/api/tasks/{task['id']}",
            json={"title": "Conferir caixa", "assigneeId": user_a["user"]["id"], "status": "IN_PROGRESS"},
            headers=admin_a["headers"],
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["title"] == "Conferir caixa"
        assert body["assignee"]["id"] == user_a["user"]["id"]
        assert body["startedAt"] is not None

        assert client.delete(f"/api/tasks/{task['id']}", headers=admin_a["headers"]).status_code == 200
        assert client.get(f"/api/tasks/{task['id']}", headers=admin_a["headers"]).status_code == 404


# =============================================================================
# REPORTS
# =============================================================================


class TestTaskReports:

    def test_productivity_counts_by_assignee(self, client, owner_a, user_a):
        for title in ("A", "B", "C"):
            _create_task(client, owner_a["headers"], title=title, assigneeId=user_a["user"]["id"])
        tasks = client.get("/api/tasks", headers=user_a["headers"]).get_json()["tasks"]
        _set_status(client, user_a["headers"], tasks[0]["id"], "IN_PROGRESS")
        _set_status(client, user_a["headers"], tasks[0]["id"], "COMPLETED")
        _set_status(client, user_a["headers"], tasks[1]["id"], "IN_PROGRESS")

        report = client.get("/api/tasks/reports/productivity", headers=owner_a["headers"]).get_json()
        assert len(report) == 1
        row = report[0]
        assert row["user"]["id"] == user_a["user"]["id"]
        assert (row["totalTasks"], row["completedTasks"], row["inProgressTasks"], row["pendingTasks"]) == (3, 1, 1, 1)

    def test_team_overview(self, client, owner_a, user_a, cashier_a):
        task = _create_task(client, owner_a["headers"], assigneeId=user_a["user"]["id"])
        _set_status(client, user_a["headers"], task["id"], "IN_PROGRESS")

        resp = client.get("/api/tasks/reports/team-overview", headers=owner_a["headers"])
        assert resp.status_code == 200
        by_user = {row["user"]["id"]: row for row in resp.get_json()}
        assert by_user[user_a["user"]["id"]]["status"] == "WORKING"
        assert by_user[user_a["user"]["id"]]["currentTasks"][0]["id"] == task["id"]
        assert by_user[cashier_a["user"]["id"]]["status"] == "IDLE"
        assert owner_a["user"]["id"] not in by_user
