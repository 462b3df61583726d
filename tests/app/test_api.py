"""End-to-end tests for the assembled request pipeline."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import replace

from fastapi.testclient import TestClient

from conftest import TEST_LOGGER

from toolkeeper.app.api import create_app
from toolkeeper.app.dependencies import SessionDep
from toolkeeper.infrastructure.db import SqliteSessionFactory, apply_pragmas
from toolkeeper.infrastructure.db.repositories import EmployeeRepository


def test_root_and_health(client):
    assert client.get("/health").json() == {"status": "ok", "service": "toolkeeper"}
    root = client.get("/").json()
    assert root["name"] == "ToolKeeper API"
    assert root["endpoints"]["tools"] == "/api/tools"


def test_cors_allows_any_origin_method_and_header(client):
    response = client.options(
        "/api/tools",
        headers={
            "Origin": "http://anywhere.example",
            "Access-Control-Request-Method": "DELETE",
            "Access-Control-Request-Headers": "X-Custom-Header",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "DELETE" in response.headers["access-control-allow-methods"]
    assert "x-custom-header" in response.headers["access-control-allow-headers"].lower()


def test_cross_origin_request_reaches_route(client):
    response = client.get("/api/tools", headers={"Origin": "http://other.example"})

    assert response.status_code == 200
    assert response.json() == []
    assert response.headers["access-control-allow-origin"] == "*"


def test_employee_lifecycle(client):
    created = client.post(
        "/api/employees",
        json={"full_name": "Ada Lovelace", "position": "Engineer", "email": "ada@example.com"},
    )
    assert created.status_code == 201
    employee = created.json()
    assert employee["full_name"] == "Ada Lovelace"

    assert client.get(f"/api/employees/{employee['id']}").json() == employee
    assert client.get("/api/employees").json() == [employee]

    duplicate = client.post(
        "/api/employees", json={"full_name": "Someone Else", "email": "ada@example.com"}
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["type"] == "ConflictError"


def test_unknown_records_return_404(client):
    for path in ("/api/employees/42", "/api/tool-kits/42", "/api/tools/42"):
        response = client.get(path)
        assert response.status_code == 404
        assert response.json()["status"] == 404


def test_tool_kit_and_tool_workflow(client):
    employee = client.post("/api/employees", json={"full_name": "Grace Hopper"}).json()
    kit = client.post("/api/tool-kits", json={"name": "Electrician A"}).json()
    assert kit["employee_id"] is None

    drill = client.post(
        "/api/tools",
        json={"name": "Drill", "serial_number": "DR-001", "tool_kit_id": kit["id"]},
    ).json()
    meter = client.post("/api/tools", json={"name": "Multimeter", "serial_number": "MM-7"}).json()
    assert drill["condition"] == "good"

    issued = client.put(f"/api/tool-kits/{kit['id']}/employee", json={"employee_id": employee["id"]})
    assert issued.status_code == 200
    assert issued.json()["employee_id"] == employee["id"]
    assert client.get("/api/tool-kits", params={"employee_id": employee["id"]}).json() == [issued.json()]

    moved = client.put(f"/api/tools/{meter['id']}/tool-kit", json={"tool_kit_id": kit["id"]})
    assert moved.json()["tool_kit_id"] == kit["id"]

    detail = client.get(f"/api/tool-kits/{kit['id']}").json()
    assert [t["serial_number"] for t in detail["tools"]] == ["DR-001", "MM-7"]
    assert len(client.get("/api/tools", params={"tool_kit_id": kit["id"]}).json()) == 2

    returned = client.put(f"/api/tool-kits/{kit['id']}/employee", json={"employee_id": None})
    assert returned.json()["employee_id"] is None


def test_invalid_references_are_rejected(client):
    bad_kit = client.post("/api/tool-kits", json={"name": "Orphan", "employee_id": 999})
    assert bad_kit.status_code == 400
    assert bad_kit.json()["detail"] == "Employee 999 does not exist"

    bad_tool = client.post(
        "/api/tools", json={"name": "Saw", "serial_number": "S-1", "tool_kit_id": 999}
    )
    assert bad_tool.status_code == 400

    client.post("/api/tools", json={"name": "Saw", "serial_number": "S-2"})
    duplicate = client.post("/api/tools", json={"name": "Saw", "serial_number": "S-2"})
    assert duplicate.status_code == 409


def test_request_validation_errors_stay_422(client):
    response = client.post("/api/tools", json={"name": "No serial"})

    assert response.status_code == 422


def test_failed_request_rolls_back_its_session(migrated_container):
    app = create_app(migrated_container)

    @app.post("/explode-after-write")
    def explode(session: SessionDep):
        EmployeeRepository(session).add("Ghost")
        raise RuntimeError("after write")

    client = TestClient(app)
    assert client.post("/explode-after-write").status_code == 500
    assert client.get("/api/employees").json() == []


class _CommitFailsConnection(sqlite3.Connection):
    def commit(self):
        raise sqlite3.OperationalError("database is locked")


class _CommitFailsSessions(SqliteSessionFactory):
    def connect(self):
        conn = sqlite3.connect(
            self.db_path, factory=_CommitFailsConnection, check_same_thread=False
        )
        apply_pragmas(conn)
        return conn


def test_commit_failure_is_reported_before_the_response(migrated_container, caplog):
    real_sessions = migrated_container.session_factory
    failing = replace(
        migrated_container, session_factory=_CommitFailsSessions(real_sessions.db_path)
    )
    client = TestClient(create_app(failing))

    response = client.post("/api/employees", json={"full_name": "Ann"})

    assert response.status_code == 500
    assert response.json()["type"] == "OperationalError"
    with real_sessions.session() as conn:
        assert conn.execute("SELECT COUNT(*) FROM employees").fetchone()[0] == 0
    errors = [
        r for r in caplog.records if r.name == TEST_LOGGER and r.levelname == "ERROR"
    ]
    assert len(errors) == 1


def test_session_failure_is_translated(migrated_container):
    class BrokenSessions:
        @contextmanager
        def session(self):
            raise sqlite3.OperationalError("database is locked")
            yield  # pragma: no cover

    broken = replace(migrated_container, session_factory=BrokenSessions())
    client = TestClient(create_app(broken))

    response = client.get("/api/tools")

    assert response.status_code == 500
    assert response.json()["type"] == "OperationalError"
