"""HTTP API tests (FastAPI TestClient)."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from ferrocash.web.app import create_app


@pytest.fixture
def client(cash):
    with TestClient(create_app(cash)) as test_client:
        yield test_client


def _create_register(client, name="Counter"):
    response = client.post("/api/cash-registers", json={"name": name})
    assert response.status_code == 201
    return response.json()


def _open(client, register_id, balance="1000.00"):
    response = client.post(
        "/api/cash-sessions/open",
        json={"registerId": register_id, "openingBalance": balance, "openedBy": "ana"},
    )
    assert response.status_code == 201
    return response.json()


def _move(client, session, movement_type, amount):
    return client.post(
        "/api/cash-movements",
        json={
            "sessionId": session["id"],
            "registerId": session["registerId"],
            "type": movement_type,
            "amount": amount,
            "userId": "ana",
        },
    )


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["storage"] == "memory"


class TestCashFlow:
    def test_full_day(self, client):
        register = _create_register(client)
        assert register["currentBalance"] == "0.00"
        assert register["isActive"] is True

        session = _open(client, register["id"])
        assert session["status"] == "open"
        assert session["openingBalance"] == "1000.00"

        income = _move(client, session, "income", "500.00")
        assert income.status_code == 201
        assert income.json()["runningBalance"] == "1500.00"
        expense = _move(client, session, "expense", 200)
        assert expense.json()["runningBalance"] == "1300.00"

        current = client.get(f"/api/cash-registers/{register['id']}/current-session").json()
        assert current["id"] == session["id"]

        summary = client.get(f"/api/cash-registers/{register['id']}/summary").json()
        assert summary["totalIncome"] == "500.00"
        assert summary["totalExpense"] == "200.00"
        assert summary["currentBalance"] == "1300.00"
        assert summary["movementCount"] == 2

        details = client.get(f"/api/cash-sessions/{session['id']}").json()
        assert details["register"]["id"] == register["id"]
        assert [m["amount"] for m in details["movements"]] == ["500.00", "200.00"]

        closed = client.post(
            f"/api/cash-sessions/{session['id']}/close",
            json={"closingBalance": "1250.00", "closedBy": "ana", "notes": "faltante"},
        )
        assert closed.status_code == 200
        assert closed.json()["expectedBalance"] == "1300.00"
        assert closed.json()["difference"] == "-50.00"

        assert client.get(f"/api/cash-registers/{register['id']}/current-session").json() is None
        history = client.get(f"/api/cash-registers/{register['id']}/sessions").json()
        assert [s["id"] for s in history] == [session["id"]]
        assert client.get(f"/api/cash-registers/{register['id']}").json()["currentBalance"] == "1250.00"

    def test_list_and_update_registers(self, client):
        register = _create_register(client, "Counter")
        _create_register(client, "Back office")

        response = client.patch(f"/api/cash-registers/{register['id']}", json={"description": "Door"})
        assert response.json()["description"] == "Door"

        names = [r["name"] for r in client.get("/api/cash-registers").json()]
        assert names == ["Back office", "Counter"]

        client.post(f"/api/cash-registers/{register['id']}/deactivate")
        active = client.get("/api/cash-registers", params={"activeOnly": "true"}).json()
        assert [r["name"] for r in active] == ["Back office"]

        assert client.post(f"/api/cash-registers/{register['id']}/activate").json()["isActive"] is True


class TestErrorMapping:
    def test_not_found(self, client):
        response = client.get("/api/cash-registers/ghost")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_second_open_conflicts(self, client):
        register = _create_register(client)
        _open(client, register["id"])

        response = client.post(
            "/api/cash-sessions/open",
            json={"registerId": register["id"], "openingBalance": "0", "openedBy": "beto"},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_bad_amount_is_400(self, client):
        session = _open(client, _create_register(client)["id"])

        response = _move(client, session, "income", "-3")

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "amount"

    def test_oversized_amount_is_400(self, client):
        session = _open(client, _create_register(client)["id"])

        response = _move(client, session, "income", "1e30")

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert response.json()["details"]["field"] == "amount"
        assert client.get(f"/api/cash-sessions/{session['id']}").json()["movements"] == []

    def test_float_amount_is_400(self, client):
        session = _open(client, _create_register(client)["id"])

        response = _move(client, session, "income", 12.5)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert response.json()["details"]["field"].startswith("amount")

    def test_missing_field_is_400(self, client):
        response = client.post("/api/cash-sessions/open", json={"openingBalance": "10"})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_closed_session_movement_is_409(self, client):
        session = _open(client, _create_register(client)["id"])
        client.post(f"/api/cash-sessions/{session['id']}/close", json={"closingBalance": "1000", "closedBy": "ana"})

        response = _move(client, session, "income", "1.00")
        assert response.status_code == 409
        assert response.json()["error"] == "session_not_open"

        again = client.post(
            f"/api/cash-sessions/{session['id']}/close", json={"closingBalance": "1000", "closedBy": "ana"}
        )
        assert again.status_code == 409
        assert again.json()["error"] == "already_closed"


class TestChecksApi:
    def _payload(self, cash, offset):
        today = cash.checks.today()
        return {
            "checkType": "echeq",
            "checkNumber": f"E-{offset}",
            "bankName": "Banco Provincia",
            "amount": "15000.50",
            "issueDate": (today - timedelta(days=30)).isoformat(),
            "dueDate": (today + timedelta(days=offset)).isoformat(),
            "issuerName": "Ferretería Central",
        }

    def test_create_and_alerts(self, client, cash):
        for offset in (10, -1, 0):
            assert client.post("/api/checks", json=self._payload(cash, offset)).status_code == 201

        alerts = client.get("/api/checks/alerts").json()

        assert [a["alertLevel"] for a in alerts] == ["overdue", "urgent", "normal"]
        assert [a["daysUntilDue"] for a in alerts] == [-1, 0, 10]
        assert alerts[0]["isOverdue"] is True
        assert alerts[0]["amount"] == "15000.50"

    def test_transitions(self, client, cash):
        check = client.post("/api/checks", json=self._payload(cash, 5)).json()
        assert check["status"] == "pending"

        deposited = client.post(f"/api/checks/{check['id']}/deposit", json={"depositAccountId": "acc-1"})
        assert deposited.status_code == 200
        assert deposited.json()["status"] == "deposited"
        assert deposited.json()["depositAccountId"] == "acc-1"

        rejected = client.post(f"/api/checks/{check['id']}/reject", json={"reason": "Sin fondos"})
        assert rejected.status_code == 409
        assert rejected.json()["error"] == "invalid_check_transition"

        assert client.get(f"/api/checks/{check['id']}").json()["status"] == "deposited"
        assert [c["id"] for c in client.get("/api/checks", params={"status": "deposited"}).json()] == [check["id"]]
        assert client.get("/api/checks", params={"status": "pending"}).json() == []

    def test_due_before_issue_is_400(self, client, cash):
        payload = self._payload(cash, 0)
        payload["dueDate"], payload["issueDate"] = payload["issueDate"], payload["dueDate"]

        response = client.post("/api/checks", json=payload)

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "due_date"


class TestDataChanges:
    def test_websocket_receives_events(self, client):
        with client.websocket_connect("/ws/data-changes") as websocket:
            _create_register(client)
            event = websocket.receive_json()

        assert event["type"] == "cash-registers"
        assert "registerId" not in event["data"]
        assert "register_id" in event["data"]
