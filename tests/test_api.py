"""
tests/test_api.py
=================

HTTP tests for the FastAPI layer.  The orchestrator dependency is
overridden with one backed by an in‑memory roster and a pinned clock.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from api.deps import get_orchestrator
from api.main import app
from tenure.actions import Orchestrator
from tenure.errors import OverlappingPeriodError
from tenure.events import RecordingEventSink
from tenure.models import PeriodKind
from tenure.roster import Roster


@pytest.fixture
def roster():
    return Roster()


@pytest.fixture
def client(roster):
    engine = Orchestrator(roster, RecordingEventSink(), clock=lambda: datetime(2024, 6, 1))
    app.dependency_overrides[get_orchestrator] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create(client, name="Vera Vale", kind="performer", **extra):
    res = client.post("/entities", json={"name": name, "kind": kind, **extra})
    assert res.status_code == 201
    return res.json()


def test_health(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_statuses_listed(client):
    assert "future_employment" in client.get("/statuses").json()


def test_create_and_read(client):
    created = _create(client, started_at="2024-01-01T00:00:00")
    assert created["status"] == "employed"
    assert created["started_at"] == "2024-01-01T00:00:00"

    fetched = client.get(f"/entities/{created['id']}").json()
    assert fetched == created
    assert [e["id"] for e in client.get("/entities").json()] == [created["id"]]


def test_transition_and_history(client):
    ent = _create(client)
    res = client.post(f"/entities/{ent['id']}/transitions/employ",
                      json={"effective_date": "2024-01-01T00:00:00"})
    assert res.status_code == 200
    assert res.json()["status"] == "employed"

    client.post(f"/entities/{ent['id']}/transitions/suspend",
                json={"effective_date": "2024-02-01T00:00:00", "notes": "no‑show"})

    past = client.get(f"/entities/{ent['id']}/status",
                      params={"at": "2024-01-15T00:00:00"}).json()
    assert past["status"] == "employed"
    assert client.get(f"/entities/{ent['id']}/status").json()["status"] == "suspended"

    periods = client.get(f"/entities/{ent['id']}/periods").json()
    assert [p["kind"] for p in periods] == ["employment", "suspension"]
    assert periods[1]["notes"] == "no‑show"

    suspensions = client.get(f"/entities/{ent['id']}/periods",
                             params={"kind": "suspension"}).json()
    assert len(suspensions) == 1

    timeline = client.get(f"/entities/{ent['id']}/timeline").json()
    assert [t["status"] for t in timeline] == ["employed", "suspended"]


def test_rejected_transition_is_409_with_message(client):
    ent = _create(client)
    res = client.post(f"/entities/{ent['id']}/transitions/release")
    assert res.status_code == 409
    assert res.json()["detail"] == (
        "This performer 'Vera Vale' is unactivated and cannot be released."
    )


def test_unknown_entity_and_transition_are_404(client):
    assert client.get("/entities/nope").status_code == 404
    ent = _create(client)
    assert client.post(f"/entities/{ent['id']}/transitions/teleport").status_code == 404
    assert client.post(f"/entities/{ent['id']}/transitions/join").status_code == 404


def test_backdated_request_is_409(client):
    ent = _create(client, started_at="2024-01-01T00:00:00")
    client.post(f"/entities/{ent['id']}/transitions/suspend",
                json={"effective_date": "2024-05-01T00:00:00"})
    res = client.post(f"/entities/{ent['id']}/transitions/release",
                      json={"effective_date": "2024-03-01T00:00:00"})
    assert res.status_code == 409
    assert "cannot be released" in res.json()["detail"]


def test_period_store_fault_is_500(client, roster):
    ent = _create(client, started_at="2024-01-01T00:00:00")

    def rejecting_open(*args, **kwargs):
        raise OverlappingPeriodError("a concurrent writer opened it first")

    roster.open = rejecting_open
    res = client.post(f"/entities/{ent['id']}/transitions/suspend",
                      json={"effective_date": "2024-03-01T00:00:00"})
    assert res.status_code == 500
    assert res.json() == {"detail": "Internal error"}
    assert roster.current(ent["id"], PeriodKind.SUSPENSION) is None


def test_join_and_group_members(client):
    faction = _create(client, "The Syndicate", "faction", started_at="2024-01-01T00:00:00")
    member = _create(client, started_at="2024-01-01T00:00:00")

    res = client.post(f"/entities/{member['id']}/join/{faction['id']}",
                      json={"effective_date": "2024-02-01T00:00:00"})
    assert res.status_code == 200

    body = client.get(f"/groups/{faction['id']}/members").json()
    assert body["members"] == [
        {"id": member["id"], "name": "Vera Vale", "joined_at": "2024-02-01T00:00:00"}
    ]

    again = client.post(f"/entities/{member['id']}/join/{faction['id']}")
    assert again.status_code == 409


def test_delete_and_restore(client):
    ent = _create(client, started_at="2024-01-01T00:00:00")
    deleted = client.delete(f"/entities/{ent['id']}").json()
    assert deleted["deleted_at"] == "2024-06-01T00:00:00"
    assert client.get("/entities").json() == []
    assert len(client.get("/entities", params={"include_deleted": True}).json()) == 1

    res = client.post(f"/entities/{ent['id']}/transitions/suspend")
    assert res.status_code == 409

    restored = client.post(f"/entities/{ent['id']}/restore").json()
    assert restored["deleted_at"] is None


def test_restore_live_entity_is_409(client):
    ent = _create(client)
    res = client.post(f"/entities/{ent['id']}/restore")
    assert res.status_code == 409
    assert res.json()["detail"] == (
        "This performer 'Vera Vale' is not deleted and cannot be restored."
    )
