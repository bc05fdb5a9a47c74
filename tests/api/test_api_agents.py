"""Agent, assignment and dimension endpoints over HTTP."""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from pastoral.adapters.persistence.database import get_session

ADMIN = {"X-User-Id": "u-admin"}
EDITOR = {"X-User-Id": "u-editor"}
VIEWER = {"X-User-Id": "u-viewer"}


def _open_body(lookups, entry="2023-01-10", group=None):
    return {
        "location_id": lookups.matriz.id,
        "group_id": (group or lookups.catequese).id,
        "role_id": lookups.coordenador.id,
        "entry_date": entry,
    }


@pytest.mark.asyncio
async def test_create_and_fetch_agent(client, null_session):
    resp = await client.post(
        "/api/agents", json={"name": "Ana Souza", "birthdate": "1990-07-01"}, headers=EDITOR
    )
    assert resp.status_code == 201
    assert null_session.commits == 1
    agent_id = resp.json()["id"]

    resp = await client.get(f"/api/agents/{agent_id}", headers=VIEWER)
    data = resp.json()
    assert resp.status_code == 200
    assert data["name"] == "Ana Souza"
    assert data["age"] == 33
    assert data["active"] is None
    assert data["history"] == []
    assert data["permissions"] == {"can_edit": False, "is_admin": False}


@pytest.mark.asyncio
async def test_viewer_cannot_edit(client, store, lookups):
    agent = store.add_agent("Ana")

    resp = await client.post("/api/agents", json={"name": "Bia"}, headers=VIEWER)
    assert resp.status_code == 403

    resp = await client.post(
        f"/api/agents/{agent.id}/assignments", json=_open_body(lookups), headers=VIEWER
    )
    assert resp.status_code == 403
    assert store.assignments == {}


@pytest.mark.asyncio
async def test_create_agent_validation_error(client):
    resp = await client.post("/api/agents", json={"name": "  "}, headers=EDITOR)
    assert resp.status_code == 422
    assert resp.json()["field"] == "name"


@pytest.mark.asyncio
async def test_update_agent(client, store):
    agent = store.add_agent("Ana")
    resp = await client.put(
        f"/api/agents/{agent.id}", json={"name": "Ana Maria", "email": "ana@example.org"},
        headers=EDITOR,
    )
    assert resp.status_code == 200
    assert resp.json()["email"] == "ana@example.org"

    resp = await client.put("/api/agents/999", json={"name": "X"}, headers=EDITOR)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_assignment_lifecycle(client, store, lookups):
    agent = store.add_agent("Ana")

    resp = await client.post(
        f"/api/agents/{agent.id}/assignments", json=_open_body(lookups), headers=EDITOR
    )
    assert resp.status_code == 201
    first = resp.json()
    assert first["active"] is True

    resp = await client.post(
        f"/api/agents/{agent.id}/assignments",
        json=_open_body(lookups, "2023-02-01", group=lookups.liturgia),
        headers=EDITOR,
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "conflict"

    resp = await client.post(
        f"/api/assignments/{first['id']}/close", json={"exit_date": "2023-01-09"}, headers=EDITOR
    )
    assert resp.status_code == 422
    assert resp.json()["field"] == "exit_date"

    resp = await client.post(
        f"/api/assignments/{first['id']}/close", json={"exit_date": "2023-03-01"}, headers=EDITOR
    )
    assert resp.status_code == 200
    assert resp.json()["exit_date"] == "2023-03-01"
    assert resp.json()["active"] is False

    resp = await client.post(
        f"/api/assignments/{first['id']}/close", json={"exit_date": "2023-04-01"}, headers=EDITOR
    )
    assert resp.status_code == 404

    resp = await client.post(
        f"/api/agents/{agent.id}/assignments",
        json=_open_body(lookups, "2023-03-02", group=lookups.liturgia),
        headers=EDITOR,
    )
    assert resp.status_code == 201

    resp = await client.get(f"/api/agents/{agent.id}", headers=EDITOR)
    data = resp.json()
    assert data["active"]["group_name"] == "Liturgia"
    assert data["active"]["tenure"] == "1 ano e 3 meses"
    assert [h["entry_date"] for h in data["history"]] == ["2023-03-02", "2023-01-10"]
    assert data["permissions"]["can_edit"] is True


@pytest.mark.asyncio
async def test_open_assignment_bad_input(client, store, lookups):
    agent = store.add_agent("Ana")

    resp = await client.post(
        f"/api/agents/{agent.id}/assignments",
        json=_open_body(lookups, entry="10/01/2023"),
        headers=EDITOR,
    )
    assert resp.status_code == 422
    assert resp.json()["field"] == "entry_date"

    resp = await client.post(
        "/api/agents/999/assignments", json=_open_body(lookups), headers=EDITOR
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_agents(client, store, lookups):
    ana = store.add_agent("Ana")
    store.add_agent("Bruno")
    store.add_assignment(ana, lookups.matriz, lookups.catequese, lookups.membro, date(2024, 5, 1))

    resp = await client.get("/api/agents", headers=VIEWER)
    data = resp.json()
    assert data["total"] == 2
    assert data["agents"][0]["active"]["location"]["name"] == "Matriz"
    assert data["agents"][0]["tenure"] == "1 mês"
    assert data["agents"][1]["active"] is None

    resp = await client.get("/api/agents", params={"only_active": "true"}, headers=VIEWER)
    assert [a["name"] for a in resp.json()["agents"]] == ["Ana"]


@pytest.mark.asyncio
async def test_duplicate_active_is_500(client, store, lookups):
    ana = store.add_agent("Ana")
    store.add_assignment(ana, lookups.matriz, lookups.catequese, lookups.membro, date(2023, 1, 1))
    store.add_assignment(ana, lookups.matriz, lookups.liturgia, lookups.membro, date(2023, 2, 1))

    resp = await client.get(f"/api/agents/{ana.id}", headers=VIEWER)

    assert resp.status_code == 500
    assert resp.json()["code"] == "data_integrity"


@pytest.mark.asyncio
async def test_delete_agent_is_admin_only(client, store, lookups):
    ana = store.add_agent("Ana")
    store.add_assignment(ana, lookups.matriz, lookups.catequese, lookups.membro, date(2023, 1, 1))

    resp = await client.delete(f"/api/agents/{ana.id}", headers=EDITOR)
    assert resp.status_code == 403

    resp = await client.delete(f"/api/agents/{ana.id}", headers=ADMIN)
    assert resp.status_code == 204
    assert store.assignments == {}

    resp = await client.delete(f"/api/agents/{ana.id}", headers=ADMIN)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_dimensions(client, lookups):
    resp = await client.get("/api/dimensions/locations", headers=VIEWER)
    assert resp.status_code == 200
    assert [i["name"] for i in resp.json()["items"]] == ["Matriz", "São José"]

    resp = await client.get("/api/dimensions/roles", headers=VIEWER)
    assert [i["name"] for i in resp.json()["items"]] == ["Coordenador", "Membro"]

    resp = await client.get("/api/dimensions/colors", headers=VIEWER)
    assert resp.status_code == 404


class _DownSession:
    async def execute(self, statement):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.mark.asyncio
async def test_health_reports_degraded_database(client, overrides):
    overrides[get_session] = lambda: _DownSession()

    resp = await client.get("/api/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"
