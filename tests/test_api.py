"""Tests for the ingest and dashboard HTTP endpoints."""

from __future__ import annotations

import httpx
import pytest

from fleetwatch.app import create_app
from fleetwatch.config import Settings
from fleetwatch.engine.records import CommandTypes
from fleetwatch.utils.db import Database

from tests.conftest import wire_command, wire_event

BASE = "/api/nodes/node-1"
INGEST = f"{BASE}/ingest"
CONTAINERS = [
    {"id": "abc123def456", "names": ["/web"], "image": "nginx", "state": "running", "status": "Up"},
]


async def _seed(client: httpx.AsyncClient) -> None:
    commands = [
        wire_command("list-1", CommandTypes.DOCKER_LIST, minute=1, output=CONTAINERS),
        wire_command("stop-1", CommandTypes.DOCKER_STOP, minute=2, target="abc123def456", status="Queued"),
        wire_command(
            "stats-1", CommandTypes.DOCKER_STATS, minute=3,
            output=[{"id": "abc123def456", "cpuPercent": "5%", "memPercent": "20%"}],
        ),
        wire_command(
            "logs-1", CommandTypes.DOCKER_LOGS, minute=4, target="abc123def456",
            output="$ docker logs\n" + '{"content": "ready", "truncated": true}',
        ),
    ]
    resp = await client.post(f"{INGEST}/commands", json=commands)
    assert resp.status_code == 202
    events = [
        wire_event("s1", "operation.start", minute=1, machine="A"),
        wire_event("c1", "operation.completed", minute=2, machine="A", success=True),
    ]
    resp = await client.post(f"{INGEST}/events", json=events)
    assert resp.status_code == 202


@pytest.mark.asyncio
async def test_post_commands_counts(client: httpx.AsyncClient) -> None:
    resp = await client.post(
        f"{INGEST}/commands", json=[wire_command("c1", CommandTypes.DOCKER_LIST, output=[])],
    )
    assert resp.status_code == 202
    assert resp.json() == {"received": 1, "inserted": 1, "updated": 0}


@pytest.mark.asyncio
async def test_post_unusable_batch_is_400(client: httpx.AsyncClient) -> None:
    resp = await client.post(f"{INGEST}/commands", json=[{"id": "broken"}])
    assert resp.status_code == 400
    resp = await client.post(f"{INGEST}/events", json=[{"eventName": "x"}])
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_containers_view(client: httpx.AsyncClient) -> None:
    await _seed(client)
    resp = await client.get(f"{BASE}/containers")
    assert resp.status_code == 200
    body = resp.json()
    (item,) = body["items"]
    assert item["id"] == "abc123def456"
    assert item["name"] == "web"
    assert item["action"]["isPending"] is True
    assert item["action"]["label"] == "stop"
    assert body["running"] == 1
    assert body["source"]["id"] == "list-1"


@pytest.mark.asyncio
async def test_unknown_node_is_empty(client: httpx.AsyncClient) -> None:
    resp = await client.get("/api/nodes/ghost/containers")
    assert resp.status_code == 200
    assert resp.json()["items"] == []
    assert (await client.get("/api/nodes/ghost/attempts")).json() == []


@pytest.mark.asyncio
async def test_container_detail_views(client: httpx.AsyncClient) -> None:
    await _seed(client)
    stats = (await client.get(f"{BASE}/containers/abc123/stats")).json()
    assert stats["current"]["cpuPercent"] == "5%"
    assert stats["history"][0]["cpu_percent"] == 5.0

    logs = (await client.get(f"{BASE}/containers/abc123def456/logs")).json()
    assert logs == {"content": "ready", "truncated": True, "error": None}
    follow = (await client.get(f"{BASE}/containers/abc123def456/logs", params={"follow": "true"})).json()
    assert follow["content"] == "ready"

    exec_view = (await client.get(f"{BASE}/containers/abc123def456/exec")).json()
    assert exec_view["result"] is None
    inspect_view = (await client.get(f"{BASE}/containers/abc123def456/inspect")).json()
    assert inspect_view["summary"] is None

    action = (await client.get(f"{BASE}/containers/abc123def456/action")).json()
    assert action["status"] == "Queued"


@pytest.mark.asyncio
async def test_attempts_and_recent_commands(client: httpx.AsyncClient) -> None:
    await _seed(client)
    (attempt,) = (await client.get(f"{BASE}/attempts")).json()
    assert attempt["targetId"] == "A"
    assert attempt["success"] is True
    assert attempt["completedAt"] is not None

    recent = (await client.get(f"{BASE}/commands", params={"limit": 2})).json()
    assert [r["id"] for r in recent] == ["logs-1", "stats-1"]
    assert (await client.get(f"{BASE}/commands", params={"limit": -1})).status_code == 400


@pytest.mark.asyncio
async def test_status_advance_visible_after_ingest(client: httpx.AsyncClient) -> None:
    await _seed(client)
    await client.post(f"{INGEST}/commands", json=[
        wire_command("stop-1", CommandTypes.DOCKER_STOP, minute=2, target="abc123def456", status="Success"),
    ])
    body = (await client.get(f"{BASE}/containers")).json()
    assert body["items"][0]["action"]["isPending"] is False
    assert body["items"][0]["action"]["status"] == "Success"


@pytest.mark.asyncio
async def test_notification_is_accepted(client: httpx.AsyncClient) -> None:
    resp = await client.post(f"{INGEST}/notifications", json={"type": "log", "line": "hello"})
    assert resp.status_code == 202
    assert resp.json() == {"status": "accepted", "type": "log"}


@pytest.mark.asyncio
async def test_stacks_view(client: httpx.AsyncClient) -> None:
    await client.post(f"{INGEST}/commands", json=[
        wire_command(
            "stacks-1", CommandTypes.COMPOSE_LIST, minute=1,
            output=[{"Name": "shop", "Status": "running(2)", "ConfigFiles": "/srv/shop.yml"}],
        ),
        wire_command("up-1", CommandTypes.COMPOSE_UP, minute=2, output={"success": True}),
    ])
    body = (await client.get(f"{BASE}/stacks")).json()
    assert body["stacks"] == [{"Name": "shop", "Status": "running(2)", "ConfigFiles": "/srv/shop.yml"}]
    assert body["lastAction"]["id"] == "up-1"


@pytest.mark.asyncio
async def test_app_builds_with_read_and_ingest_routes(settings: Settings) -> None:
    """Every controller mounts cleanly and both sides of the command log respond."""
    app = create_app(settings)
    database: Database = app.state.database
    await database.create_tables()
    try:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test",
        ) as ac:
            posted = await ac.post(
                f"{INGEST}/commands", json=[wire_command("c1", CommandTypes.DOCKER_LIST, output=[])],
            )
            assert posted.status_code == 202
            listed = await ac.get(f"{BASE}/commands")
            assert listed.status_code == 200
            assert [r["id"] for r in listed.json()] == ["c1"]
            assert (await ac.options(f"{BASE}/commands")).status_code == 204
    finally:
        await database.close()
