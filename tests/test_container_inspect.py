"""Tests for inspect document summaries."""

from __future__ import annotations

from fleetwatch.engine import container_inspect

DOCUMENT = [{
    "Name": "/web",
    "Image": "sha256:deadbeef",
    "Created": "2024-05-01T10:00:00Z",
    "State": {"Status": "running", "RestartCount": 2, "Health": {"Status": "healthy"}},
    "Config": {"User": "app", "Env": ["A=1", "B=2", 3]},
    "HostConfig": {"NetworkMode": "bridge"},
    "Mounts": [
        {"Type": "bind", "Source": "/srv/data", "Destination": "/data", "RW": True},
        {"Type": "volume", "Source": "cache", "Destination": "/cache", "RW": False},
    ],
    "NetworkSettings": {"Ports": {
        "80/tcp": [{"HostIp": "0.0.0.0", "HostPort": "8080"}],
        "9000/tcp": None,
    }},
}]


def test_summary_fields() -> None:
    summary = container_inspect.summarize(DOCUMENT)
    assert summary.name == "/web"
    assert summary.status == "running"
    assert summary.health == "healthy"
    assert summary.restart_count == 2
    assert summary.network_mode == "bridge"
    assert (summary.env_count, summary.mount_count, summary.port_count) == (3, 2, 2)


def test_details_strings() -> None:
    details = container_inspect.details(DOCUMENT)
    assert details.env == ("A=1", "B=2")
    assert details.mounts == ("/srv/data → /data (bind:rw)", "cache → /cache (volume:ro)")
    assert details.ports == ("0.0.0.0:8080 → 80/tcp", "9000/tcp (internal)")


def test_accepts_bare_object_and_rejects_others() -> None:
    assert container_inspect.summarize(DOCUMENT[0]).name == "/web"
    assert container_inspect.summarize([]) is None
    assert container_inspect.summarize("text") is None
    assert container_inspect.details(None) is None


def test_sparse_document_defaults() -> None:
    summary = container_inspect.summarize({"Name": "/bare", "State": {"RestartCount": True}})
    assert summary.restart_count == 0
    assert summary.health == ""
    assert container_inspect.details({}).ports == ()
