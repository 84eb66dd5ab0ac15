"""Summaries of raw ``docker inspect`` JSON."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class InspectSummary:
    name: str = ""
    image: str = ""
    created: str = ""
    status: str = ""
    health: str = ""
    restart_count: int = 0
    user: str = ""
    network_mode: str = ""
    env_count: int = 0
    mount_count: int = 0
    port_count: int = 0


@dataclass(frozen=True)
class InspectDetails:
    env: tuple[str, ...] = field(default_factory=tuple)
    mounts: tuple[str, ...] = field(default_factory=tuple)
    ports: tuple[str, ...] = field(default_factory=tuple)


def _obj(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _root(raw: Any) -> dict[str, Any] | None:
    """``docker inspect`` prints a one-element array; accept either form."""
    if isinstance(raw, list):
        raw = raw[0] if raw else None
    return raw if isinstance(raw, dict) else None


def summarize(raw: Any) -> InspectSummary | None:
    """Headline fields of an inspect document, or None if it is not one."""
    root = _root(raw)
    if root is None:
        return None
    state = _obj(root.get("State"))
    config = _obj(root.get("Config"))
    host_config = _obj(root.get("HostConfig"))
    mounts = root.get("Mounts")
    ports = _obj(_obj(root.get("NetworkSettings")).get("Ports"))
    env = config.get("Env")
    restart_count = state.get("RestartCount")
    return InspectSummary(
        name=_str(root.get("Name")),
        image=_str(root.get("Image")),
        created=_str(root.get("Created")),
        status=_str(state.get("Status")),
        health=_str(_obj(state.get("Health")).get("Status")),
        restart_count=restart_count if isinstance(restart_count, int) and not isinstance(restart_count, bool) else 0,
        user=_str(config.get("User")),
        network_mode=_str(host_config.get("NetworkMode")),
        env_count=len(env) if isinstance(env, list) else 0,
        mount_count=len(mounts) if isinstance(mounts, list) else 0,
        port_count=len(ports),
    )


def _describe_mount(mount: Any) -> str | None:
    if not isinstance(mount, dict):
        return None
    mode = ""
    if isinstance(mount.get("RW"), bool):
        mode = "rw" if mount["RW"] else "ro"
    label = ":".join(part for part in (_str(mount.get("Type")), mode) if part)
    descriptor = " ".join(
        part for part in (_str(mount.get("Source")), "→", _str(mount.get("Destination"))) if part
    )
    return f"{descriptor} ({label})" if label else descriptor or None


def _describe_port(container_port: str, bindings: Any) -> list[str]:
    if not isinstance(bindings, list):
        return [f"{container_port} (internal)"]
    published = []
    for binding in bindings:
        if not isinstance(binding, dict):
            continue
        host = ":".join(
            part for part in (_str(binding.get("HostIp")), _str(binding.get("HostPort"))) if part
        )
        if host:
            published.append(f"{host} → {container_port}")
    return published or [f"{container_port} (internal)"]


def details(raw: Any) -> InspectDetails | None:
    """Environment, mounts and port bindings as display strings."""
    root = _root(raw)
    if root is None:
        return None
    env = _obj(root.get("Config")).get("Env")
    mounts = root.get("Mounts")
    ports = _obj(_obj(root.get("NetworkSettings")).get("Ports"))
    return InspectDetails(
        env=tuple(item for item in env if isinstance(item, str)) if isinstance(env, list) else (),
        mounts=tuple(
            text for text in map(_describe_mount, mounts if isinstance(mounts, list) else [])
            if text
        ),
        ports=tuple(
            text
            for container_port, bindings in ports.items()
            for text in _describe_port(container_port, bindings)
        ),
    )
