"""Tests for CommandLogIndex lookups and deduplication."""

from __future__ import annotations

from fleetwatch.engine.index import CommandLogIndex
from fleetwatch.engine.records import CommandStatus, CommandTypes

from tests.conftest import make_command


def test_latest_successful_wins_and_ignores_later_failure() -> None:
    records = [
        make_command("c1", CommandTypes.DOCKER_LIST, minute=1),
        make_command("c2", CommandTypes.DOCKER_LIST, minute=2),
        make_command("c3", CommandTypes.DOCKER_LIST, minute=3),
    ]
    index = CommandLogIndex(records)
    assert index.latest_successful(CommandTypes.DOCKER_LIST).id == "c3"

    failed = make_command("c4", CommandTypes.DOCKER_LIST, minute=4, status="Failed")
    index = CommandLogIndex([*records, failed])
    assert index.latest_successful(CommandTypes.DOCKER_LIST).id == "c3"


def test_latest_successful_is_order_independent() -> None:
    records = [
        make_command("c3", CommandTypes.DOCKER_LIST, minute=3),
        make_command("c1", CommandTypes.DOCKER_LIST, minute=1),
        make_command("c2", CommandTypes.DOCKER_LIST, minute=2),
    ]
    assert CommandLogIndex(records).latest_successful(CommandTypes.DOCKER_LIST).id == "c3"


def test_latest_successful_ignores_pending() -> None:
    index = CommandLogIndex([
        make_command("c1", CommandTypes.DOCKER_LIST, minute=1),
        make_command("c2", CommandTypes.DOCKER_LIST, minute=2, status="InProgress"),
    ])
    assert index.latest_successful(CommandTypes.DOCKER_LIST).id == "c1"


def test_latest_successful_none_when_absent() -> None:
    index = CommandLogIndex([make_command("c1", CommandTypes.DOCKER_STATS)])
    assert index.latest_successful(CommandTypes.DOCKER_LIST) is None


def test_latest_successful_tie_keeps_first_seen() -> None:
    index = CommandLogIndex([
        make_command("first", CommandTypes.DOCKER_LIST, minute=1),
        make_command("second", CommandTypes.DOCKER_LIST, minute=1),
    ])
    assert index.latest_successful(CommandTypes.DOCKER_LIST).id == "first"


def test_latest_successful_with_key_predicate() -> None:
    index = CommandLogIndex([
        make_command("a", CommandTypes.DOCKER_EXEC, minute=1, target="box-a"),
        make_command("b", CommandTypes.DOCKER_EXEC, minute=2, target="box-b"),
    ])
    found = index.latest_successful(CommandTypes.DOCKER_EXEC, lambda key: key == "box-a")
    assert found.id == "a"


def test_duplicate_ids_keep_most_advanced_status() -> None:
    index = CommandLogIndex([
        make_command("c1", CommandTypes.DOCKER_START, status="Queued", target="x"),
        make_command("c1", CommandTypes.DOCKER_START, status="Success", target="x"),
        make_command("c1", CommandTypes.DOCKER_START, status="Sent", target="x"),
    ])
    assert len(index) == 1
    assert index.ordered[0].status is CommandStatus.SUCCESS


def test_latest_by_target_skips_untargeted() -> None:
    index = CommandLogIndex([
        make_command("a", CommandTypes.DOCKER_STOP, minute=1, target="x"),
        make_command("b", CommandTypes.DOCKER_START, minute=2, target="x", status="Queued"),
        make_command("c", CommandTypes.DOCKER_RESTART, minute=3),
    ])
    overlay = index.latest_by_target(CommandTypes.CONTAINER_ACTIONS)
    assert list(overlay) == ["x"]
    assert overlay["x"].id == "b"


def test_recent_filters_namespaces_newest_first() -> None:
    index = CommandLogIndex([
        make_command("a", CommandTypes.DOCKER_LIST, minute=1),
        make_command("b", "system.reboot", minute=2),
        make_command("c", CommandTypes.COMPOSE_UP, minute=3),
        make_command("d", CommandTypes.DOCKER_STATS, minute=4),
    ])
    assert [r.id for r in index.recent(CommandTypes.NAMESPACES, 2)] == ["d", "c"]
    assert index.recent(CommandTypes.NAMESPACES, 0) == []


def test_successful_is_chronological() -> None:
    index = CommandLogIndex([
        make_command("late", CommandTypes.DOCKER_STATS, minute=5),
        make_command("early", CommandTypes.DOCKER_STATS, minute=1),
        make_command("failed", CommandTypes.DOCKER_STATS, minute=3, status="Failed"),
    ])
    assert [r.id for r in index.successful(CommandTypes.DOCKER_STATS)] == ["early", "late"]
