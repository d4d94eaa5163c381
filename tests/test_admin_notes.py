"""Tests for the admin note prompt coordinator."""

import asyncio

from library_portal.domain.errors import (
    GatewayError,
    InvalidTransition,
    MissingAnnotation,
    ValidationError,
)
from library_portal.domain.requests import RequestKind, RequestStats, RequestStatus
from library_portal.services.admin_notes import AdminNoteCoordinator
from library_portal.services.list_query import ListQueryEngine
from library_portal.services.stats import RequestStatsService
from tests.conftest import FakeRequestsClient, admin_engine, make_record


def test_open_builds_label_from_record() -> None:
    engine, _ = admin_engine([make_record("b1", activity="Bedah Buku")])
    coordinator = AdminNoteCoordinator(engine)

    result = coordinator.open("b1", RequestStatus.APPROVED)

    assert result.success is True
    assert coordinator.pending_action is not None
    assert coordinator.pending_action.display_label == "Approve booking: Bedah Buku"


def test_tour_label_includes_owner_name() -> None:
    engine, _ = admin_engine(
        [make_record("t1", kind=RequestKind.TOUR, activity="SMA 3")],
        kind=RequestKind.TOUR,
    )
    coordinator = AdminNoteCoordinator(engine)

    coordinator.open("t1", "rejected")

    assert coordinator.pending_action.display_label == "Reject tour: SMA 3 - Sari"


def test_only_one_action_may_be_pending() -> None:
    engine, _ = admin_engine([make_record("b1"), make_record("b2")])
    coordinator = AdminNoteCoordinator(engine)
    coordinator.open("b1", "approved")

    second = coordinator.open("b2", "rejected")

    assert isinstance(second.failure, ValidationError)
    assert coordinator.pending_action.record_id == "b1"


def test_open_rejects_illegal_transition() -> None:
    engine, _ = admin_engine([make_record("b1")])
    coordinator = AdminNoteCoordinator(engine)

    result = coordinator.open("b1", "completed")

    assert isinstance(result.failure, InvalidTransition)
    assert coordinator.pending_action is None


def test_blank_note_keeps_prompt_open() -> None:
    engine, client = admin_engine([make_record("b1")])
    coordinator = AdminNoteCoordinator(engine)
    coordinator.open("b1", "approved")

    result = asyncio.run(coordinator.confirm("  "))

    assert isinstance(result.failure, MissingAnnotation)
    assert coordinator.pending_action is not None
    assert client.status_calls == []


def test_confirm_commits_and_refreshes_listing_and_stats() -> None:
    records = [make_record("b1")]
    engine, client = admin_engine(records)
    list_engine = ListQueryEngine(
        kind=RequestKind.BOOKING, client=client, cache=engine.cache, page_size=10
    )
    stats = RequestStatsService(kind=RequestKind.BOOKING, client=client)
    coordinator = AdminNoteCoordinator(engine, list_engine, stats)
    coordinator.open("b1", "approved")

    result = asyncio.run(coordinator.confirm(" Ruangan tersedia "))

    assert result.success is True
    assert client.status_calls == [("b1", RequestStatus.APPROVED, "Ruangan tersedia")]
    assert len(client.list_calls) == 1
    assert client.stats_calls == ["month"]
    assert stats.summary == RequestStats(total=3, pending=1)
    assert coordinator.pending_action is None
    assert coordinator.note == ""
    assert engine.cache.get("b1").status == RequestStatus.APPROVED


def test_failed_submission_still_closes_prompt() -> None:
    client = FakeRequestsClient(
        failures={"update_request_status": GatewayError("Server unavailable")}
    )
    engine, _ = admin_engine([make_record("b1")], client)
    coordinator = AdminNoteCoordinator(engine)
    coordinator.open("b1", "approved")

    result = asyncio.run(coordinator.confirm("ok"))

    assert result.error == "Server unavailable"
    assert coordinator.pending_action is None
    assert coordinator.busy is False


def test_second_confirm_while_busy_is_refused() -> None:
    async def scenario() -> tuple[object, object, bool, int]:
        gate = asyncio.Event()
        engine, client = admin_engine([make_record("b1")])
        original = client.update_request_status

        async def slow_update(*args: object) -> None:
            await gate.wait()
            await original(*args)

        client.update_request_status = slow_update
        coordinator = AdminNoteCoordinator(engine)
        coordinator.open("b1", "approved")
        first = asyncio.create_task(coordinator.confirm("ok"))
        await asyncio.sleep(0)
        second = await coordinator.confirm("again")
        cancelled = coordinator.cancel()
        gate.set()
        return await first, second, cancelled, len(client.status_calls)

    first, second, cancelled, calls = asyncio.run(scenario())

    assert first.success is True
    assert isinstance(second.failure, ValidationError)
    assert cancelled is False
    assert calls == 1


def test_cancel_discards_pending_action() -> None:
    engine, client = admin_engine([make_record("b1")])
    coordinator = AdminNoteCoordinator(engine)
    coordinator.open("b1", "approved")

    assert coordinator.cancel() is True
    assert coordinator.pending_action is None
    assert client.status_calls == []
