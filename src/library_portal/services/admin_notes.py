"""Coordinates the admin note prompt around a status change."""

import logging
from dataclasses import dataclass, field

from library_portal.domain.errors import MissingAnnotation, PortalError, ValidationError
from library_portal.domain.requests import RequestStatus
from library_portal.domain.results import ActionResult
from library_portal.services.lifecycle import RequestLifecycleEngine
from library_portal.services.list_query import ListQueryEngine
from library_portal.services.stats import RequestStatsService

_ACTION_VERBS = {
    RequestStatus.APPROVED: "Approve",
    RequestStatus.REJECTED: "Reject",
    RequestStatus.COMPLETED: "Mark completed",
}

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingAction:
    """The status change waiting for its admin note."""

    record_id: str
    target_status: RequestStatus
    display_label: str


@dataclass
class AdminNoteCoordinator:
    """Holds at most one pending status change and commits it with a note."""

    engine: RequestLifecycleEngine
    list_engine: ListQueryEngine | None = None
    stats_service: RequestStatsService | None = None
    pending_action: PendingAction | None = field(default=None, init=False)
    note: str = field(default="", init=False)
    busy: bool = field(default=False, init=False)

    def open(self, record_id: str, target_status: RequestStatus | str) -> ActionResult:
        """Start collecting a note for a status change."""
        if self.pending_action is not None:
            message = "Finish or cancel the current action first"
            return ActionResult.failed(ValidationError(message), message)
        try:
            record, target = self.engine.validate_transition(record_id, target_status)
        except PortalError as exc:
            return ActionResult.failed(exc, "Status change rejected")
        verb = _ACTION_VERBS.get(target, "Process")
        self.pending_action = PendingAction(
            record_id=record.id,
            target_status=target,
            display_label=f"{verb} {record.kind}: {record.display_name}",
        )
        self.note = ""
        return ActionResult.ok(record=record)

    async def confirm(self, note: str) -> ActionResult:
        """Submit the pending change; the prompt closes whatever the outcome."""
        action = self.pending_action
        if action is None:
            message = "No action is waiting for a note"
            return ActionResult.failed(ValidationError(message), message)
        if self.busy:
            message = "The action is already being submitted"
            return ActionResult.failed(ValidationError(message), message)
        cleaned = note.strip()
        if not cleaned:
            self.note = note
            return ActionResult.failed(
                MissingAnnotation("An admin note is required"),
                "An admin note is required",
            )

        self.busy = True
        self.note = cleaned
        try:
            result = await self.engine.request_transition(
                action.record_id, action.target_status, cleaned
            )
            if result.success:
                await self._reconcile()
            return result
        finally:
            self.busy = False
            self.pending_action = None
            self.note = ""

    def cancel(self) -> bool:
        """Discard the pending change; refused while a submission is running."""
        if self.busy:
            return False
        self.pending_action = None
        self.note = ""
        return True

    async def _reconcile(self) -> None:
        if self.list_engine is not None:
            refreshed = await self.list_engine.refresh()
            if not refreshed.success:
                _logger.info("List refresh after status change: %s", refreshed.error)
        if self.stats_service is not None:
            await self.stats_service.refresh()
