"""Domain models for booking and tour requests."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class RequestKind(StrEnum):
    """Kinds of resource requests handled by the portal."""

    BOOKING = "booking"
    TOUR = "tour"


class RequestStatus(StrEnum):
    """Lifecycle status of a request record."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RequestRecord:
    """A booking or tour submission with its lifecycle status."""

    id: str
    kind: RequestKind
    owner_user_id: str
    status: RequestStatus
    admin_note: str | None = None
    payload: dict[str, object] = field(default_factory=dict)
    owner_name: str | None = None
    created_at: datetime | None = None
    starts_at: datetime | None = None

    @property
    def display_name(self) -> str:
        """Human label used in admin prompts."""
        if self.kind is RequestKind.TOUR:
            group = str(self.payload.get("groupName") or "Tour")
            return f"{group} - {self.owner_name or 'User'}"
        return str(self.payload.get("activityName") or "Booking")


@dataclass(frozen=True)
class RequestStats:
    """Status counters for a reporting period."""

    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    cancelled: int = 0
    completed: int = 0
