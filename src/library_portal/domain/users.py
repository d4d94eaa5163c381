"""Domain models for portal users."""

from dataclasses import dataclass
from enum import StrEnum


class Role(StrEnum):
    """Roles known to the portal."""

    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class UserProfile:
    """Profile of the signed-in user as reported by the API."""

    id: str
    name: str
    email: str
    role: Role
    is_verified: bool
    origin_institution: str | None = None
    phone_number: str | None = None
