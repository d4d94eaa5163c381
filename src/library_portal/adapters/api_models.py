"""Pydantic models for portal API payloads."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from library_portal.domain.requests import (
    RequestKind,
    RequestRecord,
    RequestStats,
    RequestStatus,
)
from library_portal.domain.users import Role, UserProfile


class ApiUser(BaseModel):
    """User payload returned by the auth endpoints."""

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str = ""
    email: str
    role: Role = Role.USER
    is_verified: bool = Field(
        default=False, validation_alias=AliasChoices("isVerified", "is_verified")
    )
    origin_institution: str | None = Field(
        default=None, validation_alias="originInstitution"
    )
    phone_number: str | None = Field(default=None, validation_alias="phoneNumber")

    def to_domain(self) -> UserProfile:
        return UserProfile(
            id=self.id,
            name=self.name,
            email=self.email,
            role=self.role,
            is_verified=self.is_verified,
            origin_institution=self.origin_institution,
            phone_number=self.phone_number,
        )


class ApiAuthPayload(BaseModel):
    """Body of login, verify, reset and profile responses."""

    user: ApiUser | None = None
    token: str | None = None


class ApiOwner(BaseModel):
    """Populated owner reference inside a request payload."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str | None = None
    email: str | None = None


class ApiRequest(BaseModel):
    """Booking or tour row; unknown fields are kept as the domain payload."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    user_id: ApiOwner | str | None = Field(
        default=None, validation_alias=AliasChoices("userId", "user_id")
    )
    status: RequestStatus
    admin_note: str | None = Field(default=None, validation_alias="adminNote")
    created_at: datetime | None = Field(default=None, validation_alias="createdAt")
    start_time: datetime | None = Field(default=None, validation_alias="startTime")

    def to_domain(self, kind: RequestKind) -> RequestRecord:
        owner = self.user_id
        if isinstance(owner, ApiOwner):
            owner_id, owner_name = owner.id, owner.name
        else:
            owner_id, owner_name = owner or "", None
        return RequestRecord(
            id=self.id,
            kind=kind,
            owner_user_id=owner_id,
            status=self.status,
            admin_note=self.admin_note,
            payload=dict(self.model_extra or {}),
            owner_name=owner_name,
            created_at=self.created_at,
            starts_at=self.start_time,
        )


class ApiPagination(BaseModel):
    """Pagination block of list responses."""

    page: int = 1
    pages: int = 1
    total: int = 0


class ApiRequestList(BaseModel):
    """Body of the admin list endpoints."""

    data: list[ApiRequest] = Field(default_factory=list)
    pagination: ApiPagination = Field(default_factory=ApiPagination)


class ApiStatsSummary(BaseModel):
    """Status counters returned by the stats endpoints."""

    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    cancelled: int = 0
    completed: int = 0

    def to_domain(self) -> RequestStats:
        return RequestStats(**self.model_dump())
