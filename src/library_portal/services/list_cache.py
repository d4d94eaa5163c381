"""In-memory list of request records shown in an admin listing."""

from dataclasses import dataclass, field, replace

from library_portal.domain.requests import RequestRecord, RequestStatus


@dataclass
class RequestListCache:
    """Records of the current page, in the order the API returned them."""

    _records: list[RequestRecord] = field(default_factory=list)

    @property
    def records(self) -> list[RequestRecord]:
        return list(self._records)

    def replace_all(self, records: list[RequestRecord]) -> None:
        self._records = list(records)

    def get(self, record_id: str) -> RequestRecord | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def patch_status(
        self, record_id: str, status: RequestStatus, admin_note: str | None = None
    ) -> RequestRecord | None:
        """Update a record's status (and note, when given) in place."""
        for index, record in enumerate(self._records):
            if record.id == record_id:
                changes: dict[str, object] = {"status": status}
                if admin_note is not None:
                    changes["admin_note"] = admin_note
                patched = replace(record, **changes)
                self._records[index] = patched
                return patched
        return None

    def remove(self, record_id: str) -> None:
        self._records = [record for record in self._records if record.id != record_id]
