from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Record = dict[str, Any]


class ClientGraph(BaseModel):
    """A client profile: every request sharing a client_name plus dependents.

    Never stored as such; assembled on demand by the cascade collector.
    Records keep their full field set, original ids included.
    """

    model_config = ConfigDict(frozen=True)

    client_name: str
    requests: list[Record] = Field(default_factory=list)
    documents: list[Record] = Field(default_factory=list)
    tasks: list[Record] = Field(default_factory=list)
    notes: list[Record] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.requests

    def counts(self) -> dict[str, int]:
        return {
            "requests": len(self.requests),
            "documents": len(self.documents),
            "tasks": len(self.tasks),
            "notes": len(self.notes),
        }


class ArchivedData(BaseModel):
    requests: list[Record] = Field(default_factory=list)
    documents: list[Record] = Field(default_factory=list)
    tasks: list[Record] = Field(default_factory=list)
    notes: list[Record] = Field(default_factory=list)


class ArchivedProfileRead(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    client_name: str
    archived_data: ArchivedData
    deleted_by: str | None = None
    original_created_date: datetime | None = None
    created_date: datetime | None = None


class ArchivedProfileSummary(BaseModel):
    id: str
    client_name: str
    deleted_by: str | None = None
    original_created_date: datetime | None = None
    created_date: datetime | None = None
    counts: dict[str, int]


class BulkArchiveRequest(BaseModel):
    client_names: list[str] = Field(min_length=1)


class ArchiveOutcome(BaseModel):
    client_name: str
    archived: bool
    archive_id: str | None = None
    counts: dict[str, int] = Field(default_factory=dict)


class RestoreOutcome(BaseModel):
    archive_id: str
    client_name: str
    counts: dict[str, int]


class ClientSummary(BaseModel):
    client_name: str
    request_count: int
    latest_status: str | None = None
    property_address: str | None = None
    last_activity: datetime | None = None
