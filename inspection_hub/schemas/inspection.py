from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class StatusType(str, enum.Enum):
    inspection = "inspection"
    task = "task"


class DocumentCategory(str, enum.Enum):
    carrier_estimate = "Carrier Estimate"
    policy = "Policy"
    contractor_estimate = "Contractor Estimate"
    other = "Other"


class TaskRequestType(str, enum.Enum):
    photos = "Photos"
    documents = "Documents"
    other = "Other"


class StoredRecord(BaseModel):
    """Fields the store maintains on every entity."""

    model_config = ConfigDict(extra="allow")

    id: str
    created_date: datetime | None = None
    updated_date: datetime | None = None
    created_by: str | None = None


# ---------------------------------------------------------------------------
# InspectionRequest
# ---------------------------------------------------------------------------


class InspectionRequestBase(BaseModel):
    client_name: str = Field(min_length=1, max_length=255)
    property_address: str | None = None
    client_contact_number: str | None = None
    agent_contact_number: str | None = None
    memo: str | None = None
    urgent: bool = False
    claim_number: str | None = None
    carrier: str | None = None
    # label of an inspection StatusOption; first defined option when omitted
    status: str | None = None
    companycam_url: str | None = None


class InspectionRequestCreate(InspectionRequestBase):
    pass


class ClientInfoUpdate(BaseModel):
    property_address: str | None = None
    client_contact_number: str | None = None
    agent_contact_number: str | None = None
    memo: str | None = None
    urgent: bool | None = None
    claim_number: str | None = None
    carrier: str | None = None
    companycam_url: str | None = None


class StatusChange(BaseModel):
    status: str = Field(min_length=1, max_length=120)


class InspectionRequestRead(InspectionRequestBase, StoredRecord):
    pass


# ---------------------------------------------------------------------------
# ClientDocument
# ---------------------------------------------------------------------------


class ClientDocumentRead(StoredRecord):
    inspection_request_id: str
    document_name: str
    original_filename: str | None = None
    file_url: str
    document_category: DocumentCategory = DocumentCategory.other
    file_type: str | None = None
    file_size: int | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Task / Note
# ---------------------------------------------------------------------------


class TaskBase(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    request_type: TaskRequestType = TaskRequestType.other
    assigned_to: str | None = None
    due_date: datetime | None = None


class TaskCreate(TaskBase):
    title: str | None = Field(default=None, max_length=500)
    related_request_id: str = Field(min_length=1)
    status: str | None = None


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=500)
    description: str | None = None
    request_type: TaskRequestType | None = None
    assigned_to: str | None = None
    due_date: datetime | None = None
    status: str | None = None


class TaskRead(TaskBase, StoredRecord):
    related_request_id: str
    status: str | None = None
    completed_date: datetime | None = None


class NoteCreate(BaseModel):
    content: str = Field(min_length=1)


class NoteRead(StoredRecord):
    task_id: str
    content: str


# ---------------------------------------------------------------------------
# StatusOption
# ---------------------------------------------------------------------------


class StatusOptionBase(BaseModel):
    type: StatusType
    label: str = Field(min_length=1, max_length=120)
    color_bg: str = "bg-blue-100"
    color_text: str = "text-blue-800"


class StatusOptionCreate(StatusOptionBase):
    model_config = ConfigDict(str_strip_whitespace=True)


class StatusOptionUpdate(BaseModel):
    color_bg: str | None = None
    color_text: str | None = None


class StatusRename(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    new_label: str = Field(min_length=1, max_length=120)


class StatusOptionRead(StatusOptionBase, StoredRecord):
    usage_count: int | None = None
