import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ProcessingStatus(StrEnum):
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# Terminal states have no outgoing edges
ALLOWED_TRANSITIONS: dict[ProcessingStatus, frozenset[ProcessingStatus]] = {
    ProcessingStatus.UPLOADED: frozenset({ProcessingStatus.PROCESSING}),
    ProcessingStatus.PROCESSING: frozenset({ProcessingStatus.COMPLETED, ProcessingStatus.FAILED}),
    ProcessingStatus.COMPLETED: frozenset(),
    ProcessingStatus.FAILED: frozenset(),
}


class ResumeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID | None
    original_filename: str
    stored_filename: str
    content_type: str
    file_size_bytes: int
    processing_status: str
    processing_error: str | None
    ai_raw_response: str | None = None
    parsed_data: dict[str, Any]
    ai_confidence: int | None
    extracted_text: str
    created_at: datetime
    updated_at: datetime


class ResumeSummary(BaseModel):
    """List-view projection of a resume."""

    id: uuid.UUID
    user_id: uuid.UUID | None
    stored_filename: str
    original_filename: str
    full_name: str | None = None
    email: str | None = None
    skills: list[str] = []
    processing_status: str
    ai_confidence: int | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_resume(cls, resume: Any) -> "ResumeSummary":
        parsed = resume.parsed_data or {}
        return cls(
            id=resume.id,
            user_id=resume.user_id,
            stored_filename=resume.stored_filename,
            original_filename=resume.original_filename,
            full_name=parsed.get("full_name"),
            email=parsed.get("email"),
            skills=parsed.get("skills") or [],
            processing_status=resume.processing_status,
            ai_confidence=resume.ai_confidence,
            created_at=resume.created_at,
            updated_at=resume.updated_at,
        )


class UploadResult(BaseModel):
    """Outcome of one ingestion run, returned for successes and failures alike."""

    message: str
    id: uuid.UUID
    stored_filename: str
    original_filename: str
    processing_status: str
    processing_error: str | None = None
    parsed_data: dict[str, Any]
    ai_confidence: int | None
    warnings: list[str] = []
    stage: str | None = None
    raw_response: str | None = None
    created_at: datetime


class ExportMetadata(BaseModel):
    file_name: str
    uploaded_at: datetime
    processed_at: datetime
    processing_status: str
    ai_confidence: int | None


class ResumeExport(BaseModel):
    metadata: ExportMetadata
    parsed_data: dict[str, Any]
    raw_text: str | None = None


class OwnerInfo(BaseModel):
    id: uuid.UUID
    name: str
    email: str


class AdminResumeRead(ResumeRead):
    user: OwnerInfo | None = None
