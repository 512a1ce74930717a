import logging
import uuid

from fastapi import APIRouter, Depends, Query, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from resumehub.api.deps import get_current_user, get_db, get_file_storage, get_resume_parser
from resumehub.core.config import get_settings
from resumehub.core.exceptions import (
    FileValidationError,
    ForbiddenError,
    NotFoundError,
    UnsupportedMediaTypeError,
)
from resumehub.models.resume import Resume
from resumehub.models.user import User
from resumehub.schemas import PaginatedResponse
from resumehub.schemas.resume import (
    ExportMetadata,
    ProcessingStatus,
    ResumeExport,
    ResumeRead,
    ResumeSummary,
    UploadResult,
)
from resumehub.services import pipeline, resume_service
from resumehub.services.resume_parser import ResumeParser
from resumehub.storage.base import FileStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resumes", tags=["resumes"])

STAGE_STATUS_CODES = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "extraction": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "ai": status.HTTP_502_BAD_GATEWAY,
}

STAGE_MESSAGES = {
    "validation": "Failed to extract text from file",
    "extraction": "Failed to extract text from file",
    "ai": "Failed to process resume with AI",
}


def _validate_upload(file: UploadFile) -> None:
    settings = get_settings()
    if not file.filename:
        raise FileValidationError("Filename is required")
    if file.content_type not in settings.allowed_content_types:
        raise FileValidationError(
            f"File type '{file.content_type}' not allowed. Only PDF and DOCX files are accepted"
        )


def _upload_result(outcome: pipeline.IngestionOutcome) -> UploadResult:
    resume = outcome.resume
    stage = outcome.error.stage if outcome.error else None
    return UploadResult(
        message=(
            STAGE_MESSAGES.get(stage, "Failed to process resume")
            if stage
            else "Resume uploaded and processed successfully"
        ),
        id=resume.id,
        stored_filename=resume.stored_filename,
        original_filename=resume.original_filename,
        processing_status=resume.processing_status,
        processing_error=resume.processing_error,
        parsed_data=resume.parsed_data,
        ai_confidence=resume.ai_confidence,
        warnings=outcome.warnings,
        stage=stage,
        raw_response=resume.ai_raw_response,
        created_at=resume.created_at,
    )


async def get_accessible_resume(db: AsyncSession, resume_id: uuid.UUID, user: User) -> Resume:
    resume = await resume_service.get_resume(db, resume_id)
    if not resume:
        raise NotFoundError("Resume", str(resume_id))
    if resume.user_id != user.id and not user.is_admin:
        raise ForbiddenError()
    return resume


@router.post(
    "/upload",
    response_model=UploadResult,
    status_code=status.HTTP_201_CREATED,
)
async def upload_resume(
    file: UploadFile,
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    parser: ResumeParser = Depends(get_resume_parser),
    user: User = Depends(get_current_user),
) -> UploadResult | JSONResponse:
    _validate_upload(file)

    settings = get_settings()
    content = await file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise FileValidationError(f"File size exceeds maximum of {settings.max_upload_size_mb}MB")

    try:
        outcome = await pipeline.ingest_upload(
            db,
            storage,
            parser,
            user_id=user.id,
            original_filename=file.filename or "unknown",
            content_type=file.content_type or "",
            content=content,
        )
    except UnsupportedMediaTypeError as e:
        raise FileValidationError(str(e)) from e

    result = _upload_result(outcome)
    if outcome.error is None:
        return result
    return JSONResponse(
        status_code=STAGE_STATUS_CODES.get(outcome.error.stage, 500),
        content=result.model_dump(mode="json"),
    )


@router.get("", response_model=PaginatedResponse[ResumeSummary])
async def list_resume_history(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    status_filter: ProcessingStatus | None = Query(None, alias="status"),
    search: str | None = Query(None, min_length=1),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PaginatedResponse[ResumeSummary]:
    items, total = await resume_service.list_resumes(
        db, user_id=user.id, status=status_filter, search=search, skip=skip, limit=limit
    )
    return PaginatedResponse(
        items=[ResumeSummary.from_resume(r) for r in items],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/search/{query}", response_model=PaginatedResponse[ResumeSummary])
async def search_resumes(
    query: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PaginatedResponse[ResumeSummary]:
    items, total = await resume_service.search_resumes(
        db, query, user_id=user.id, skip=skip, limit=limit
    )
    return PaginatedResponse(
        items=[ResumeSummary.from_resume(r) for r in items],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/{resume_id}", response_model=ResumeRead)
async def get_resume(
    resume_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ResumeRead:
    resume = await get_accessible_resume(db, resume_id, user)
    return ResumeRead.model_validate(resume)


@router.get("/{resume_id}/export")
async def export_resume(
    resume_id: uuid.UUID,
    include_text: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    """Download the parsed data (and optionally the raw text) as a JSON file."""
    resume = await get_accessible_resume(db, resume_id, user)
    export = ResumeExport(
        metadata=ExportMetadata(
            file_name=resume.original_filename,
            uploaded_at=resume.created_at,
            processed_at=resume.updated_at,
            processing_status=resume.processing_status,
            ai_confidence=resume.ai_confidence,
        ),
        parsed_data=resume.parsed_data,
        raw_text=resume.extracted_text if include_text else None,
    )
    content = export.model_dump(mode="json")
    if not include_text:
        content.pop("raw_text")
    return JSONResponse(
        content=content,
        headers={
            "Content-Disposition": f'attachment; filename="{resume.original_filename}.json"'
        },
    )


@router.delete("/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resume(
    resume_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    user: User = Depends(get_current_user),
) -> None:
    resume = await get_accessible_resume(db, resume_id, user)
    await storage.delete(resume.file_path)
    await resume_service.delete_resume(db, resume)
