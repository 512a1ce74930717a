import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from resumehub.core.config import DOCX_CONTENT_TYPE, PDF_CONTENT_TYPE
from resumehub.core.exceptions import (
    ExtractionError,
    IngestionError,
    MalformedAIResponseError,
    ParsingError,
    PersistenceError,
    ValidationFailedError,
)
from resumehub.models.resume import Resume
from resumehub.schemas.resume import ProcessingStatus
from resumehub.services import resume_service
from resumehub.services.resume_parser import ResumeParser
from resumehub.services.text_extraction import ensure_supported, extract_text_async
from resumehub.services.text_validation import validate_extracted_text
from resumehub.storage.base import FileStorage

logger = logging.getLogger(__name__)

FILE_EXTENSIONS = {
    PDF_CONTENT_TYPE: ".pdf",
    DOCX_CONTENT_TYPE: ".docx",
}


@dataclass
class IngestionOutcome:
    """Where one upload ended up.

    ``error`` is the stage failure that was recorded on the resume, or None
    when the resume completed.
    """

    resume: Resume
    warnings: list[str] = field(default_factory=list)
    error: IngestionError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


async def _fail(
    db: AsyncSession,
    resume: Resume,
    error: IngestionError,
    warnings: list[str] | None = None,
) -> IngestionOutcome:
    logger.warning("Resume %s failed at %s stage: %s", resume.id, error.stage, error)
    raw_response = error.raw_response if isinstance(error, MalformedAIResponseError) else None
    await resume_service.transition_status(
        db, resume, ProcessingStatus.FAILED, error=str(error), raw_response=raw_response
    )
    return IngestionOutcome(resume=resume, warnings=warnings or [], error=error)


async def run_ingestion(
    db: AsyncSession,
    resume: Resume,
    storage: FileStorage,
    parser: ResumeParser,
) -> IngestionOutcome:
    """Drive an ``uploaded`` resume through extraction, validation and AI parsing.

    Every transition is committed before the next stage starts. Stage
    failures are recorded on the resume and returned in the outcome;
    ``PersistenceError`` propagates.
    """
    await resume_service.transition_status(db, resume, ProcessingStatus.PROCESSING)

    # 1. Extract
    try:
        abs_path = await storage.retrieve(resume.file_path)
        text = await extract_text_async(abs_path, resume.content_type)
    except FileNotFoundError as e:
        error = ExtractionError(f"Stored file is missing: {resume.file_path}")
        error.__cause__ = e
        return await _fail(db, resume, error)
    except IngestionError as e:
        return await _fail(db, resume, e)

    # 2. Validate
    validation = validate_extracted_text(text)
    if not validation.is_valid:
        return await _fail(
            db,
            resume,
            ValidationFailedError(validation.errors, validation.warnings),
            validation.warnings,
        )
    await resume_service.save_extracted_text(db, resume, text)
    warnings = validation.warnings

    # 3. Parse
    try:
        result = await parser.parse(text)
    except ParsingError as e:
        return await _fail(db, resume, e, warnings)
    except Exception as e:
        logger.exception("Unexpected error from %s parser", parser.provider)
        error = ParsingError(f"Failed to extract resume data: {e}")
        error.__cause__ = e
        return await _fail(db, resume, error, warnings)

    if not result.success:
        error = ParsingError("Failed to parse resume data with AI")
        return await _fail(db, resume, error, warnings)

    await resume_service.transition_status(
        db,
        resume,
        ProcessingStatus.COMPLETED,
        parsed_data=result.data.model_dump(),
        ai_confidence=result.confidence,
    )
    return IngestionOutcome(resume=resume, warnings=warnings)


async def ingest_upload(
    db: AsyncSession,
    storage: FileStorage,
    parser: ResumeParser,
    *,
    user_id: uuid.UUID,
    original_filename: str,
    content_type: str,
    content: bytes,
) -> IngestionOutcome:
    """Store an uploaded file, record it, and run the ingestion pipeline.

    Raises ``UnsupportedMediaTypeError`` before anything is stored. If the
    record cannot be created the stored file is removed again.
    """
    ensure_supported(content_type)

    stored_filename = f"{uuid.uuid4()}{FILE_EXTENSIONS[content_type]}"
    file_path = await storage.save(content, stored_filename, subdir=str(user_id))

    try:
        resume = await resume_service.create_resume(
            db,
            user_id=user_id,
            original_filename=original_filename,
            stored_filename=stored_filename,
            file_path=file_path,
            content_type=content_type,
            file_size_bytes=len(content),
        )
    except PersistenceError:
        logger.error("Could not record upload %s, removing stored file", original_filename)
        await storage.delete(file_path)
        raise

    logger.info("Resume %s uploaded by user %s (%s)", resume.id, user_id, original_filename)
    return await run_ingestion(db, resume, storage, parser)
