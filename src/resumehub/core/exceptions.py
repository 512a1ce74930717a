from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    def __init__(self, resource: str, resource_id: str) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} with id '{resource_id}' not found",
        )


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
        )


class ForbiddenError(HTTPException):
    def __init__(self, detail: str = "Access denied") -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class BadRequestError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class FileValidationError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )


class ConflictError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class IngestionError(Exception):
    """Base class for failures of one resume ingestion stage."""

    stage = "ingestion"


class UnsupportedMediaTypeError(IngestionError):
    """Raised when a document is neither PDF nor DOCX."""

    stage = "upload"


class ExtractionError(IngestionError):
    """Raised when text extraction from a file fails."""

    stage = "extraction"


class ValidationFailedError(IngestionError):
    """Raised when extracted text is unusable."""

    stage = "validation"

    def __init__(self, errors: list[str], warnings: list[str] | None = None) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors
        self.warnings = warnings or []


class ParsingError(IngestionError):
    """Raised when the AI provider could not produce structured data."""

    stage = "ai"


class AIConfigurationError(ParsingError):
    """Raised at startup when the selected AI provider is not usable."""


class MalformedAIResponseError(ParsingError):
    """Raised when the AI response is not a JSON object. Keeps the raw text."""

    def __init__(self, message: str, raw_response: str) -> None:
        super().__init__(message)
        self.raw_response = raw_response


class PersistenceError(Exception):
    """Raised when the resume store cannot read or write a record."""


class InvalidStatusTransitionError(Exception):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move resume from '{current}' to '{target}'")
        self.current = current
        self.target = target
