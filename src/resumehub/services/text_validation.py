from pydantic import BaseModel

MIN_TEXT_LENGTH = 50
MAX_TEXT_LENGTH = 50_000
MIN_KEYWORD_MATCHES = 3

RESUME_KEYWORDS = (
    "experience",
    "education",
    "skills",
    "objective",
    "summary",
    "work",
    "job",
    "employment",
    "degree",
    "university",
    "college",
)


class TextValidationResult(BaseModel):
    is_valid: bool = True
    errors: list[str] = []
    warnings: list[str] = []


def validate_extracted_text(text: str | None) -> TextValidationResult:
    """Check that extracted text is usable for parsing.

    Only empty text blocks processing; length and keyword checks add
    advisory warnings.
    """
    result = TextValidationResult()

    if not text:
        result.is_valid = False
        result.errors.append("No text could be extracted from the file")
        return result

    if len(text) < MIN_TEXT_LENGTH:
        result.warnings.append(
            "Extracted text seems very short. The resume might not be processed correctly."
        )

    if len(text) > MAX_TEXT_LENGTH:
        result.warnings.append("Extracted text is very long. This might affect processing speed.")

    lowered = text.lower()
    found = [keyword for keyword in RESUME_KEYWORDS if keyword in lowered]
    if len(found) < MIN_KEYWORD_MATCHES:
        result.warnings.append("The document might not be a resume based on content analysis.")

    return result
