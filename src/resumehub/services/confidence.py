from resumehub.schemas.parsed_resume import ParsedResumeData

TRACKED_FIELDS = ("full_name", "email", "phone", "skills", "experience", "education")


def _is_present(value: object) -> bool:
    if isinstance(value, list):
        return len(value) > 0
    if isinstance(value, str):
        return bool(value.strip())
    return False


def calculate_confidence(data: ParsedResumeData) -> int:
    """Completeness score 0-100: an equal share per tracked field that is filled in."""
    present = sum(1 for field in TRACKED_FIELDS if _is_present(getattr(data, field)))
    return round(present * 100 / len(TRACKED_FIELDS))
