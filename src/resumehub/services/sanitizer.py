"""Coerce untrusted AI output into a fully populated ``ParsedResumeData``.

The model's JSON is treated as arbitrary input: every field is looked up
with an explicit type check and anything unexpected falls back to the
field's default. Keys are accepted in the camelCase form the prompt asks
for and in the snake_case form of ``ParsedResumeData`` itself, so that a
dumped result can be fed back in unchanged.
"""

from collections.abc import Mapping
from typing import Any

from resumehub.schemas.parsed_resume import (
    Education,
    ParsedResumeData,
    Project,
    WorkExperience,
)

# attribute name -> camelCase key used in the prompt schema
_WIRE_NAMES = {
    "full_name": "fullName",
    "linkedin_url": "linkedinLink",
    "github_url": "githubLink",
    "start_date": "startDate",
    "end_date": "endDate",
    "is_current": "isCurrent",
    "field_of_study": "fieldOfStudy",
}


def _get(raw: Mapping[str, Any], name: str) -> Any:
    value = raw.get(name)
    if value is None:
        # Present-but-null snake_case key falls back to the wire name
        value = raw.get(_WIRE_NAMES.get(name, name))
    return value


def _optional_str(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _mappings(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _experience(raw: Mapping[str, Any]) -> WorkExperience:
    end_date = _text(_get(raw, "end_date"))
    return WorkExperience(
        company=_text(_get(raw, "company")),
        position=_text(_get(raw, "position")),
        start_date=_text(_get(raw, "start_date")),
        end_date=end_date,
        description=_text(_get(raw, "description")),
        # Explicit flag OR an end date mentioning "present"
        is_current=bool(_get(raw, "is_current")) or "present" in end_date.lower(),
    )


def _education(raw: Mapping[str, Any]) -> Education:
    return Education(
        institution=_text(_get(raw, "institution")),
        degree=_text(_get(raw, "degree")),
        field_of_study=_text(_get(raw, "field_of_study")),
        start_date=_text(_get(raw, "start_date")),
        end_date=_text(_get(raw, "end_date")),
        gpa=_text(_get(raw, "gpa")),
        description=_text(_get(raw, "description")),
    )


def _project(raw: Mapping[str, Any]) -> Project:
    return Project(
        name=_text(_get(raw, "name")),
        description=_text(_get(raw, "description")),
        technologies=_str_list(_get(raw, "technologies")),
        start_date=_text(_get(raw, "start_date")),
        end_date=_text(_get(raw, "end_date")),
        link=_text(_get(raw, "link")),
    )


def sanitize_parsed_data(raw: object) -> ParsedResumeData:
    """Return a fully defaulted ``ParsedResumeData`` for any input. Never raises.

    A ``ParsedResumeData`` is accepted as input too, so the function can be
    applied to its own result.
    """
    if isinstance(raw, ParsedResumeData):
        raw = raw.model_dump()
    if not isinstance(raw, Mapping):
        return ParsedResumeData()

    email = _optional_str(_get(raw, "email"))
    return ParsedResumeData(
        full_name=_optional_str(_get(raw, "full_name")),
        email=email.lower() if email else None,
        phone=_optional_str(_get(raw, "phone")),
        address=_optional_str(_get(raw, "address")),
        summary=_optional_str(_get(raw, "summary")),
        linkedin_url=_optional_str(_get(raw, "linkedin_url")),
        github_url=_optional_str(_get(raw, "github_url")),
        skills=_str_list(_get(raw, "skills")),
        languages=_str_list(_get(raw, "languages")),
        certifications=_str_list(_get(raw, "certifications")),
        experience=[_experience(item) for item in _mappings(_get(raw, "experience"))],
        education=[_education(item) for item in _mappings(_get(raw, "education"))],
        projects=[_project(item) for item in _mappings(_get(raw, "projects"))],
    )
