"""Unit tests for the completeness score."""

import pytest

from resumehub.schemas.parsed_resume import Education, ParsedResumeData, WorkExperience
from resumehub.services.confidence import calculate_confidence


@pytest.mark.unit
class TestCalculateConfidence:
    def test_empty_data_scores_zero(self) -> None:
        assert calculate_confidence(ParsedResumeData()) == 0

    def test_all_tracked_fields_score_hundred(self) -> None:
        data = ParsedResumeData(
            full_name="Jane Doe",
            email="jane@example.com",
            phone="555",
            skills=["Python"],
            experience=[WorkExperience(company="Acme")],
            education=[Education(institution="MIT")],
        )
        assert calculate_confidence(data) == 100

    def test_skills_only(self) -> None:
        assert calculate_confidence(ParsedResumeData(skills=["Go", "Rust"])) == 17

    def test_half_of_the_fields(self) -> None:
        data = ParsedResumeData(full_name="Jane", email="jane@example.com", skills=["Go"])
        assert calculate_confidence(data) == 50

    def test_untracked_fields_do_not_count(self) -> None:
        data = ParsedResumeData(
            summary="Engineer", address="Somewhere", languages=["English"], certifications=["CKA"]
        )
        assert calculate_confidence(data) == 0

    def test_blank_strings_and_empty_lists_are_absent(self) -> None:
        data = ParsedResumeData(full_name="  ", email="", skills=[], experience=[])
        assert calculate_confidence(data) == 0

    @pytest.mark.parametrize("count", range(7))
    def test_score_is_rounded_share(self, count: int) -> None:
        values = {
            "full_name": "Jane",
            "email": "jane@example.com",
            "phone": "555",
            "skills": ["Go"],
            "experience": [WorkExperience()],
            "education": [Education()],
        }
        data = ParsedResumeData(**dict(list(values.items())[:count]))
        assert calculate_confidence(data) == round(count * 100 / 6)
        assert 0 <= calculate_confidence(data) <= 100
