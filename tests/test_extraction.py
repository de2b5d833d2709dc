"""Tests for pattern-based field extraction and line classification."""

import pytest

from src.extraction.field_extractor import Candidate, ExtractedFields, FieldExtractor
from src.extraction.line_classifier import (
    LineClassifier,
    LineRecord,
    is_likely_company,
    is_likely_job_title,
    is_likely_name,
)
from src.extraction.record import FieldKind


class TestFieldExtractor:
    """Tests for the FieldExtractor class."""

    def setup_method(self) -> None:
        self.extractor = FieldExtractor()

    def test_extract_email(self) -> None:
        fields = self.extractor.extract("Contact: user@example.com")
        assert fields.email is not None
        assert fields.email.value == "user@example.com"
        assert fields.email.kind == FieldKind.EMAIL

    def test_first_email_wins(self) -> None:
        fields = self.extractor.extract("first@one.com\nsecond@two.com")
        assert fields.email is not None
        assert fields.email.value == "first@one.com"

    def test_extract_phone_with_parentheses(self) -> None:
        fields = self.extractor.extract("Phone: (555) 123-4567")
        assert fields.phone is not None
        assert fields.phone.value.strip() == "(555) 123-4567"

    def test_extract_international_phone(self) -> None:
        fields = self.extractor.extract("Tel +44 20 7123 4567")
        assert fields.phone is not None
        assert fields.phone.value == "+44 20 7123 4567"

    def test_short_number_is_not_a_phone(self) -> None:
        fields = self.extractor.extract("Suite 12345")
        assert fields.phone is None

    def test_extract_www_website(self) -> None:
        fields = self.extractor.extract("Visit www.Example.com today")
        assert fields.website is not None
        assert fields.website.value == "www.Example.com"

    def test_extract_bare_domain_website(self) -> None:
        fields = self.extractor.extract("acme.io")
        assert fields.website is not None
        assert fields.website.value == "acme.io"

    def test_unlisted_tld_is_not_a_website(self) -> None:
        fields = self.extractor.extract("example.xyz")
        assert fields.website is None

    def test_email_domain_is_not_a_website(self) -> None:
        fields = self.extractor.extract("contact@biz.io")
        assert fields.email is not None
        assert fields.website is None

    def test_phone_may_overlap_email_digits(self) -> None:
        fields = self.extractor.extract("id1234567890@corp.com")
        assert fields.email is not None
        assert fields.phone is not None
        assert fields.phone.value == "1234567890"

    def test_empty_text(self) -> None:
        assert self.extractor.extract("") == ExtractedFields()

    def test_find_all_candidates_in_order(self) -> None:
        text = "a@x.com and b@y.com"
        candidates = self.extractor.find_candidates(text, FieldKind.EMAIL)
        assert [c.value for c in candidates] == ["a@x.com", "b@y.com"]
        assert all(isinstance(c, Candidate) for c in candidates)
        assert candidates[0].start_pos == 0
        assert candidates[0].end_pos == len("a@x.com")
        assert candidates[1].start_pos > candidates[0].end_pos

    def test_find_candidates_for_line_field_raises(self) -> None:
        with pytest.raises(KeyError):
            self.extractor.find_candidates("John Smith", FieldKind.NAME)

    def test_matches_any(self) -> None:
        assert self.extractor.matches_any("jane@acme.com")
        assert self.extractor.matches_any("555-123-4567")
        assert self.extractor.matches_any("acme.com")
        assert not self.extractor.matches_any("Senior Engineer")


class TestLineHeuristics:
    """Tests for the name, company, and job-title predicates."""

    @pytest.mark.parametrize(
        "text",
        ["John Smith", "Mary Jane Van Dyke", "McDonald Smith", "Anna Lee."],
    )
    def test_likely_names(self, text: str) -> None:
        assert is_likely_name(text)

    @pytest.mark.parametrize(
        "text",
        ["John", "john smith", "ACME CORP", "John Michael Van Der Berg", "J Smith"],
    )
    def test_unlikely_names(self, text: str) -> None:
        assert not is_likely_name(text)

    @pytest.mark.parametrize(
        "text",
        ["ACME CORP", "Smith & Sons", "Bright solutions", "Acme Technologies Inc", "IBM"],
    )
    def test_likely_companies(self, text: str) -> None:
        assert is_likely_company(text)

    def test_unlikely_company(self) -> None:
        assert not is_likely_company("Senior Engineer")

    @pytest.mark.parametrize(
        "text",
        ["Chief Marketing Officer", "Head of Sales", "VP, vice president", "Real Estate Agent"],
    )
    def test_likely_job_titles(self, text: str) -> None:
        assert is_likely_job_title(text)

    def test_unlikely_job_title(self) -> None:
        assert not is_likely_job_title("Software Engineer")


class TestLineClassifier:
    """Tests for the LineClassifier class."""

    def setup_method(self) -> None:
        self.classifier = LineClassifier()

    def test_classify_sample_card(self, sample_card_text: str) -> None:
        result = self.classifier.classify(sample_card_text)
        assert result.name is not None
        assert result.name.text == "John Smith"
        assert result.job_title is not None
        assert result.job_title.text == "Senior Engineer"
        assert result.company is not None
        assert result.company.text == "Acme Technologies Inc."
        assert len(result.lines) == 6

    def test_field_lines_are_never_classified(self, sample_card_text: str) -> None:
        result = self.classifier.classify(sample_card_text)
        extractor = FieldExtractor()
        for line in result.lines:
            if extractor.matches_any(line.text):
                assert line.kind is None

    def test_each_slot_filled_once(self) -> None:
        result = self.classifier.classify("John Smith\nJane Doe\nACME\nIBM")
        assert result.name is not None
        assert result.name.text == "John Smith"
        assert result.company is not None
        assert result.company.text == "ACME"
        kinds = [line.kind for line in result.lines if line.kind is not None]
        assert len(kinds) == len(set(kinds))

    def test_line_with_phone_is_excluded(self) -> None:
        result = self.classifier.classify("Acme Corp 555-123-4567")
        assert result.company is None
        assert result.lines[0].kind is None

    def test_length_bounds(self) -> None:
        assert self.classifier.classify("AB").company is None
        assert self.classifier.classify("X" * 50).company is None
        assert self.classifier.classify("X" * 49).company is not None

    def test_name_like_line_falls_through_when_name_filled(self) -> None:
        result = self.classifier.classify("John Smith\nAcme Group")
        assert result.company is not None
        assert result.company.text == "Acme Group"

    def test_company_takes_precedence_over_job_title(self) -> None:
        result = self.classifier.classify("Director of IT Services")
        assert result.company is not None
        assert result.job_title is None

    def test_job_title_after_company_filled(self) -> None:
        result = self.classifier.classify("ACME CORP\nDirector of IT Services")
        assert result.company is not None
        assert result.company.text == "ACME CORP"
        assert result.job_title is not None
        assert result.job_title.text == "Director of IT Services"

    def test_classification_depends_on_line_order(self) -> None:
        result = self.classifier.classify("Senior Manager\nJohn Smith")
        assert result.name is not None
        assert result.name.text == "Senior Manager"
        assert result.job_title is None

    def test_blank_lines_and_whitespace(self) -> None:
        result = self.classifier.classify("  \n\n   John Smith   \n")
        assert len(result.lines) == 1
        assert result.name == LineRecord(index=2, text="John Smith", kind=FieldKind.NAME)
        assert result.name.is_classified

    def test_windows_line_endings(self) -> None:
        result = self.classifier.classify("John Smith\r\nACME CORP\r\n")
        assert result.name is not None
        assert result.name.text == "John Smith"
        assert result.company is not None
        assert result.company.text == "ACME CORP"
