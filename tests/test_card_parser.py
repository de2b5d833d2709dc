"""Tests for the end-to-end card text parser and record assembly."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from src.extraction.card_parser import CardParser, assemble_record, parse_card_text
from src.extraction.field_extractor import Candidate, ExtractedFields
from src.extraction.line_classifier import ClassifiedLines, LineRecord
from src.extraction.record import ContactRecord, FieldKind


class TestCardParser:
    """Tests for the CardParser class."""

    def setup_method(self) -> None:
        self.parser = CardParser()

    def test_parse_full_card(self, sample_card_text: str) -> None:
        record = self.parser.parse(sample_card_text)
        assert record == ContactRecord(
            name="John Smith",
            email="john.smith@acme.com",
            phone="+1-555-123-4567",
            company="Acme Technologies Inc",
            job_title="Senior Engineer",
            website="acme.com",
        )

    def test_parse_email_only(self) -> None:
        record = self.parser.parse("contact@biz.io")
        assert record.to_dict(exclude_none=True) == {"email": "contact@biz.io"}

    def test_uppercase_company_is_not_a_name(self) -> None:
        record = self.parser.parse("ACME CORP")
        assert record.company == "ACME CORP"
        assert record.name is None

    def test_ocr_confused_email(self) -> None:
        record = self.parser.parse("J0HN@C0MPANY.COM")
        assert record.email == "john@company.com"

    def test_uk_phone_fallback(self) -> None:
        record = self.parser.parse("Jane Doe\nTel 442071234567")
        assert record.phone == "+442071234567"
        assert record.name == "Jane Doe"

    def test_doubled_www_website(self) -> None:
        record = self.parser.parse("www.www.acme.com")
        assert record.website == "acme.com"

    def test_empty_text_gives_empty_record(self) -> None:
        record = self.parser.parse("")
        assert record.is_empty
        assert record.to_dict(exclude_none=True) == {}

    @pytest.mark.parametrize(
        "text",
        [
            "\n\n\n",
            "@@@ ... ---",
            "+" * 100,
            "1" * 200,
            "\x00\x01\x02",
            "Müller & Söhne GmbH\nGeschäftsführer",
            "a" * 10_000,
            "www.\n@\n()",
        ],
    )
    def test_never_raises(self, text: str) -> None:
        assert isinstance(self.parser.parse(text), ContactRecord)

    def test_parse_card_text_function(self, sample_card_text: str) -> None:
        assert parse_card_text(sample_card_text) == self.parser.parse(sample_card_text)

    def test_parallel_parsing_matches_serial(self, sample_card_text: str) -> None:
        texts = [sample_card_text, "contact@biz.io", "ACME CORP", "Jane Doe\nCEO"] * 25
        serial = [self.parser.parse(t) for t in texts]
        with ThreadPoolExecutor(max_workers=8) as pool:
            parallel = list(pool.map(self.parser.parse, texts))
        assert parallel == serial


class TestAssembleRecord:
    """Tests for record assembly."""

    def test_normalizes_each_value(self) -> None:
        fields = ExtractedFields(
            email=Candidate(FieldKind.EMAIL, "Bob@Example.COM", 0, 15),
            phone=Candidate(FieldKind.PHONE, " 555 123 4567", 16, 29),
        )
        classified = ClassifiedLines(
            name=LineRecord(0, "Bob  Jones", FieldKind.NAME),
            company=LineRecord(1, "Jones & Co,", FieldKind.COMPANY),
        )
        record = assemble_record(fields, classified)
        assert record.email == "bob@example.com"
        assert record.phone == "+1-555-123-4567"
        assert record.name == "Bob Jones"
        assert record.company == "Jones & Co"
        assert record.job_title is None
        assert record.website is None

    def test_nothing_found(self) -> None:
        record = assemble_record(ExtractedFields(), ClassifiedLines())
        assert record.is_empty


class TestContactRecord:
    """Tests for the ContactRecord data class."""

    def test_to_dict_includes_all_fields(self) -> None:
        data = ContactRecord(name="Ann Lee").to_dict()
        assert set(data) == {"name", "email", "phone", "company", "job_title", "website"}
        assert data["email"] is None

    def test_is_empty(self) -> None:
        assert ContactRecord().is_empty
        assert not ContactRecord(website="acme.com").is_empty

    def test_immutable(self) -> None:
        record = ContactRecord(name="Ann Lee")
        with pytest.raises(AttributeError):
            record.name = "Other"  # type: ignore[misc]
