"""Business card text parser.

Turns raw OCR text into a ``ContactRecord``: pattern extraction for
email, phone, and website, line classification for name, company, and
job title, then normalization of every value found. Parsing never
fails; anything unrecognized is simply left out of the record.
"""

from src.utils.logger import get_logger

from .field_extractor import ExtractedFields, FieldExtractor
from .line_classifier import ClassifiedLines, LineClassifier
from .normalizer import (
    normalize_company,
    normalize_email,
    normalize_job_title,
    normalize_name,
    normalize_phone,
    normalize_website,
)
from .record import ContactRecord

logger = get_logger(__name__)


def assemble_record(
    fields: ExtractedFields, classified: ClassifiedLines
) -> ContactRecord:
    """Normalize the extracted values and combine them into one record.

    Args:
        fields: Pattern-extracted email, phone, and website candidates.
        classified: Lines assigned to the name, company, and job-title slots.

    Returns:
        Contact record with absent fields left as ``None``.
    """
    return ContactRecord(
        name=normalize_name(classified.name.text) if classified.name else None,
        email=normalize_email(fields.email.value) if fields.email else None,
        phone=normalize_phone(fields.phone.value) if fields.phone else None,
        company=(
            normalize_company(classified.company.text) if classified.company else None
        ),
        job_title=(
            normalize_job_title(classified.job_title.text)
            if classified.job_title
            else None
        ),
        website=normalize_website(fields.website.value) if fields.website else None,
    )


class CardParser:
    """Parses business card text into structured contact records.

    Holds only compiled patterns, so one instance can be shared between
    threads and requests.
    """

    def __init__(self) -> None:
        self.field_extractor = FieldExtractor()
        self.line_classifier = LineClassifier(self.field_extractor)

    def parse(self, text: str) -> ContactRecord:
        """Parse raw OCR text into a contact record.

        Args:
            text: Newline-delimited OCR output.

        Returns:
            Contact record; all fields are ``None`` when nothing matched.
        """
        fields = self.field_extractor.extract(text)
        classified = self.line_classifier.classify(text)
        record = assemble_record(fields, classified)

        logger.debug(
            "Parsed card text into %d fields", len(record.to_dict(exclude_none=True))
        )
        return record


def parse_card_text(text: str) -> ContactRecord:
    """Parse ``text`` with a fresh ``CardParser``."""
    return CardParser().parse(text)
