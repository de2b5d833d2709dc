"""Pattern-based extraction of email, phone, and website candidates.

Scans the full OCR text, independent of line structure, and keeps the
first match for each field kind.
"""

import re
from dataclasses import dataclass

from src.utils.logger import get_logger

from .record import FieldKind

logger = get_logger(__name__)


EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}")

# A digit followed by 8-15 digits or separators; whitespace includes newlines.
PHONE_PATTERN = re.compile(r"\+?[\s\-()]*[0-9][\s\-()0-9]{8,15}")

WEBSITE_TLDS: tuple[str, ...] = ("com", "net", "org", "io", "co", "uk", "ca", "de")

# Domains glued to an "@" belong to an email address, not a website.
WEBSITE_PATTERN = re.compile(
    r"(?<![\w@.\-])"
    r"(?:www\.[A-Za-z0-9.\-]+\.[A-Za-z]{2,}"
    r"|[A-Za-z0-9.\-]+\.(?:" + "|".join(WEBSITE_TLDS) + r"))"
    r"(?![\w@\-])",
    re.IGNORECASE,
)

_PATTERNS: dict[FieldKind, re.Pattern[str]] = {
    FieldKind.EMAIL: EMAIL_PATTERN,
    FieldKind.PHONE: PHONE_PATTERN,
    FieldKind.WEBSITE: WEBSITE_PATTERN,
}


@dataclass(frozen=True)
class Candidate:
    """A raw pattern match eligible to become a field value."""

    kind: FieldKind
    value: str
    start_pos: int
    end_pos: int


@dataclass(frozen=True)
class ExtractedFields:
    """First candidate found for each pattern-extracted field."""

    email: Candidate | None = None
    phone: Candidate | None = None
    website: Candidate | None = None


class FieldExtractor:
    """Regex extractor for the fields that have a recognizable shape.

    The email, phone, and website patterns run independently over the
    whole text, so their matches may overlap (for example a phone match
    taken from digits inside an email address).
    """

    def __init__(self) -> None:
        self.patterns = dict(_PATTERNS)

    def find_candidates(self, text: str, kind: FieldKind) -> list[Candidate]:
        """Return every match for ``kind`` in text order.

        Args:
            text: Raw OCR text.
            kind: One of the pattern-extracted field kinds.

        Returns:
            All candidates, possibly empty.

        Raises:
            KeyError: If ``kind`` is not extracted by pattern.
        """
        pattern = self.patterns[kind]
        return [
            Candidate(
                kind=kind,
                value=match.group(0),
                start_pos=match.start(),
                end_pos=match.end(),
            )
            for match in pattern.finditer(text)
        ]

    def first_candidate(self, text: str, kind: FieldKind) -> Candidate | None:
        match = self.patterns[kind].search(text)
        if match is None:
            return None
        return Candidate(
            kind=kind,
            value=match.group(0),
            start_pos=match.start(),
            end_pos=match.end(),
        )

    def extract(self, text: str) -> ExtractedFields:
        """Extract the first email, phone, and website candidate from text.

        Args:
            text: Raw OCR text.

        Returns:
            Candidates for each field; absent fields are ``None``.
        """
        fields = ExtractedFields(
            email=self.first_candidate(text, FieldKind.EMAIL),
            phone=self.first_candidate(text, FieldKind.PHONE),
            website=self.first_candidate(text, FieldKind.WEBSITE),
        )
        logger.debug(
            "Field extraction: email=%s phone=%s website=%s",
            fields.email is not None,
            fields.phone is not None,
            fields.website is not None,
        )
        return fields

    def matches_any(self, line: str) -> bool:
        """Check whether any field pattern matches anywhere in ``line``."""
        return any(pattern.search(line) for pattern in self.patterns.values())
