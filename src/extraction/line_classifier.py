"""Line-by-line classification of card text into name, company, and job title.

Each non-empty line is tested in card order against the name, company,
and job-title heuristics. A line fills at most one slot, each slot takes
the first qualifying line, and lines already matched by the email, phone,
or website patterns are never considered.
"""

import re
from dataclasses import dataclass, field

from src.utils.logger import get_logger

from .field_extractor import FieldExtractor
from .record import FieldKind

logger = get_logger(__name__)


MIN_LINE_LENGTH = 2
MAX_LINE_LENGTH = 50

NAME_MIN_WORDS = 2
NAME_MAX_WORDS = 4

COMPANY_KEYWORDS: tuple[str, ...] = (
    "Inc",
    "LLC",
    "Corp",
    "Company",
    "Ltd",
    "Group",
    "Solutions",
    "Services",
    "Technologies",
)

JOB_TITLE_KEYWORDS: tuple[str, ...] = (
    "CEO",
    "CTO",
    "CFO",
    "Manager",
    "Director",
    "President",
    "Vice",
    "Senior",
    "Lead",
    "Head",
    "Chief",
    "Officer",
    "Agent",
)

_TITLE_CASE_WORD = re.compile(r"[A-Z][a-z]+")
_UPPERCASE_RUN = re.compile(r"[A-Z]{2,}")


@dataclass(frozen=True)
class LineRecord:
    """One non-empty, trimmed line of card text and the slot it filled."""

    index: int
    text: str
    kind: FieldKind | None = None

    @property
    def is_classified(self) -> bool:
        return self.kind is not None


@dataclass
class ClassifiedLines:
    """Slot assignments from a single classification pass."""

    name: LineRecord | None = None
    company: LineRecord | None = None
    job_title: LineRecord | None = None
    lines: list[LineRecord] = field(default_factory=list)


def _contains_keyword(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def is_likely_name(text: str) -> bool:
    """Two to four words, each starting with a capital then lowercase letters."""
    words = text.split()
    return NAME_MIN_WORDS <= len(words) <= NAME_MAX_WORDS and all(
        _TITLE_CASE_WORD.match(word) for word in words
    )


def is_likely_company(text: str) -> bool:
    """Company keyword, an ampersand, or an uppercase abbreviation."""
    return (
        _contains_keyword(text, COMPANY_KEYWORDS)
        or "&" in text
        or _UPPERCASE_RUN.search(text) is not None
    )


def is_likely_job_title(text: str) -> bool:
    return _contains_keyword(text, JOB_TITLE_KEYWORDS)


class LineClassifier:
    """Assigns card lines to the name, company, and job-title slots.

    Args:
        field_extractor: Extractor whose patterns exclude lines from
            classification. A new one is created when omitted.
    """

    def __init__(self, field_extractor: FieldExtractor | None = None) -> None:
        self.field_extractor = field_extractor or FieldExtractor()

    def is_candidate_line(self, line: str) -> bool:
        """Check length bounds and that no field pattern matches the line."""
        if not MIN_LINE_LENGTH < len(line) < MAX_LINE_LENGTH:
            return False
        return not self.field_extractor.matches_any(line)

    def classify(self, text: str) -> ClassifiedLines:
        """Classify every non-empty line of ``text`` in order.

        The result depends on line order: a line that looks like both a
        name and a job title goes to whichever open slot tests it first.

        Args:
            text: Raw OCR text.

        Returns:
            Filled slots plus a record for every non-empty line.
        """
        result = ClassifiedLines()

        for index, raw_line in enumerate(text.splitlines()):
            line = raw_line.strip()
            if not line:
                continue

            kind = self._assign(line, result) if self.is_candidate_line(line) else None
            record = LineRecord(index=index, text=line, kind=kind)
            result.lines.append(record)

            if kind == FieldKind.NAME:
                result.name = record
            elif kind == FieldKind.COMPANY:
                result.company = record
            elif kind == FieldKind.JOB_TITLE:
                result.job_title = record

        logger.debug(
            "Classified %d lines: name=%s company=%s job_title=%s",
            len(result.lines),
            result.name is not None,
            result.company is not None,
            result.job_title is not None,
        )
        return result

    @staticmethod
    def _assign(line: str, slots: ClassifiedLines) -> FieldKind | None:
        if slots.name is None and is_likely_name(line):
            return FieldKind.NAME
        if slots.company is None and is_likely_company(line):
            return FieldKind.COMPANY
        if slots.job_title is None and is_likely_job_title(line):
            return FieldKind.JOB_TITLE
        return None
