"""Field kinds and the contact record produced by the card parser."""

from dataclasses import asdict, dataclass
from enum import StrEnum


class FieldKind(StrEnum):
    """Contact fields recognized on a business card."""

    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    COMPANY = "company"
    JOB_TITLE = "job_title"
    WEBSITE = "website"


@dataclass(frozen=True)
class ContactRecord:
    """Structured contact parsed from business card text.

    Every field is optional: a partial record is a valid result, and an
    all-empty record means nothing was recognized.
    """

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    job_title: str | None = None
    website: str | None = None

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in asdict(self).values())

    def to_dict(self, exclude_none: bool = False) -> dict[str, str | None]:
        """Return the record as a plain dictionary.

        Args:
            exclude_none: Drop fields that were not recognized.
        """
        data = asdict(self)
        if exclude_none:
            return {key: value for key, value in data.items() if value is not None}
        return data
