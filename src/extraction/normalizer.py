"""Canonical forms for values pulled off a business card.

The email fix-up for OCR character confusion is deliberately blunt: it
rewrites every ``0``/``O`` to ``o`` and ``1``/``l`` to ``l``, so real
digits in an address are lost.
"""

import re

_WHITESPACE_RUN = re.compile(r"\s+")
_NON_NAME_CHARS = re.compile(r"[^A-Za-z\s.\-]")
_NON_DIGITS = re.compile(r"[^0-9]")
_TRAILING_PUNCTUATION = re.compile(r"[,.]$")
_LEADING_WWW = re.compile(r"^(?:www\.)+")


def _collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RUN.sub(" ", text)


def normalize_email(email: str) -> str:
    cleaned = email.lower()
    cleaned = re.sub(r"[0O]", "o", cleaned)
    cleaned = re.sub(r"[1l]", "l", cleaned)
    return cleaned.strip()


def normalize_phone(phone: str) -> str:
    """Format a phone number, assuming North America for 10/11 digits.

    Args:
        phone: Raw phone text, possibly with separators.

    Returns:
        ``+1-DDD-DDD-DDDD`` for 10 digits or 11 digits with a leading 1,
        otherwise ``+`` followed by the digits as found.
    """
    digits = _NON_DIGITS.sub("", phone)

    if len(digits) == 10:
        return f"+1-{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+1-{digits[1:4]}-{digits[4:7]}-{digits[7:]}"
    return f"+{digits}"


def normalize_website(website: str) -> str:
    """Lowercase and drop the leading ``www.`` prefix, repeated or not."""
    return _LEADING_WWW.sub("", website.lower())


def normalize_name(name: str) -> str:
    """Keep letters, spaces, periods, and hyphens; tidy whitespace."""
    cleaned = _NON_NAME_CHARS.sub("", name).strip()
    return _collapse_whitespace(cleaned)


def normalize_company(company: str) -> str:
    """Tidy whitespace and drop one trailing comma or period."""
    cleaned = _collapse_whitespace(company.strip())
    return _TRAILING_PUNCTUATION.sub("", cleaned).rstrip()


def normalize_job_title(title: str) -> str:
    return _collapse_whitespace(title.strip())
