"""ORCID Identifiers — format validation, normalization, and ISO 7064 checksum.

Invariants:
    - ORCID_PATTERN is the single source of truth for the accepted format
    - normalize_orcid never raises; require_orcid raises InvalidOrcidError
    - Checksum is informative: well-formed ids with a wrong check digit still pass format checks

Design Decisions:
    - Format-only acceptance: sandbox and fixture ids (0000-0000-0000-0000) must be usable
      (ADR: the public API itself rejects unknown ids, no need to duplicate it here)
"""

import re

from app.core.errors import InvalidOrcidError, ErrorContext


ORCID_PATTERN = re.compile(r"^\d{4}-\d{4}-\d{4}-\d{3}[\dX]$")
_ORCID_URL_PATTERN = re.compile(
    r"orcid\.org/(\d{4}-\d{4}-\d{4}-\d{3}[\dXx])", re.IGNORECASE,
)


def is_valid_orcid(value: str | None) -> bool:
    """True if value is a well-formed ORCID id (no normalization)."""
    if not value:
        return False
    return ORCID_PATTERN.match(value) is not None


def normalize_orcid(value: str | None) -> str | None:
    """Accept bare ids or orcid.org URLs. Returns canonical id or None."""
    if not value:
        return None
    candidate = value.strip()
    url_match = _ORCID_URL_PATTERN.search(candidate)
    if url_match:
        candidate = url_match.group(1)
    candidate = candidate.upper()
    if ORCID_PATTERN.match(candidate):
        return candidate
    return None


def require_orcid(value: str | None) -> str:
    """Normalize or raise InvalidOrcidError (400)."""
    normalized = normalize_orcid(value)
    if normalized is None:
        raise InvalidOrcidError(
            value or "", ErrorContext(orcid_id=value),
        )
    return normalized


def orcid_checksum(base_digits: str) -> str:
    """ISO 7064 11,2 check character for the first 15 digits."""
    total = 0
    for digit in base_digits:
        total = (total + int(digit)) * 2
    result = (12 - total % 11) % 11
    return "X" if result == 10 else str(result)


def has_valid_checksum(value: str | None) -> bool:
    normalized = normalize_orcid(value)
    if normalized is None:
        return False
    digits = normalized.replace("-", "")
    return orcid_checksum(digits[:-1]) == digits[-1]
