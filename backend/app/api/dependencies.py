"""Shared Route Dependencies — caller credentials forwarded to ORCID.

Invariants:
    - The Authorization header is passed through untouched, never logged
    - When orcid_require_authorization is set, a missing header is a 401 before any IO
"""

from fastapi import Header

from app.config import get_settings
from app.core.errors import AuthorizationRequiredError


async def get_authorization(
    authorization: str | None = Header(None),
) -> str | None:
    """FastAPI dependency: the caller's bearer token for ORCID, if any."""
    if not authorization and get_settings().orcid_require_authorization:
        raise AuthorizationRequiredError()
    return authorization or None
