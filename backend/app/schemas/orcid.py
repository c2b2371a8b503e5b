"""ORCID Proxy & Search Schemas — token exchange input and search result pages.

Invariants:
    - TokenRequest keys match the ORCID OAuth form field names (snake_case)
    - Blank client credentials fall back to configured ones in the route
"""

from pydantic import Field

from app.core.domain_types import GrantType
from app.schemas.common import CamelModel
from app.schemas.profile import ResearcherView


class TokenRequest(CamelModel):
    client_id: str | None = None
    client_secret: str | None = None
    grant_type: GrantType = GrantType.CLIENT_CREDENTIALS
    scope: str = "/read-public"
    code: str | None = None
    redirect_uri: str | None = None


class AuthorizeUrlResponse(CamelModel):
    url: str
    state: str


class ResearcherSearchPage(CamelModel):
    query: str
    results: list[ResearcherView]
    page: int
    per_page: int
    total_results: int
    total_pages: int
    has_next_page: bool


class OrcidIdCollection(CamelModel):
    query: str
    orcid_ids: list[str] = Field(default_factory=list)
    total_results: int = 0
    truncated: bool = False
