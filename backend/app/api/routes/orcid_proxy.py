"""ORCID Proxy — thin pass-through to the ORCID public API and OAuth token endpoint.

Invariants:
    - ORCID ids validated (and normalized) before any upstream call
    - Upstream JSON returned unchanged on success
    - Upstream failures surface as ORCID_API_ERROR with the upstream status and body

Design Decisions:
    - Client credentials fall back to configured values so the SPA never holds the secret
      (ADR: the browser only ever sees the authorize URL and the resulting token)
"""

import logging
import secrets

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_authorization
from app.config import get_settings
from app.core.domain_types import GrantType
from app.core.errors import ValidationFailedError
from app.core.orcid_ids import require_orcid
from app.core.orcid_mapping import build_orcid_auth_url
from app.infrastructure.orcid_client import ResilientOrcidClient, get_orcid_client
from app.schemas.orcid import TokenRequest, AuthorizeUrlResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orcid", tags=["orcid"])


@router.post("/token")
async def exchange_token(
    body: TokenRequest,
    client: ResilientOrcidClient = Depends(get_orcid_client),
):
    """Exchange client credentials or an authorization code for an access token."""
    settings = get_settings()
    redirect_uri = body.redirect_uri
    if body.grant_type == GrantType.AUTHORIZATION_CODE and not redirect_uri:
        redirect_uri = settings.orcid_redirect_uri
    token = await client.exchange_token(
        client_id=body.client_id or settings.orcid_client_id,
        client_secret=body.client_secret or settings.orcid_client_secret,
        grant_type=body.grant_type.value,
        scope=body.scope,
        code=body.code,
        redirect_uri=redirect_uri,
    )
    logger.info(f"Issued ORCID token ({body.grant_type.value})")
    return token


@router.get("/authorize-url", response_model=AuthorizeUrlResponse)
async def authorize_url(
    state: str | None = Query(None, max_length=200),
    redirect_uri: str | None = Query(None, alias="redirectUri"),
):
    """OAuth authorize URL for the login button."""
    settings = get_settings()
    if not settings.orcid_client_id:
        raise ValidationFailedError(
            "ORCID client id is not configured", "client_id",
        )
    state = state or secrets.token_urlsafe(16)
    url = build_orcid_auth_url(
        settings.orcid_oauth_url,
        settings.orcid_client_id,
        redirect_uri or settings.orcid_redirect_uri,
        state,
    )
    return AuthorizeUrlResponse(url=url, state=state)


@router.get("/profile/{orcid}")
async def get_profile(
    orcid: str,
    authorization: str | None = Depends(get_authorization),
    client: ResilientOrcidClient = Depends(get_orcid_client),
):
    return await client.get_record(require_orcid(orcid), authorization)


@router.get("/profile/{orcid}/work/{put_code}")
async def get_work(
    orcid: str,
    put_code: int,
    authorization: str | None = Depends(get_authorization),
    client: ResilientOrcidClient = Depends(get_orcid_client),
):
    return await client.get_work(require_orcid(orcid), str(put_code), authorization)


@router.get("/profile/{orcid}/funding/{put_code}")
async def get_funding(
    orcid: str,
    put_code: int,
    authorization: str | None = Depends(get_authorization),
    client: ResilientOrcidClient = Depends(get_orcid_client),
):
    return await client.get_funding(
        require_orcid(orcid), str(put_code), authorization,
    )


@router.get("/profile/{orcid}/{section}")
async def get_section(
    orcid: str,
    section: str,
    authorization: str | None = Depends(get_authorization),
    client: ResilientOrcidClient = Depends(get_orcid_client),
):
    """works, employments, educations, fundings, peer-reviews or person."""
    return await client.get_section(require_orcid(orcid), section, authorization)


@router.get("/search")
async def search(
    q: str | None = Query(None, max_length=1000),
    start: int = Query(0, ge=0),
    rows: int = Query(10, ge=1, le=1000),
    authorization: str | None = Depends(get_authorization),
    client: ResilientOrcidClient = Depends(get_orcid_client),
):
    """Raw ORCID search (Solr syntax in q)."""
    return await client.search(q or "", start=start, rows=rows, authorization=authorization)
