"""Researchers — live ORCID aggregate and paged researcher search.

Invariants:
    - /search and /search/all declared before /{orcid} (static segments win)
    - Every query parameter other than paging ones is an ORCID search field filter;
      unknown fields are a 400 INVALID_SEARCH_FILTER

Design Decisions:
    - Filters read from raw query params: ORCID field names contain hyphens
      (given-names, affiliation-org-name) that are not valid Python identifiers
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from app.api.dependencies import get_authorization
from app.config import get_settings
from app.core.orcid_ids import require_orcid
from app.infrastructure.orcid_client import ResilientOrcidClient, get_orcid_client
from app.schemas.orcid import ResearcherSearchPage, OrcidIdCollection
from app.schemas.profile import ResearcherView
from app.services.researcher_service import load_researcher
from app.services.search_service import search_researchers, collect_all_orcid_ids

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/researchers", tags=["researchers"])

_PAGING_PARAMS = frozenset({
    "q", "page", "perPage", "per_page", "pageSize", "page_size",
    "maxResults", "max_results",
})


def _filters(request: Request) -> dict[str, str]:
    return {
        key: value for key, value in request.query_params.items()
        if key not in _PAGING_PARAMS
    }


@router.get("/search", response_model=ResearcherSearchPage)
async def search(
    request: Request,
    q: str | None = Query(None, max_length=1000),
    page: int = Query(1, ge=1),
    per_page: int | None = Query(None, alias="perPage", ge=1, le=100),
    authorization: str | None = Depends(get_authorization),
    client: ResilientOrcidClient = Depends(get_orcid_client),
):
    """One page of matching researchers with basic profiles."""
    settings = get_settings()
    return await search_researchers(
        client, q, _filters(request), page,
        per_page or settings.search_page_size,
        authorization=authorization,
        ttl_seconds=settings.search_cache_ttl_seconds,
        max_entries=settings.search_cache_max_entries,
        concurrency=settings.orcid_detail_concurrency,
    )


@router.get("/search/all", response_model=OrcidIdCollection)
async def search_all(
    request: Request,
    q: str | None = Query(None, max_length=1000),
    page_size: int = Query(100, alias="pageSize", ge=1, le=1000),
    max_results: int | None = Query(None, alias="maxResults", ge=1),
    authorization: str | None = Depends(get_authorization),
    client: ResilientOrcidClient = Depends(get_orcid_client),
):
    """Every matching ORCID id across result pages (capped by search_max_results)."""
    cap = get_settings().search_max_results
    return await collect_all_orcid_ids(
        client, q, _filters(request), page_size,
        min(max_results or cap, cap),
        authorization=authorization,
    )


@router.get("/{orcid}", response_model=ResearcherView)
async def get_researcher(
    orcid: str,
    authorization: str | None = Depends(get_authorization),
    client: ResilientOrcidClient = Depends(get_orcid_client),
):
    """Live researcher: record plus every work and funding in detail."""
    settings = get_settings()
    return await load_researcher(
        client, require_orcid(orcid), authorization,
        concurrency=settings.orcid_detail_concurrency,
        limit=settings.orcid_detail_limit,
    )
