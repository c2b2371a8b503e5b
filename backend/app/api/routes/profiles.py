"""Profiles — local researcher profile read/upsert and import from ORCID.

Invariants:
    - GET returns the ORCID-shaped record of the local user (404 if never saved)
    - PUT creates or replaces the profile in one transaction
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_authorization
from app.config import get_settings
from app.infrastructure.database import get_db
from app.infrastructure.orcid_client import ResilientOrcidClient, get_orcid_client
from app.schemas.common import MutationResult
from app.schemas.profile import ProfileUpsert
from app.services import profile_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/profiles", tags=["profiles"])


@router.get("/{orcid}")
async def get_profile(orcid: str, db: AsyncSession = Depends(get_db)):
    return await profile_service.get_profile(db, orcid)


@router.put("/{orcid}", response_model=MutationResult)
async def upsert_profile(
    orcid: str, body: ProfileUpsert, db: AsyncSession = Depends(get_db),
):
    return await profile_service.upsert_profile(db, orcid, body)


@router.post("/{orcid}/import")
async def import_profile(
    orcid: str,
    db: AsyncSession = Depends(get_db),
    authorization: str | None = Depends(get_authorization),
    client: ResilientOrcidClient = Depends(get_orcid_client),
):
    """Copy the live ORCID record, works and fundings into local storage."""
    settings = get_settings()
    return await profile_service.import_from_orcid(
        db, client, orcid, authorization,
        concurrency=settings.orcid_detail_concurrency,
        limit=settings.orcid_detail_limit,
    )
