"""User Store — lookups shared by the profile, publication and project services.

Invariants:
    - Lookups always repopulate the identity map (populate_existing): collections
      reflect writes committed earlier in the same session
    - ensure_user never commits; the caller owns the transaction

Design Decisions:
    - Stub users are named after their ORCID id until the profile is saved
      (ADR: works can be recorded before the researcher registers)
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ResourceNotFoundError, ErrorContext
from app.models.user import User

logger = logging.getLogger(__name__)


async def get_user(db: AsyncSession, orcid: str) -> User | None:
    result = await db.execute(
        select(User)
        .where(User.orcid_id == orcid)
        .execution_options(populate_existing=True),
    )
    return result.scalar_one_or_none()


async def get_user_or_404(db: AsyncSession, orcid: str) -> User:
    user = await get_user(db, orcid)
    if user is None:
        raise ResourceNotFoundError(
            "Profile", orcid, ErrorContext(orcid_id=orcid),
        )
    return user


async def ensure_user(db: AsyncSession, orcid: str) -> User:
    """Return the user for orcid, creating a stub (flushed, not committed) if absent."""
    user = await get_user(db, orcid)
    if user is not None:
        return user
    user = User(
        orcid_id=orcid, name=orcid,
        research_areas=[], external_links=[], works=[], project_links=[],
    )
    db.add(user)
    await db.flush()
    logger.info("Created stub user", extra={"orcid_id": orcid})
    return user


async def registered_user_ids(
    db: AsyncSession, orcid_ids: list[str | None],
) -> dict[str, int]:
    """Map ORCID id → local user id for the ids that belong to registered users."""
    wanted = {oid for oid in orcid_ids if oid}
    if not wanted:
        return {}
    result = await db.execute(
        select(User.orcid_id, User.id).where(User.orcid_id.in_(wanted)),
    )
    return {orcid_id: user_id for orcid_id, user_id in result.all()}
