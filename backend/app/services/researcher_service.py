"""Researcher Service — live researcher aggregate assembled from the ORCID API.

Invariants:
    - The record fetch must succeed; work/funding detail failures are logged and skipped
    - At most `concurrency` detail calls in flight; at most `limit` works and `limit`
      fundings fetched per researcher
    - Publications/projects keep the order of the record's activity summaries

Design Decisions:
    - Put-codes come from the record's activities-summary: one call instead of
      separate /works and /fundings listings
    - asyncio.Semaphore + gather over a worker pool: detail calls are short-lived
      and independent (ADR: ORCID public API tolerates ~8 concurrent requests)
"""

import asyncio
import logging
from typing import Awaitable, Callable

from app.core.errors import OrcidAPIError
from app.core.orcid_mapping import (
    extract_put_codes, map_record_to_researcher,
    map_work_to_publication, map_funding_to_project,
)
from app.infrastructure.orcid_client import ResilientOrcidClient

logger = logging.getLogger(__name__)


async def _fetch_details(
    fetch: Callable[[str], Awaitable[dict]],
    put_codes: list[str],
    semaphore: asyncio.Semaphore,
    orcid: str,
) -> list[dict]:
    async def fetch_one(put_code: str) -> dict | None:
        async with semaphore:
            try:
                return await fetch(put_code)
            except OrcidAPIError as e:
                logger.warning(
                    f"Skipping ORCID item: {e.message}",
                    extra={"orcid_id": orcid, "put_code": put_code},
                )
                return None

    results = await asyncio.gather(*(fetch_one(code) for code in put_codes))
    return [r for r in results if r is not None]


async def load_researcher(
    client: ResilientOrcidClient,
    orcid: str,
    authorization: str | None = None,
    *,
    concurrency: int = 8,
    limit: int = 100,
) -> dict:
    """Record + work details + funding details → Researcher view with publications/projects."""
    record = await client.get_record(orcid, authorization)
    activities = record.get("activities-summary") or {}
    work_codes = extract_put_codes(activities.get("works") or {}, "work-summary")
    funding_codes = extract_put_codes(
        activities.get("fundings") or {}, "funding-summary",
    )

    semaphore = asyncio.Semaphore(max(concurrency, 1))
    works, fundings = await asyncio.gather(
        _fetch_details(
            lambda code: client.get_work(orcid, code, authorization),
            work_codes[:limit], semaphore, orcid,
        ),
        _fetch_details(
            lambda code: client.get_funding(orcid, code, authorization),
            funding_codes[:limit], semaphore, orcid,
        ),
    )

    researcher = map_record_to_researcher(record)
    researcher["orcid_id"] = researcher["orcid_id"] or orcid
    researcher["publications"] = [map_work_to_publication(w) for w in works]
    researcher["projects"] = [map_funding_to_project(f) for f in fundings]
    logger.info(
        f"Loaded researcher with {len(works)}/{len(work_codes)} works "
        f"and {len(fundings)}/{len(funding_codes)} fundings",
        extra={"orcid_id": orcid},
    )
    return researcher
