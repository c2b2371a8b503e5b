"""Search Service — paged researcher search and the accumulate-all-pages flow.

Invariants:
    - Blank query + blank filters never reach ORCID (empty page returned)
    - Cached pages are keyed by (query, filters, page, per_page): a new query
      never reads another query's pages
    - Cached pages expire after ttl_seconds; expired entries are dropped on read
      and swept on every write
    - The cache never holds more than max_entries pages (oldest written evicted first)
    - collect_all_orcid_ids stops at num-found, max_results, or the first empty page

Design Decisions:
    - Module-level dict cache: deliberate exception to no-global-state rule
      (ADR: single-process uvicorn, results are public data, losing them on restart is fine)
    - Basic profiles for hits fetched concurrently; a failed profile drops that hit only
"""

import asyncio
import logging
import time

from app.core.errors import OrcidAPIError
from app.core.orcid_mapping import (
    extract_search_orcid_ids, map_record_to_researcher, search_total,
)
from app.core.pagination import has_next_page, page_window, total_pages
from app.core.search_query import build_orcid_query, search_cache_key
from app.infrastructure.orcid_client import ResilientOrcidClient

logger = logging.getLogger(__name__)

_page_cache: dict[str, tuple[float, dict]] = {}
_clock = time.monotonic


def clear_search_cache() -> None:
    _page_cache.clear()


def _cache_get(key: str, ttl_seconds: float) -> dict | None:
    entry = _page_cache.get(key)
    if entry is None:
        return None
    stored_at, page = entry
    if _clock() - stored_at > ttl_seconds:
        del _page_cache[key]
        return None
    return page


def _cache_put(key: str, page: dict, ttl_seconds: float, max_entries: int) -> None:
    now = _clock()
    expired = [k for k, (stored_at, _) in _page_cache.items() if now - stored_at > ttl_seconds]
    for k in expired:
        del _page_cache[k]
    _page_cache.pop(key, None)
    # dicts keep insertion order, so the first keys are the oldest writes
    while _page_cache and len(_page_cache) >= max_entries:
        del _page_cache[next(iter(_page_cache))]
    if max_entries > 0:
        _page_cache[key] = (now, page)


def _empty_page(page: int, per_page: int) -> dict:
    return {
        "query": "",
        "results": [],
        "page": page,
        "per_page": per_page,
        "total_results": 0,
        "total_pages": 0,
        "has_next_page": False,
    }


async def _basic_profiles(
    client: ResilientOrcidClient,
    orcid_ids: list[str],
    authorization: str | None,
    concurrency: int,
) -> list[dict]:
    semaphore = asyncio.Semaphore(max(concurrency, 1))

    async def fetch_one(orcid: str) -> dict | None:
        async with semaphore:
            try:
                record = await client.get_record(orcid, authorization)
            except OrcidAPIError as e:
                logger.warning(
                    f"Dropping search hit: {e.message}", extra={"orcid_id": orcid},
                )
                return None
        researcher = map_record_to_researcher(record)
        researcher["orcid_id"] = researcher["orcid_id"] or orcid
        return researcher

    results = await asyncio.gather(*(fetch_one(oid) for oid in orcid_ids))
    return [r for r in results if r is not None]


async def search_researchers(
    client: ResilientOrcidClient,
    query: str | None,
    filters: dict[str, str | None] | None = None,
    page: int = 1,
    per_page: int = 10,
    *,
    authorization: str | None = None,
    ttl_seconds: float = 300,
    max_entries: int = 256,
    concurrency: int = 8,
) -> dict:
    """One page of researchers (basic profiles) matching free text + field filters."""
    q = build_orcid_query(query, filters)
    if not q:
        return _empty_page(page, per_page)

    key = f"{search_cache_key(query, filters)}|{page}|{per_page}"
    cached = _cache_get(key, ttl_seconds)
    if cached is not None:
        logger.debug("Search page served from cache")
        return cached

    start, _ = page_window(page, per_page)
    response = await client.search(q, start=start, rows=per_page, authorization=authorization)
    total = search_total(response)
    profiles = await _basic_profiles(
        client, extract_search_orcid_ids(response), authorization, concurrency,
    )
    result = {
        "query": q,
        "results": profiles,
        "page": page,
        "per_page": per_page,
        "total_results": total,
        "total_pages": total_pages(total, per_page),
        "has_next_page": has_next_page(page, per_page, total),
    }
    _cache_put(key, result, ttl_seconds, max_entries)
    logger.info(f"Search page {page}: {len(profiles)} of {total} results")
    return result


async def collect_all_orcid_ids(
    client: ResilientOrcidClient,
    query: str | None,
    filters: dict[str, str | None] | None = None,
    page_size: int = 100,
    max_results: int = 200,
    *,
    authorization: str | None = None,
) -> dict:
    """Walk ORCID search pages until every hit (up to max_results) is collected."""
    q = build_orcid_query(query, filters)
    if not q:
        return {"query": "", "orcid_ids": [], "total_results": 0, "truncated": False}

    orcid_ids: list[str] = []
    seen: set[str] = set()
    total = 0
    start = 0
    while len(orcid_ids) < max_results:
        rows = min(page_size, max_results - len(orcid_ids))
        response = await client.search(q, start=start, rows=rows, authorization=authorization)
        total = search_total(response)
        batch = extract_search_orcid_ids(response)
        if not batch:
            break
        for orcid in batch:
            if orcid not in seen:
                seen.add(orcid)
                orcid_ids.append(orcid)
        start += len(batch)
        if start >= total:
            break

    orcid_ids = orcid_ids[:max_results]
    logger.info(f"Collected {len(orcid_ids)} of {total} ORCID ids")
    return {
        "query": q,
        "orcid_ids": orcid_ids,
        "total_results": total,
        "truncated": total > len(orcid_ids),
    }
