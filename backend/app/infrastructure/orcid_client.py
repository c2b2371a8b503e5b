"""Resilient ORCID Client — wraps httpx.AsyncClient with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): retried, respects Retry-After header capped at max_delay_ms
    - Transient errors (5xx, connection): max_retries with exponential backoff
    - Client errors (4xx except 429): immediate failure, no retry
    - Every failure mapped to OrcidAPIError carrying upstream status + body (core/errors.py)
    - Caller's Authorization header forwarded verbatim; never logged

Design Decisions:
    - Wrapper over raw client: routes and services never see httpx exceptions
      (ADR: single responsibility, same shape as the DB session manager)
    - ±25% jitter on backoff: ORCID rate limits are per client IP
    - Transport injectable: tests drive the client with httpx.MockTransport
"""

import asyncio
import logging
import random
from typing import Any

import httpx

from app.core.domain_types import OrcidSection, GrantType
from app.core.errors import (
    OrcidAPIError, InvalidSectionError, ValidationFailedError, ErrorContext,
)

logger = logging.getLogger(__name__)

VALID_SECTIONS: tuple[str, ...] = tuple(s.value for s in OrcidSection)
DEFAULT_TOKEN_SCOPE = "/read-public"


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"raw": response.text[:500]}


class ResilientOrcidClient:
    """Wraps the ORCID public/OAuth API with retry logic, timeouts, and error mapping."""

    def __init__(
        self,
        api_base_url: str = "https://pub.orcid.org/v3.0",
        oauth_url: str = "https://orcid.org/oauth",
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
        base_delay_ms: int = 500,
        max_delay_ms: int = 10_000,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.oauth_url = oauth_url.rstrip("/")
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.client = httpx.AsyncClient(
            timeout=timeout_seconds,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self.client.aclose()

    # ─── Record reads ────────────────────────────────────────────

    async def get_record(
        self, orcid: str, authorization: str | None = None,
    ) -> dict:
        return await self._request(
            "GET", f"{self.api_base_url}/{orcid}/record",
            "Failed to fetch ORCID profile",
            authorization=authorization,
            context=ErrorContext(orcid_id=orcid),
        )

    async def get_section(
        self, orcid: str, section: str, authorization: str | None = None,
    ) -> dict:
        if section not in VALID_SECTIONS:
            raise InvalidSectionError(
                section, VALID_SECTIONS, ErrorContext(orcid_id=orcid),
            )
        return await self._request(
            "GET", f"{self.api_base_url}/{orcid}/{section}",
            f"Failed to fetch ORCID {section}",
            authorization=authorization,
            context=ErrorContext(orcid_id=orcid),
        )

    async def get_works(
        self, orcid: str, authorization: str | None = None,
    ) -> dict:
        return await self.get_section(orcid, OrcidSection.WORKS.value, authorization)

    async def get_work(
        self, orcid: str, put_code: str, authorization: str | None = None,
    ) -> dict:
        return await self._request(
            "GET", f"{self.api_base_url}/{orcid}/work/{put_code}",
            "Failed to fetch work details",
            authorization=authorization,
            context=ErrorContext(orcid_id=orcid, put_code=str(put_code)),
        )

    async def get_fundings(
        self, orcid: str, authorization: str | None = None,
    ) -> dict:
        return await self.get_section(orcid, OrcidSection.FUNDINGS.value, authorization)

    async def get_funding(
        self, orcid: str, put_code: str, authorization: str | None = None,
    ) -> dict:
        return await self._request(
            "GET", f"{self.api_base_url}/{orcid}/funding/{put_code}",
            "Failed to fetch funding details",
            authorization=authorization,
            context=ErrorContext(orcid_id=orcid, put_code=str(put_code)),
        )

    async def search(
        self, q: str, start: int = 0, rows: int = 10,
        authorization: str | None = None,
    ) -> dict:
        if not q or not q.strip():
            raise ValidationFailedError('Query parameter "q" is required', "q")
        return await self._request(
            "GET", f"{self.api_base_url}/search",
            "Failed to search ORCID profiles",
            authorization=authorization,
            params={"q": q, "start": start, "rows": rows},
        )

    # ─── OAuth ───────────────────────────────────────────────────

    async def exchange_token(
        self,
        *,
        client_id: str,
        client_secret: str,
        grant_type: str = GrantType.CLIENT_CREDENTIALS.value,
        scope: str = DEFAULT_TOKEN_SCOPE,
        code: str | None = None,
        redirect_uri: str | None = None,
    ) -> dict:
        """POST /oauth/token. authorization_code needs code + redirect_uri, others send scope."""
        if not client_id or not client_secret:
            raise ValidationFailedError(
                "client_id and client_secret are required", "client_id",
            )
        form = {
            "client_id": client_id,
            "client_secret": client_secret,
            "grant_type": grant_type,
        }
        if grant_type == GrantType.AUTHORIZATION_CODE.value:
            if not code or not redirect_uri:
                raise ValidationFailedError(
                    "code and redirect_uri are required for authorization_code grant",
                    "code",
                )
            form["code"] = code
            form["redirect_uri"] = redirect_uri
        else:
            form["scope"] = scope
        return await self._request(
            "POST", f"{self.oauth_url}/token",
            "Failed to get access token",
            data=form,
        )

    # ─── Transport ───────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        url: str,
        failure_message: str,
        *,
        authorization: str | None = None,
        params: dict | None = None,
        data: dict | None = None,
        context: ErrorContext | None = None,
    ) -> Any:
        """Send one logical request with retries. Returns the decoded JSON body."""
        headers = {"Authorization": authorization} if authorization else None
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.request(
                    method, url, params=params, data=data, headers=headers,
                )
            except httpx.TimeoutException:
                raise OrcidAPIError(
                    "ORCID API timeout", "timeout", context=context,
                )
            except httpx.TransportError as e:
                await self._handle_transient_error(e, attempt, context)
                continue

            if response.status_code == 429:
                await self._handle_rate_limit(
                    response, attempt, failure_message, context,
                )
                continue
            if response.status_code >= 500:
                await self._handle_server_error(
                    response, attempt, failure_message, context,
                )
                continue
            if not response.is_success:
                logger.warning(
                    f"{failure_message}: HTTP {response.status_code}",
                    extra={
                        "upstream_status": response.status_code,
                        "orcid_id": context.orcid_id if context else None,
                    },
                )
                raise OrcidAPIError(
                    failure_message, "client_error",
                    upstream_status=response.status_code,
                    details=_response_body(response),
                    context=context,
                )

            logger.debug(
                f"ORCID {method} ok",
                extra={"attempt": attempt + 1, "path": response.url.path},
            )
            return _response_body(response)

        # Unreachable: every handler either sleeps (then loops) or raises on the last attempt
        raise OrcidAPIError(failure_message, "unknown", context=context)

    async def _handle_rate_limit(
        self, response: httpx.Response, attempt: int, failure_message: str,
        context: ErrorContext | None,
    ) -> None:
        """Handle 429 with retry or raise."""
        retry_after_ms = self._extract_retry_after(response)
        if attempt >= self.max_retries:
            raise OrcidAPIError(
                f"{failure_message}: rate limit exceeded after retries",
                "rate_limit",
                upstream_status=429,
                details=_response_body(response),
                retry_after_ms=retry_after_ms,
                context=context,
            )
        delay = min(retry_after_ms, self.max_delay_ms) if retry_after_ms else self._backoff(attempt)
        logger.warning(
            f"ORCID rate limit hit, retry after {delay}ms",
            extra={"attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_server_error(
        self, response: httpx.Response, attempt: int, failure_message: str,
        context: ErrorContext | None,
    ) -> None:
        if attempt >= self.max_retries:
            raise OrcidAPIError(
                failure_message, "server_error",
                upstream_status=response.status_code,
                details=_response_body(response),
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"ORCID HTTP {response.status_code}, retry after {delay}ms",
            extra={"attempt": attempt + 1, "upstream_status": response.status_code},
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle connection errors with retry or raise."""
        if attempt >= self.max_retries:
            raise OrcidAPIError(
                f"ORCID API unreachable after {self.max_retries} retries: {e}",
                "connection_error",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(f"ORCID connection error, retry after {delay}ms: {e}")
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, response: httpx.Response) -> int | None:
        """Retry-After header in milliseconds (seconds form only)."""
        val = response.headers.get("retry-after")
        if val and val.isdigit():
            return int(val) * 1000
        return None


# Singleton (initialized on startup)
orcid_client: ResilientOrcidClient | None = None


def init_orcid_client(**kwargs) -> ResilientOrcidClient:
    global orcid_client
    orcid_client = ResilientOrcidClient(**kwargs)
    return orcid_client


async def close_orcid_client() -> None:
    global orcid_client
    if orcid_client:
        await orcid_client.close()
        orcid_client = None


def get_orcid_client() -> ResilientOrcidClient:
    """FastAPI dependency for the shared ORCID client."""
    if not orcid_client:
        raise RuntimeError("ORCID client not initialized")
    return orcid_client
