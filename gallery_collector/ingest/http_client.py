"""Centralized HTTP client with per-site policies and status-aware error handling."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Optional

import httpx

from gallery_collector.config import Settings

logger = logging.getLogger(__name__)

# Retryable exceptions (transport errors)
RETRYABLE_EXC = (
    httpx.ReadTimeout,
    httpx.ConnectTimeout,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
    httpx.PoolTimeout,
    httpx.ReadError,
)


@dataclass(frozen=True)
class SitePolicy:
    """Per-site HTTP request policy configuration."""

    name: str
    max_attempts: int = 2
    timeout: httpx.Timeout = None  # Will be set to default if None
    backoff_seconds: float = 1.0
    jitter_seconds: float = 1.0
    max_retry_after: float = 30.0
    treat_404_as_permanent: bool = True

    def __post_init__(self):
        """Set default timeout if not provided."""
        if self.timeout is None:
            object.__setattr__(
                self,
                'timeout',
                httpx.Timeout(connect=10.0, read=20.0, write=10.0, pool=10.0)
            )

    def backoff(self, attempt: int) -> float:
        """Seconds to wait before retrying after ``attempt`` failed."""
        return self.backoff_seconds * (2 ** (attempt - 1)) + random.uniform(0, self.jitter_seconds)


class FetchError(RuntimeError):
    """Base class for fetch failures. ``status_code`` is 0 when no response arrived."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class BlockedError(FetchError):
    """Raised when access is blocked (401, 403)."""
    pass


class PermanentURLError(FetchError):
    """Raised when URL is permanently invalid (404)."""
    pass


class TransientFetchError(FetchError):
    """Raised when fetch fails after retries (5xx, timeouts, etc.)."""
    pass


class RateLimitedError(FetchError):
    """Raised when rate limited (429)."""

    def __init__(self, retry_after: Optional[float] = None):
        super().__init__("Rate limited", status_code=429)
        self.retry_after = retry_after


def default_headers(accept_language: str = "en-GB,en;q=0.9") -> dict[str, str]:
    """Get default browser-like headers."""
    return {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": accept_language,
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Upgrade-Insecure-Requests": "1",
    }


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


async def fetch_with_policy(
    client: httpx.AsyncClient,
    url: str,
    policy: SitePolicy,
    headers: Optional[dict[str, str]] = None,
) -> httpx.Response:
    """
    Fetch URL with per-site policy and status-aware error handling.

    Args:
        client: httpx AsyncClient instance
        url: URL to fetch
        policy: SitePolicy configuration
        headers: Optional additional headers (merged with defaults)

    Returns:
        httpx.Response on success

    Raises:
        BlockedError: If access is blocked (401, 403)
        PermanentURLError: If URL is permanently invalid (404)
        RateLimitedError: If still rate limited on the last attempt
        TransientFetchError: If fetch fails after retries
    """
    hdrs = default_headers()
    if headers:
        hdrs.update(headers)

    last_exc: Exception | None = None

    for attempt in range(1, policy.max_attempts + 1):
        final = attempt >= policy.max_attempts
        try:
            resp = await client.get(
                url,
                headers=hdrs,
                timeout=policy.timeout,
                follow_redirects=True,
            )
            sc = resp.status_code

            if 200 <= sc < 300:
                return resp

            if sc == 404 and policy.treat_404_as_permanent:
                raise PermanentURLError(f"{policy.name}: 404 for {url}", status_code=sc)

            if sc in (401, 403):
                raise BlockedError(f"{policy.name}: {sc} for {url}", status_code=sc)

            if sc == 429:
                raise RateLimitedError(retry_after=_parse_retry_after(resp.headers.get("Retry-After")))

            # 5xx and anything unexpected: transient
            raise TransientFetchError(f"{policy.name}: status {sc} for {url}", status_code=sc)

        except (BlockedError, PermanentURLError):
            # Don't retry these
            raise

        except RateLimitedError as e:
            if final:
                raise
            if e.retry_after is not None:
                sleep_s = min(e.retry_after, policy.max_retry_after)
            else:
                sleep_s = policy.backoff(attempt)
            logger.warning(
                f"{policy.name}: Rate limited (429), retrying in {sleep_s:.1f}s "
                f"(attempt {attempt}/{policy.max_attempts})"
            )
            last_exc = e
            await asyncio.sleep(sleep_s)

        except TransientFetchError as e:
            if final:
                raise TransientFetchError(
                    f"{e} after {policy.max_attempts} attempts", status_code=e.status_code
                ) from e
            sleep_s = policy.backoff(attempt)
            logger.warning(
                f"{policy.name}: {e}, retrying in {sleep_s:.1f}s "
                f"(attempt {attempt}/{policy.max_attempts})"
            )
            last_exc = e
            await asyncio.sleep(sleep_s)

        except RETRYABLE_EXC as e:
            if final:
                raise TransientFetchError(
                    f"{policy.name}: transport error ({type(e).__name__}) after "
                    f"{policy.max_attempts} attempts: {url}"
                ) from e
            sleep_s = policy.backoff(attempt)
            logger.warning(
                f"{policy.name}: Transport error ({type(e).__name__}), "
                f"retrying in {sleep_s:.1f}s (attempt {attempt}/{policy.max_attempts})"
            )
            last_exc = e
            await asyncio.sleep(sleep_s)

    # Only reachable with max_attempts < 1
    raise TransientFetchError(
        f"{policy.name}: failed after {policy.max_attempts} attempts: {url}"
    ) from last_exc


def policy_from_settings(name: str, config: Settings) -> SitePolicy:
    """Build a site policy from the run settings."""
    timeout = config.request_timeout_seconds
    return SitePolicy(
        name=name,
        max_attempts=max(1, config.max_attempts),
        timeout=httpx.Timeout(connect=min(10.0, timeout), read=timeout, write=10.0, pool=10.0),
        backoff_seconds=config.retry_backoff_seconds,
        jitter_seconds=config.retry_backoff_seconds,
        max_retry_after=config.max_retry_after_seconds,
    )


def create_client(config: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create the shared AsyncClient for a run."""
    return httpx.AsyncClient(
        headers=default_headers(config.accept_language),
        follow_redirects=True,
        timeout=config.request_timeout_seconds,
        transport=transport,
    )
