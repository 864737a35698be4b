"""Purges every AMP cache variant of a page."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Protocol

import httpx

from amp_cache_tools.errors import PurgeError
from amp_cache_tools.models.cache_variant import CacheVariant
from amp_cache_tools.models.purge import PurgeReport, PurgeRequest, TargetUrl, VariantResult
from amp_cache_tools.models.settings import env
from amp_cache_tools.utils.amp_cache import build_probe_url, build_purge_request
from amp_cache_tools.utils.signing import FileKeyProvider, KeyProvider
from amp_cache_tools.utils.uris import parse_target

logger = logging.getLogger(__name__)

__all__ = ["HttpGetter", "probe_cache", "make_purge_request", "purge_url_async", "purge_url"]


class HttpGetter(Protocol):
    """Anything that can GET a url concurrently, e.g. httpx.AsyncClient."""

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        ...


async def _get(client: HttpGetter, url: str, timeout: float | None) -> httpx.Response:
    if timeout is None:
        return await client.get(url)
    return await client.get(url, timeout=timeout)


async def probe_cache(url: str, client: HttpGetter, timeout: float | None = None) -> bool:
    """True only if the cache answers 200 for url."""
    try:
        resp = await _get(client, url, timeout)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("Cache probe %s failed: %s", url, e)
        return False

    if resp.status_code != httpx.codes.OK:
        logger.debug("Not cached (%d): %s", resp.status_code, url)
        return False
    return True


async def make_purge_request(
    request: PurgeRequest, client: HttpGetter, timeout: float | None = None
) -> VariantResult:
    """Sends one signed update-cache request. The cache answers 200 "OK" on success."""
    url = request.url
    logger.info("Purging %s", url)

    try:
        resp = await _get(client, url, timeout)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("Failed to purge %s: %s", url, e)
        return VariantResult(variant=request.variant, url=url, reason=str(e) or type(e).__name__)

    if resp.status_code != httpx.codes.OK:
        logger.warning("Failed to purge %s: status %d", url, resp.status_code)
        return VariantResult(
            variant=request.variant,
            url=url,
            status_code=resp.status_code,
            reason=f"status {resp.status_code}",
        )

    body = resp.text
    if body != "OK":
        logger.warning("Failed to purge %s: unexpected body %r", url, body[:100])
        return VariantResult(
            variant=request.variant,
            url=url,
            status_code=resp.status_code,
            reason=f"unexpected body {body[:100]!r}",
        )

    return VariantResult(variant=request.variant, url=url, ok=True, status_code=resp.status_code)


async def _probe_and_purge(
    target: TargetUrl, request: PurgeRequest, client: HttpGetter, timeout: float | None
) -> VariantResult:
    probe_url = build_probe_url(request.variant, target.host, target.request_uri)
    if not await probe_cache(probe_url, client, timeout):
        return VariantResult.skipped(request.variant, "not cached")
    return await make_purge_request(request, client, timeout)


async def _purge_all(
    target: TargetUrl,
    requests: list[PurgeRequest],
    client: HttpGetter,
    timeout: float | None,
) -> list[VariantResult]:
    units = []
    for request in requests:
        if request.variant.requires_probe:
            units.append(_probe_and_purge(target, request, client, timeout))
        else:
            units.append(make_purge_request(request, client, timeout))

    # siblings keep running when one variant fails
    outcomes = await asyncio.gather(*units, return_exceptions=True)

    results = []
    for request, outcome in zip(requests, outcomes):
        if isinstance(outcome, Exception):
            logger.error("Failed to purge %s: %r", request.url, outcome)
            outcome = VariantResult(
                variant=request.variant, url=request.url, reason=repr(outcome)
            )
        elif isinstance(outcome, BaseException):
            raise outcome
        results.append(outcome)
    return results


async def purge_url_async(
    raw_url: str,
    client: HttpGetter | None = None,
    key_provider: KeyProvider | None = None,
    timeout: float | None = None,
    timestamp: int | None = None,
) -> PurgeReport:
    """
    Purges the content, web package and (if cached) viewer variants of raw_url.

    All variants are signed with the same timestamp and purged concurrently.
    Raises InvalidURLError or KeyLoadError before any request is made,
    and PurgeError (carrying the report) if any attempted purge failed.
    """
    target = parse_target(raw_url)

    if timestamp is None:
        timestamp = int(time.time())
    if timeout is None:
        timeout = env.request_timeout
    if key_provider is None:
        key_provider = FileKeyProvider.from_env()

    key = key_provider.current_key()
    requests = [
        build_purge_request(variant, target.host, target.request_uri, timestamp, key)
        for variant in CacheVariant
    ]

    if client is None:
        async with httpx.AsyncClient(timeout=timeout) as owned_client:
            results = await _purge_all(target, requests, owned_client, timeout)
    else:
        results = await _purge_all(target, requests, client, timeout)

    report = PurgeReport(url=raw_url, timestamp=timestamp, results=results)
    if not report.ok:
        raise PurgeError(report)
    return report


def purge_url(raw_url: str, **kwargs: Any) -> PurgeReport:
    """Blocking purge_url_async."""
    return asyncio.run(purge_url_async(raw_url, **kwargs))
