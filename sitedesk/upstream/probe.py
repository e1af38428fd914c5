"""Reachability probe for the production site."""

from __future__ import annotations

import httpx

from sitedesk.logging import get_logger, log_debug

logger = get_logger(__name__)

_PROBE_TIMEOUT_S = 5.0


async def probe_site(
    url: str | None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> bool:
    """Return whether ``url`` answers a ``HEAD`` request within five seconds.

    Any HTTP response counts as online; transport errors and timeouts count
    as offline. A missing URL is reported as offline.
    """
    if not url:
        return False

    client = http_client or httpx.AsyncClient(follow_redirects=True)
    try:
        await client.head(url, timeout=_PROBE_TIMEOUT_S)
    except httpx.HTTPError as exc:
        log_debug(logger, "Site probe %s failed: %s", url, exc)
        return False
    finally:
        if http_client is None:
            await client.aclose()
    return True
