"""Link checking service.

This module checks that the external links in a post still resolve.
"""

import httpx
from dataclasses import dataclass
from typing import List, Optional

from post_catalog.log_system.unified_logger import UnifiedLogger


@dataclass
class LinkStatus:
    """Result of checking one URL."""

    url: str
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


# Status codes some servers return for HEAD while GET works
HEAD_REFUSED_STATUSES = {403, 405, 501}


def is_external(url: str) -> bool:
    return url.startswith(("http://", "https://"))


async def check_links(urls: List[str]) -> List[LinkStatus]:
    """Check every absolute http(s) URL.

    Relative links, anchors and other schemes are skipped. Duplicates are
    checked once.

    Args:
        urls: Link targets, typically RenderedBody.links

    Returns:
        List of LinkStatus in input order
    """
    logger = UnifiedLogger.get_logger(__name__)

    targets = []
    for url in urls:
        if is_external(url) and url not in targets:
            targets.append(url)

    logger.info(f"Checking {len(targets)} links")

    results = []
    async with httpx.AsyncClient(
        follow_redirects=True,
        timeout=15.0,
        headers={"User-Agent": "PostCatalog/1.0 (Link Checker)"},
    ) as client:
        for url in targets:
            results.append(await _check_link(client, url))

    broken = [r.url for r in results if not r.ok]
    if broken:
        logger.warning(f"{len(broken)} broken links: {', '.join(broken)}")
    return results


async def _check_link(client: httpx.AsyncClient, url: str) -> LinkStatus:
    try:
        response = await client.head(url)
        if response.status_code in HEAD_REFUSED_STATUSES:
            response = await client.get(url)
    except httpx.HTTPError as e:
        return LinkStatus(url=url, ok=False, error=str(e) or type(e).__name__)

    return LinkStatus(
        url=url,
        ok=response.status_code < 400,
        status_code=response.status_code,
    )
