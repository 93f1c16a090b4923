import logging

import httpx
from bs4 import BeautifulSoup

from app.exceptions.custom import FetchError

logger = logging.getLogger(__name__)

CASINO_PATH_MARKER = "/casino-review"


def extract_casino_urls(xml: str) -> list[str]:
    """Casino review URLs from a sitemap document, in document order, deduplicated."""
    soup = BeautifulSoup(xml, "html.parser")
    urls: list[str] = []
    seen: set[str] = set()
    for loc in soup.select("url loc"):
        url = loc.get_text(strip=True)
        if CASINO_PATH_MARKER in url and url not in seen:
            seen.add(url)
            urls.append(url)
    return urls


class SitemapService:
    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def casino_urls(self, sitemap_url: str) -> list[str]:
        try:
            resp = await self._client.get(sitemap_url, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise FetchError(f"Sitemap request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise FetchError(
                f"Sitemap request failed with status: {resp.status_code}",
                status_code=resp.status_code,
            )
        urls = extract_casino_urls(resp.text)
        logger.info("Found %d casino URLs in %s", len(urls), sitemap_url)
        return urls
