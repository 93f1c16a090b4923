"""Fetch resilience layer.

Tries each retrieval strategy in order (public CORS proxy, this service's own
relay, a second public relay, then a direct request with browser headers).
Every strategy gets a bounded number of attempts; a response only counts when
it looks like a real HTML page.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable

import httpx

from app.exceptions.custom import FetchError, FetchExhaustedError

logger = logging.getLogger(__name__)

CODETABS_PROXY_URL = "https://api.codetabs.com/v1/proxy"
ALLORIGINS_RAW_URL = "https://api.allorigins.win/raw"

MIN_HTML_LENGTH = 1000

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Upgrade-Insecure-Requests": "1",
    "Referer": "https://www.google.com/",
}

# Pre-accepted consent/age-gate cookies
CONSENT_COOKIES = {
    "cookieconsent_status": "dismiss",
    "age_verified": "1",
    "popup_closed": "1",
    "gdpr_consent": "1",
    "ok_clicked": "1",
}

# Approximate: a lazy match stops at the first closing </div>, so nested
# markup inside a popup may leave a tail behind.
_POPUP_RES = tuple(
    re.compile(rf'<div[^>]*class="[^"]*{word}[^"]*"[^>]*>[\s\S]*?</div>', re.IGNORECASE)
    for word in ("popup", "overlay", "modal")
)


def looks_like_html(body: str | None) -> bool:
    if not body or len(body) <= MIN_HTML_LENGTH:
        return False
    lower = body.lower()
    return "<html" in lower or "<body" in lower


def strip_popups(html: str) -> str:
    """Remove popup, overlay and modal ``<div>`` blocks by pattern match."""
    for pattern in _POPUP_RES:
        html = pattern.sub("", html)
    return html


def browser_request_headers() -> dict[str, str]:
    cookie = "; ".join(f"{k}={v}" for k, v in CONSENT_COOKIES.items())
    return {**BROWSER_HEADERS, "Cookie": cookie}


Strategy = tuple[str, Callable[[str], Awaitable[str]]]


class HtmlFetcher:
    def __init__(
        self,
        client: httpx.AsyncClient,
        relay_url: str = "",
        max_attempts: int = 3,
        retry_delay: float = 2.0,
    ):
        self._client = client
        self._relay_url = relay_url
        self._max_attempts = max(1, max_attempts)
        self._retry_delay = retry_delay

    def strategies(self) -> list[Strategy]:
        strategies: list[Strategy] = [("codetabs proxy", self._fetch_codetabs)]
        if self._relay_url:
            strategies.append(("server relay", self._fetch_relay))
        strategies.append(("allorigins proxy", self._fetch_allorigins))
        strategies.append(("direct", self._fetch_direct))
        return strategies

    async def fetch_html(self, url: str) -> str:
        """Return popup-stripped HTML for `url` or raise FetchExhaustedError."""
        last_error: Exception | None = None

        for name, fetch in self.strategies():
            logger.info("Fetching %s using %s", url, name)
            try:
                html = await self._with_retries(name, fetch, url)
            except FetchError as exc:
                last_error = exc
                logger.warning("Strategy %s failed for %s: %s", name, url, exc.message)
                continue
            logger.info("Fetched %s using %s (%d chars)", url, name, len(html))
            return strip_popups(html)

        raise FetchExhaustedError(url, last_error)

    async def _with_retries(
        self, name: str, fetch: Callable[[str], Awaitable[str]], url: str
    ) -> str:
        for attempt in range(1, self._max_attempts + 1):
            try:
                body = await fetch(url)
                if not looks_like_html(body):
                    raise FetchError(
                        f"{name} returned invalid HTML ({len(body or '')} chars)"
                    )
                return body
            except httpx.HTTPError as exc:
                error = FetchError(f"{name} request failed: {exc}")
            except FetchError as exc:
                error = exc

            logger.debug("%s attempt %d/%d failed: %s", name, attempt, self._max_attempts, error)
            if attempt < self._max_attempts:
                await asyncio.sleep(self._retry_delay)

        raise error

    async def _get_text(self, url: str, name: str, **kwargs) -> str:
        resp = await self._client.get(url, follow_redirects=True, **kwargs)
        if resp.status_code >= 400:
            raise FetchError(
                f"{name} request failed with status: {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp.text

    async def _fetch_codetabs(self, url: str) -> str:
        return await self._get_text(CODETABS_PROXY_URL, "codetabs proxy", params={"quest": url})

    async def _fetch_relay(self, url: str) -> str:
        return await self._get_text(self._relay_url, "server relay", params={"url": url})

    async def _fetch_allorigins(self, url: str) -> str:
        return await self._get_text(ALLORIGINS_RAW_URL, "allorigins proxy", params={"url": url})

    async def _fetch_direct(self, url: str) -> str:
        return await self._get_text(url, "direct", headers=browser_request_headers())

    async def relay(self, url: str) -> httpx.Response:
        """Single direct fetch with browser headers, for the ``/proxy`` route."""
        return await self._client.get(
            url, follow_redirects=True, headers=browser_request_headers()
        )
