"""Tests for HtmlFetcher strategy fallback and validation."""

from unittest.mock import AsyncMock, call, patch

import httpx
import pytest
import respx
from httpx import Response

from app.exceptions.custom import FetchExhaustedError
from app.services.html_fetcher import (
    ALLORIGINS_RAW_URL,
    CODETABS_PROXY_URL,
    HtmlFetcher,
    looks_like_html,
    strip_popups,
)

TARGET = "https://casino.guru/lucky-star-casino-review"
RELAY = "https://parser.internal/proxy"


def _page(extra: str = "") -> str:
    filler = "<p>" + "casino review content " * 60 + "</p>"
    return f"<html><body>{extra}{filler}</body></html>"


@pytest.fixture
def client():
    return httpx.AsyncClient()


@pytest.fixture
def fetcher(client):
    return HtmlFetcher(client, relay_url=RELAY, max_attempts=2, retry_delay=0)


def test_looks_like_html():
    assert looks_like_html(_page())
    assert not looks_like_html("<html></html>")
    assert not looks_like_html("x" * 2000)
    assert not looks_like_html(None)


def test_strip_popups():
    html = '<body><div class="age-popup">Are you 18?</div><p>Keep</p><div class="modal fade">Sign up</div></body>'
    assert strip_popups(html) == "<body><p>Keep</p></body>"


def test_relay_strategy_only_when_configured(client):
    names = [name for name, _ in HtmlFetcher(client).strategies()]
    assert names == ["codetabs proxy", "allorigins proxy", "direct"]

    names = [name for name, _ in HtmlFetcher(client, relay_url=RELAY).strategies()]
    assert names == ["codetabs proxy", "server relay", "allorigins proxy", "direct"]


@respx.mock
async def test_first_strategy_success(fetcher):
    route = respx.get(CODETABS_PROXY_URL).mock(return_value=Response(200, html=_page()))

    html = await fetcher.fetch_html(TARGET)

    assert "casino review content" in html
    assert route.call_count == 1
    assert route.calls[0].request.url.params["quest"] == TARGET


@respx.mock
async def test_falls_through_to_third_strategy(fetcher):
    codetabs = respx.get(CODETABS_PROXY_URL).mock(return_value=Response(500))
    relay = respx.get(RELAY).mock(side_effect=httpx.ConnectError("refused"))
    allorigins = respx.get(ALLORIGINS_RAW_URL).mock(
        return_value=Response(200, html=_page('<div class="cookie-overlay">Accept</div>'))
    )
    direct = respx.get(TARGET).mock(return_value=Response(200, html=_page()))

    html = await fetcher.fetch_html(TARGET)

    assert "casino review content" in html
    assert "cookie-overlay" not in html
    assert codetabs.call_count == 2
    assert relay.call_count == 2
    assert allorigins.call_count == 1
    assert allorigins.calls[0].request.url.params["url"] == TARGET
    assert direct.call_count == 0


@respx.mock
async def test_all_strategies_invalid_raises_last_error(fetcher):
    respx.get(CODETABS_PROXY_URL).mock(return_value=Response(200, text="short"))
    respx.get(RELAY).mock(return_value=Response(200, text="short"))
    respx.get(ALLORIGINS_RAW_URL).mock(return_value=Response(200, text="short"))
    respx.get(TARGET).mock(return_value=Response(200, text="x" * 1500))

    with pytest.raises(FetchExhaustedError) as exc_info:
        await fetcher.fetch_html(TARGET)

    assert exc_info.value.url == TARGET
    assert "direct returned invalid HTML" in exc_info.value.message


@respx.mock
async def test_direct_fetch_sends_browser_headers(client):
    fetcher = HtmlFetcher(client, max_attempts=1, retry_delay=0)
    respx.get(CODETABS_PROXY_URL).mock(return_value=Response(403))
    respx.get(ALLORIGINS_RAW_URL).mock(return_value=Response(502))
    direct = respx.get(TARGET).mock(return_value=Response(200, html=_page()))

    await fetcher.fetch_html(TARGET)

    request = direct.calls[0].request
    assert "Chrome" in request.headers["user-agent"]
    assert request.headers["referer"] == "https://www.google.com/"
    assert "age_verified=1" in request.headers["cookie"]


@respx.mock
async def test_relay_returns_raw_response(fetcher):
    respx.get(TARGET).mock(return_value=Response(404, text="gone"))

    resp = await fetcher.relay(TARGET)

    assert resp.status_code == 404
    assert resp.text == "gone"


@respx.mock
async def test_default_retry_policy_sleeps_between_attempts(client):
    fetcher = HtmlFetcher(client)
    codetabs = respx.get(CODETABS_PROXY_URL).mock(return_value=Response(500))
    respx.get(ALLORIGINS_RAW_URL).mock(return_value=Response(200, html=_page()))

    with patch("app.services.html_fetcher.asyncio.sleep", new_callable=AsyncMock) as sleep:
        html = await fetcher.fetch_html(TARGET)

    assert "casino review content" in html
    assert codetabs.call_count == 3
    assert sleep.await_args_list == [call(2.0), call(2.0)]
