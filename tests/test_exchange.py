"""Tests for the upstream HTTP clients."""

from __future__ import annotations

import asyncio
import base64
import json

import httpx
import pytest

from threshold_tracker.errors import (
    InterstitialBlockedError,
    NotFoundError,
    PageRenderError,
    RateLimitedError,
    RpcError,
)
from threshold_tracker.exchange import MetaDaoClient, SolanaRpcClient
from threshold_tracker.exchange.browser import PageRenderer, capture_page, is_interstitial, parse_next_data


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestMetaDaoClient:
    def test_default_urls(self):
        c = MetaDaoClient()
        assert c.site_url == "https://www.metadao.fi"
        assert c.market_api_url == "https://market-api.metadao.fi"

    def test_proposal_url(self):
        c = MetaDaoClient(site_url="https://www.metadao.fi/")
        assert c.proposal_url("ranger", "ABC") == "https://www.metadao.fi/projects/ranger/proposal/ABC"

    def test_post_graphql(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"proposals": []}})

        c = MetaDaoClient(http=_client(handler))
        body = asyncio.run(c.post_graphql("https://gql.example/graphql", "query {}", {"a": 1}))
        assert body == {"data": {"proposals": []}}
        assert seen["body"] == {"query": "query {}", "variables": {"a": 1}}

    def test_post_graphql_non_object_body(self):
        c = MetaDaoClient(http=_client(lambda request: httpx.Response(200, json=[1, 2])))
        with pytest.raises(ValueError):
            asyncio.run(c.post_graphql("https://gql.example/graphql", "query {}", {}))

    def test_fetch_page_rate_limited(self):
        c = MetaDaoClient(http=_client(lambda request: httpx.Response(429, headers={"Retry-After": "30"})))
        with pytest.raises(RateLimitedError) as exc_info:
            asyncio.run(c.fetch_page("https://www.metadao.fi/x"))
        assert exc_info.value.retry_after == "30"
        assert exc_info.value.context["url"] == "https://www.metadao.fi/x"

    def test_fetch_page_not_found(self):
        c = MetaDaoClient(http=_client(lambda request: httpx.Response(404)))
        with pytest.raises(NotFoundError):
            asyncio.run(c.fetch_page("https://www.metadao.fi/x"))

    def test_fetch_page_server_error(self):
        c = MetaDaoClient(http=_client(lambda request: httpx.Response(503, text="down")))
        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(c.fetch_page("https://www.metadao.fi/x"))

    def test_fetch_page_sends_browser_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["ua"] = request.headers["user-agent"]
            return httpx.Response(200, text="<html></html>")

        c = MetaDaoClient(http=_client(handler))
        assert asyncio.run(c.fetch_page("https://www.metadao.fi/x")) == "<html></html>"
        assert seen["ua"].startswith("Mozilla/5.0")

    def test_get_tickers_unwraps_data(self):
        payload = {"data": [{"base_symbol": "RNGR", "last_price": "0.5"}, "junk"]}
        c = MetaDaoClient(http=_client(lambda request: httpx.Response(200, json=payload)))
        assert asyncio.run(c.get_tickers()) == [{"base_symbol": "RNGR", "last_price": "0.5"}]

    def test_close_leaves_injected_client_open(self):
        http = _client(lambda request: httpx.Response(200))
        c = MetaDaoClient(http=http)
        asyncio.run(c.close())
        assert not http.is_closed


class TestSolanaRpcClient:
    def test_get_account_info(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "jsonrpc": "2.0",
                "id": 1,
                "result": {"value": {"data": [base64.b64encode(b"hello").decode(), "base64"]}},
            })

        c = SolanaRpcClient(rpc_url="https://rpc.example", http=_client(handler))
        assert asyncio.run(c.get_account_info("Addr1")) == b"hello"
        assert seen["body"]["method"] == "getAccountInfo"
        assert seen["body"]["params"] == ["Addr1", {"encoding": "base64", "commitment": "confirmed"}]

    def test_missing_account(self):
        body = {"jsonrpc": "2.0", "id": 1, "result": {"context": {"slot": 1}, "value": None}}
        c = SolanaRpcClient(http=_client(lambda request: httpx.Response(200, json=body)))
        assert asyncio.run(c.get_account_info("Addr1")) is None

    def test_rpc_error(self):
        body = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid param"}}
        c = SolanaRpcClient(http=_client(lambda request: httpx.Response(200, json=body)))
        with pytest.raises(RpcError) as exc_info:
            asyncio.run(c.get_account_info("bad"))
        assert exc_info.value.code == -32602
        assert str(exc_info.value) == "Invalid param"


class TestPageRenderer:
    def test_disabled_renderer_unavailable(self):
        assert PageRenderer(enabled=False).is_available() is False

    def test_is_interstitial(self):
        assert is_interstitial("Vercel Security Checkpoint", "https://www.metadao.fi/x")
        assert is_interstitial("MetaDAO", "https://www.metadao.fi/.well-known/challenge")
        assert not is_interstitial("MetaDAO", "https://www.metadao.fi/x")

    def test_parse_next_data(self):
        assert parse_next_data('{"props": {}}') == {"props": {}}
        assert parse_next_data("[1]") is None
        assert parse_next_data("{bad") is None
        assert parse_next_data(None) is None


PAGE_URL = "https://www.metadao.fi/projects/ranger/proposal/ABC"
CHECKPOINT = "Vercel Security Checkpoint"


class FakePage:
    """Minimal stand-in for a navigated browser page."""

    def __init__(self, title: str, url: str = PAGE_URL, *, clears: bool = True,
                 cleared_url: str = PAGE_URL, text: str = "Approve TWAP $1.20",
                 next_data: str | None = '{"props": {}}'):
        self._title = title
        self.url = url
        self.clears = clears
        self.cleared_url = cleared_url
        self.text = text
        self.next_data = next_data
        self.waits: list[float] = []

    async def title(self) -> str:
        return self._title

    async def wait_for_function(self, expression: str, timeout: float) -> None:
        self.waits.append(timeout)
        if not self.clears:
            raise asyncio.TimeoutError()
        self._title = "MetaDAO"
        self.url = self.cleared_url

    async def evaluate(self, expression: str):
        if "innerText" in expression:
            return self.text
        return self.next_data


def _capture(page: FakePage, response: object = object()):
    return asyncio.run(capture_page(
        page,
        PAGE_URL,
        response,
        interstitial_timeout_s=30,
        settle_delay_s=0,
    ))


class TestCapturePage:
    def test_plain_page(self):
        page = FakePage("MetaDAO")
        rendered = _capture(page)
        assert rendered.text == "Approve TWAP $1.20"
        assert rendered.next_data == {"props": {}}
        assert page.waits == []

    def test_interstitial_clears(self):
        page = FakePage(CHECKPOINT)
        rendered = _capture(page)
        assert page.waits == [30_000]
        assert rendered.title == "MetaDAO"
        assert rendered.url == PAGE_URL

    def test_interstitial_never_clears(self):
        page = FakePage(CHECKPOINT, clears=False)
        with pytest.raises(InterstitialBlockedError) as exc_info:
            _capture(page)
        assert page.waits == [30_000]
        assert exc_info.value.context["timeout_s"] == 30

    def test_redirected_off_site(self):
        page = FakePage(CHECKPOINT, cleared_url="https://vercel.com/somewhere")
        with pytest.raises(NotFoundError):
            _capture(page)

    def test_no_response(self):
        with pytest.raises(NotFoundError):
            _capture(FakePage("MetaDAO"), response=None)

    def test_missing_next_data(self):
        assert _capture(FakePage("MetaDAO", next_data=None)).next_data is None


class TestPageRendererErrors:
    def test_browser_error_becomes_page_render_error(self, monkeypatch):
        async_api = pytest.importorskip("playwright.async_api")

        class FailingPlaywright:
            async def __aenter__(self):
                raise async_api.Error("browser executable missing")

            async def __aexit__(self, *exc_info):
                return False

        monkeypatch.setattr(async_api, "async_playwright", lambda: FailingPlaywright())
        with pytest.raises(PageRenderError) as exc_info:
            asyncio.run(PageRenderer().render(PAGE_URL))
        assert "browser executable missing" in str(exc_info.value)
        assert exc_info.value.context["url"] == PAGE_URL
