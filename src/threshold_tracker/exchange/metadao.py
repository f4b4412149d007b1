"""MetaDAO web client — GraphQL indexers, proposal pages, market tickers.

The GraphQL endpoints are tried by the caller in order; this client only
knows how to talk to one at a time. Proposal pages are fetched with
browser-like headers since the site sits behind a bot filter.
"""

from __future__ import annotations

from typing import Any

import httpx

from threshold_tracker.errors import NotFoundError, RateLimitedError
from threshold_tracker.logging import get_logger

log = get_logger(__name__)

API_USER_AGENT = "MetaDAO-Threshold-Tracker/1.0"
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_PAGE_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Cache-Control": "max-age=0",
}


class MetaDaoClient:
    """Async client for the MetaDAO site and its APIs."""

    def __init__(
        self,
        site_url: str = "https://www.metadao.fi",
        market_api_url: str = "https://market-api.metadao.fi",
        timeout: float = 15.0,
        http: httpx.AsyncClient | None = None,
    ):
        self.site_url = site_url.rstrip("/")
        self.market_api_url = market_api_url.rstrip("/")
        self._timeout = timeout
        self._http = http
        self._owns_http = http is None

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
            self._owns_http = True
        return self._http

    async def close(self) -> None:
        if self._owns_http and self._http and not self._http.is_closed:
            await self._http.aclose()

    def proposal_url(self, project_slug: str, proposal_pubkey: str) -> str:
        return f"{self.site_url}/projects/{project_slug}/proposal/{proposal_pubkey}"

    async def post_graphql(self, endpoint: str, query: str, variables: dict[str, Any]) -> dict:
        """POST a GraphQL query and return the decoded response body."""
        http = await self._get_http()
        resp = await http.post(
            endpoint,
            json={"query": query, "variables": variables},
            headers={"Content-Type": "application/json", "User-Agent": API_USER_AGENT},
        )
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise ValueError(f"unexpected GraphQL body type: {type(body).__name__}")
        return body

    async def fetch_page(self, url: str) -> str:
        """GET a page as HTML.

        Raises RateLimitedError on 429 and NotFoundError on 404; any other
        error status surfaces as httpx.HTTPStatusError.
        """
        http = await self._get_http()
        resp = await http.get(url, headers=_PAGE_HEADERS)

        if resp.status_code == 429:
            raise RateLimitedError(
                "page fetch rate limited",
                retry_after=resp.headers.get("retry-after"),
                context={"url": url},
            )
        if resp.status_code == 404:
            raise NotFoundError("page not found", context={"url": url})
        if resp.is_error:
            log.debug("page_fetch_error_body", status=resp.status_code, body=resp.text[:200])
        resp.raise_for_status()
        return resp.text

    async def get_tickers(self) -> list[dict]:
        """Fetch the spot ticker list from the market API."""
        http = await self._get_http()
        resp = await http.get(
            f"{self.market_api_url}/api/tickers",
            headers={"User-Agent": "Mozilla/5.0", "Accept": "application/json"},
        )
        resp.raise_for_status()
        body = resp.json()
        if isinstance(body, dict) and "data" in body:
            body = body["data"]
        return [t for t in body if isinstance(t, dict)] if isinstance(body, list) else []
