"""Headless page rendering with Playwright.

Playwright is an optional dependency; when it is not installed, or the
browser is disabled in config (restricted sandboxes, serverless hosts),
``PageRenderer.is_available()`` is False and callers skip rendering.
"""

from __future__ import annotations

import asyncio
import importlib.util
import json
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from threshold_tracker.errors import InterstitialBlockedError, NotFoundError, PageRenderError
from threshold_tracker.exchange.metadao import BROWSER_USER_AGENT
from threshold_tracker.logging import get_logger

log = get_logger(__name__)

INTERSTITIAL_TITLE = "Vercel Security Checkpoint"

_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
]

_HIDE_WEBDRIVER = "Object.defineProperty(navigator, 'webdriver', { get: () => false });"

_CHALLENGE_CLEARED = (
    "() => !document.title.includes('" + INTERSTITIAL_TITLE + "')"
    " && !location.href.includes('challenge')"
)

_READ_NEXT_DATA = (
    "() => { const s = document.getElementById('__NEXT_DATA__');"
    " return s ? s.textContent : null; }"
)


@dataclass(frozen=True)
class RenderedPage:
    url: str
    title: str
    text: str
    next_data: dict | None = None


def is_interstitial(title: str, url: str) -> bool:
    return INTERSTITIAL_TITLE in title or "challenge" in url


def parse_next_data(raw: str | None) -> dict | None:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


class PageRenderer:
    """Render a page in headless Chromium and capture its text and data blob."""

    def __init__(
        self,
        enabled: bool = True,
        navigation_timeout_s: float = 60.0,
        interstitial_timeout_s: float = 30.0,
        settle_delay_s: float = 5.0,
    ) -> None:
        self.enabled = enabled
        self.navigation_timeout_s = navigation_timeout_s
        self.interstitial_timeout_s = interstitial_timeout_s
        self.settle_delay_s = settle_delay_s

    def is_available(self) -> bool:
        return self.enabled and importlib.util.find_spec("playwright") is not None

    async def render(self, url: str) -> RenderedPage:
        """Load *url*, wait out any interstitial, and return the rendered page."""
        from playwright.async_api import Error as PlaywrightError
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError
        from playwright.async_api import async_playwright

        try:
            async with async_playwright() as pw:
                browser = await pw.chromium.launch(headless=True, args=_LAUNCH_ARGS)
                try:
                    context = await browser.new_context(
                        viewport={"width": 1920, "height": 1080},
                        user_agent=BROWSER_USER_AGENT,
                    )
                    await context.add_init_script(_HIDE_WEBDRIVER)
                    page = await context.new_page()

                    response = await page.goto(
                        url,
                        wait_until="domcontentloaded",
                        timeout=self.navigation_timeout_s * 1000,
                    )
                    return await capture_page(
                        page,
                        url,
                        response,
                        interstitial_timeout_s=self.interstitial_timeout_s,
                        settle_delay_s=self.settle_delay_s,
                        timeout_errors=(PlaywrightTimeoutError,),
                    )
                finally:
                    await browser.close()
        except PlaywrightError as exc:
            raise PageRenderError(str(exc), context={"url": url}) from exc


async def capture_page(
    page: Any,
    url: str,
    response: Any,
    *,
    interstitial_timeout_s: float,
    settle_delay_s: float,
    timeout_errors: tuple[type[BaseException], ...] = (asyncio.TimeoutError,),
) -> RenderedPage:
    """Turn a navigated page into a RenderedPage, or raise why it cannot be used.

    *page* needs ``title()``, ``url``, ``wait_for_function()`` and
    ``evaluate()``. The interstitial wait is bounded by
    *interstitial_timeout_s*; if the challenge is still showing afterwards
    the page is rejected.
    """
    if response is None:
        raise NotFoundError("no response for page", context={"url": url})

    if is_interstitial(await page.title(), page.url):
        log.info("interstitial_detected", url=url)
        try:
            await page.wait_for_function(
                _CHALLENGE_CLEARED,
                timeout=interstitial_timeout_s * 1000,
            )
        except timeout_errors:
            log.info("interstitial_wait_timed_out", url=url)

    # Values are filled in client-side after hydration.
    await asyncio.sleep(settle_delay_s)

    title = await page.title()
    if is_interstitial(title, page.url):
        raise InterstitialBlockedError(
            "challenge did not clear",
            context={"url": page.url, "timeout_s": interstitial_timeout_s},
        )

    expected_host = urlparse(url).hostname or ""
    if urlparse(page.url).hostname != expected_host:
        raise NotFoundError("redirected off-site", context={"url": page.url})

    text = await page.evaluate("() => document.body.innerText")
    raw_next_data = await page.evaluate(_READ_NEXT_DATA)
    return RenderedPage(
        url=page.url,
        title=title,
        text=text or "",
        next_data=parse_next_data(raw_next_data),
    )
