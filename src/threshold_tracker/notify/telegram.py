"""Telegram delivery via the Bot API's sendMessage."""

from __future__ import annotations

from typing import Protocol

import httpx

from threshold_tracker.logging import get_logger

log = get_logger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"
MAX_MESSAGE_LENGTH = 4096


class Notifier(Protocol):
    async def send(self, text: str) -> bool:
        ...


class TelegramNotifier:
    """Sends Markdown messages to one chat. Never raises on delivery failure."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        http: httpx.AsyncClient | None = None,
        api_base: str = TELEGRAM_API_BASE,
        timeout: float = 10.0,
    ):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._http = http
        self._owns_http = http is None

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self._timeout)
            self._owns_http = True
        return self._http

    async def close(self) -> None:
        if self._owns_http and self._http and not self._http.is_closed:
            await self._http.aclose()

    async def send(self, text: str) -> bool:
        if not self.enabled:
            log.debug("telegram_not_configured")
            return False

        http = await self._get_http()
        try:
            resp = await http.post(
                f"{self.api_base}/bot{self.bot_token}/sendMessage",
                json={
                    "chat_id": self.chat_id,
                    "text": text[:MAX_MESSAGE_LENGTH],
                    "parse_mode": "Markdown",
                    "disable_web_page_preview": True,
                },
            )
        except httpx.HTTPError as exc:
            log.warning("telegram_send_failed", error=str(exc))
            return False

        if resp.is_error:
            log.warning("telegram_api_error", status=resp.status_code, body=resp.text[:200])
            return False

        log.info("telegram_message_sent", chat_id=self.chat_id)
        return True
