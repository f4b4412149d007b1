"""Solana JSON-RPC client, account lookups only."""

from __future__ import annotations

import base64
import itertools
from typing import Any

import httpx

from threshold_tracker.errors import RpcError


class SolanaRpcClient:
    """Async client for a Solana JSON-RPC node."""

    def __init__(
        self,
        rpc_url: str = "https://api.mainnet-beta.solana.com",
        commitment: str = "confirmed",
        timeout: float = 15.0,
        http: httpx.AsyncClient | None = None,
    ):
        self.rpc_url = rpc_url
        self.commitment = commitment
        self._timeout = timeout
        self._http = http
        self._owns_http = http is None
        self._ids = itertools.count(1)

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self._timeout)
            self._owns_http = True
        return self._http

    async def close(self) -> None:
        if self._owns_http and self._http and not self._http.is_closed:
            await self._http.aclose()

    async def _call(self, method: str, params: list[Any]) -> Any:
        http = await self._get_http()
        resp = await http.post(
            self.rpc_url,
            json={"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params},
        )
        resp.raise_for_status()
        body = resp.json()
        error = body.get("error")
        if error:
            raise RpcError(
                error.get("message", "rpc error"),
                code=error.get("code"),
                context={"method": method},
            )
        return body.get("result")

    async def get_account_info(self, address: str) -> bytes | None:
        """Return the raw account data, or None if the account does not exist."""
        result = await self._call(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": self.commitment}],
        )
        value = (result or {}).get("value")
        if value is None:
            return None
        data = value.get("data")
        # [<payload>, "base64"]
        if isinstance(data, list) and data:
            return base64.b64decode(data[0])
        if isinstance(data, str):
            return base64.b64decode(data)
        raise RpcError("unexpected account data encoding", context={"address": address})
