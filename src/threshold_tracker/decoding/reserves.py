"""AMM reserve decoding.

Pool accounts are laid out differently across AMM program versions, so
reserves are located heuristically: a few candidate offsets are tried and
the first one holding two plausible u64 values wins. Callers depend on the
``ReserveDecoder`` protocol so a version-specific decoder can replace the
heuristic one without touching the sources that use it.
"""

from __future__ import annotations

import struct
from collections.abc import Callable, Sequence
from typing import Protocol

from threshold_tracker.decoding.accounts import DISCRIMINATOR_SIZE, PUBKEY_SIZE
from threshold_tracker.errors import DecodeError
from threshold_tracker.logging import get_logger
from threshold_tracker.models.accounts import AmmReserves

log = get_logger(__name__)

_RESERVE_PAIR = struct.Struct("<QQ")

MIN_POOL_ACCOUNT_SIZE = 100
MIN_PLAUSIBLE_RESERVE = 1_000
MAX_PLAUSIBLE_RESERVE = 10**18


class ReserveDecoder(Protocol):
    def decode(self, data: bytes) -> AmmReserves | None:
        """Return the pool's base/quote reserves, or None if not decodable."""
        ...


def default_candidate_offsets(data: bytes) -> list[int]:
    """Offsets tried in order: after 6 pubkeys, after 5 pubkeys, tail."""
    return [
        DISCRIMINATOR_SIZE + PUBKEY_SIZE * 6,
        DISCRIMINATOR_SIZE + PUBKEY_SIZE * 5,
        len(data) - _RESERVE_PAIR.size,
    ]


def is_plausible_reserve(value: int) -> bool:
    return MIN_PLAUSIBLE_RESERVE < value < MAX_PLAUSIBLE_RESERVE


class HeuristicReserveDecoder:
    """Try candidate offsets for a (base, quote) u64 pair."""

    def __init__(
        self,
        candidate_offsets: Callable[[bytes], Sequence[int]] = default_candidate_offsets,
        min_length: int = MIN_POOL_ACCOUNT_SIZE,
    ) -> None:
        self._candidate_offsets = candidate_offsets
        self._min_length = min_length

    def _locate(self, data: bytes) -> AmmReserves:
        if len(data) < self._min_length:
            raise DecodeError("pool account too short", context={"length": len(data)})

        for offset in self._candidate_offsets(data):
            if offset < 0 or offset + _RESERVE_PAIR.size > len(data):
                continue
            base, quote = _RESERVE_PAIR.unpack_from(data, offset)
            if is_plausible_reserve(base) and is_plausible_reserve(quote):
                return AmmReserves(base_reserves=base, quote_reserves=quote)

        raise DecodeError("no plausible reserve pair found", context={"length": len(data)})

    def decode(self, data: bytes) -> AmmReserves | None:
        try:
            return self._locate(data)
        except DecodeError as exc:
            log.debug("reserve_decode_failed", error=str(exc), **exc.context)
            return None


_default_decoder = HeuristicReserveDecoder()


def decode_reserves(data: bytes) -> AmmReserves | None:
    """Decode reserves with the default heuristic decoder."""
    return _default_decoder.decode(data)
