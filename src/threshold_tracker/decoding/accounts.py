"""Proposal and question account decoders.

Both decoders are pure: they take the raw account bytes and return a
record, or ``None`` when the buffer cannot be decoded. ``DecodeError`` is
raised internally and never escapes.
"""

from __future__ import annotations

import struct

import base58

from threshold_tracker.errors import DecodeError
from threshold_tracker.logging import get_logger
from threshold_tracker.models.accounts import ProposalAccount, QuestionAccount

log = get_logger(__name__)

DISCRIMINATOR_SIZE = 8
PUBKEY_SIZE = 32

# Little-endian, no padding. Field order follows the futarchy program's
# Proposal struct; the leading discriminator is skipped.
_PROPOSAL_LAYOUT = struct.Struct(
    "<"
    "8x"    # discriminator
    "I"     # number
    "32s"   # proposer
    "q"     # timestamp_enqueued
    "B"     # state
    "32s"   # base_vault
    "32s"   # quote_vault
    "32s"   # dao
    "B"     # pda_bump
    "32s"   # question
    "I"     # duration_in_seconds
    "32s"   # squads_proposal
    "32s"   # pass_base_mint
    "32s"   # pass_quote_mint
    "32s"   # fail_base_mint
    "32s"   # fail_quote_mint
    "B"     # is_team_sponsored
)

PROPOSAL_ACCOUNT_SIZE = _PROPOSAL_LAYOUT.size
QUESTION_ACCOUNT_SIZE = 2 * PUBKEY_SIZE


def encode_address(raw: bytes) -> str:
    """Render a 32-byte public key as base58."""
    return base58.b58encode(raw).decode("ascii")


def _require_length(data: bytes, minimum: int, kind: str) -> None:
    if len(data) < minimum:
        raise DecodeError(
            f"{kind} account too short",
            context={"length": len(data), "minimum": minimum},
        )


def _parse_proposal(data: bytes) -> ProposalAccount:
    _require_length(data, PROPOSAL_ACCOUNT_SIZE, "proposal")
    (
        number,
        proposer,
        timestamp_enqueued,
        state,
        base_vault,
        quote_vault,
        dao,
        pda_bump,
        question,
        duration_in_seconds,
        squads_proposal,
        pass_base_mint,
        pass_quote_mint,
        fail_base_mint,
        fail_quote_mint,
        is_team_sponsored,
    ) = _PROPOSAL_LAYOUT.unpack_from(data, 0)

    return ProposalAccount(
        number=number,
        proposer=encode_address(proposer),
        timestamp_enqueued=timestamp_enqueued,
        state=state,
        base_vault=encode_address(base_vault),
        quote_vault=encode_address(quote_vault),
        dao=encode_address(dao),
        pda_bump=pda_bump,
        question=encode_address(question),
        duration_in_seconds=duration_in_seconds,
        squads_proposal=encode_address(squads_proposal),
        pass_base_mint=encode_address(pass_base_mint),
        pass_quote_mint=encode_address(pass_quote_mint),
        fail_base_mint=encode_address(fail_base_mint),
        fail_quote_mint=encode_address(fail_quote_mint),
        is_team_sponsored=is_team_sponsored != 0,
    )


def decode_proposal(data: bytes) -> ProposalAccount | None:
    """Decode a proposal account, or return None if the buffer is unusable."""
    try:
        return _parse_proposal(data)
    except (DecodeError, struct.error) as exc:
        log.debug("proposal_decode_failed", error=str(exc), length=len(data))
        return None


def decode_question(data: bytes) -> QuestionAccount | None:
    """Decode the pass/fail pool addresses from a question account.

    Only the first 64 bytes are read; anything after them (oracle
    configuration and the like) is ignored.
    """
    try:
        _require_length(data, QUESTION_ACCOUNT_SIZE, "question")
    except DecodeError as exc:
        log.debug("question_decode_failed", error=str(exc), length=len(data))
        return None
    return QuestionAccount(
        pass_amm=encode_address(data[:PUBKEY_SIZE]),
        fail_amm=encode_address(data[PUBKEY_SIZE:QUESTION_ACCOUNT_SIZE]),
    )
