"""Binary account decoders."""

from threshold_tracker.decoding.accounts import (
    PROPOSAL_ACCOUNT_SIZE,
    QUESTION_ACCOUNT_SIZE,
    decode_proposal,
    decode_question,
)
from threshold_tracker.decoding.reserves import (
    HeuristicReserveDecoder,
    ReserveDecoder,
    decode_reserves,
)

__all__ = [
    "PROPOSAL_ACCOUNT_SIZE",
    "QUESTION_ACCOUNT_SIZE",
    "HeuristicReserveDecoder",
    "ReserveDecoder",
    "decode_proposal",
    "decode_question",
    "decode_reserves",
]
