"""Chain reconstruction source. Rebuilds prices from on-chain accounts.

proposal account -> question account -> pass/fail pool accounts -> reserves.
Pool accounts are closed once a proposal finalizes, so a missing pool ends
the attempt rather than being retried.
"""

from __future__ import annotations

import asyncio

from threshold_tracker.decoding import decode_proposal, decode_question
from threshold_tracker.errors import DecodeError, NotFoundError
from threshold_tracker.models import AmmReserves, ProposalSnapshot
from threshold_tracker.pricing import compute_threshold, price_from_reserves
from threshold_tracker.sources.base import Source
from threshold_tracker.sources.registry import register


@register
class ChainSource(Source):
    name = "chain"
    priority = 40

    async def _account(self, address: str, kind: str) -> bytes:
        data = await self.ctx.solana.get_account_info(address)
        if data is None:
            raise NotFoundError(f"{kind} account not found", context={"address": address})
        return data

    def _reserves(self, data: bytes | None, address: str, kind: str) -> AmmReserves:
        if data is None:
            raise NotFoundError(f"{kind} pool closed", context={"address": address})
        reserves = self.ctx.reserve_decoder.decode(data)
        if reserves is None:
            raise DecodeError(f"{kind} pool reserves undecodable", context={"address": address})
        return reserves

    async def _pool_accounts(self, pass_amm: str, fail_amm: str) -> tuple[bytes | None, bytes | None]:
        """Read both pools concurrently; a failed read cancels the other."""
        try:
            async with asyncio.TaskGroup() as tg:
                pass_read = tg.create_task(self.ctx.solana.get_account_info(pass_amm))
                fail_read = tg.create_task(self.ctx.solana.get_account_info(fail_amm))
        except ExceptionGroup as group:
            raise group.exceptions[0] from group
        return pass_read.result(), fail_read.result()

    async def _fetch(self) -> ProposalSnapshot | None:
        proposal = decode_proposal(await self._account(self.ctx.proposal.pubkey, "proposal"))
        if proposal is None:
            raise DecodeError("proposal account undecodable")

        question = decode_question(await self._account(proposal.question, "question"))
        if question is None:
            raise DecodeError("question account undecodable")

        pass_data, fail_data = await self._pool_accounts(question.pass_amm, question.fail_amm)
        pass_reserves = self._reserves(pass_data, question.pass_amm, "pass")
        fail_reserves = self._reserves(fail_data, question.fail_amm, "fail")

        pass_price = price_from_reserves(pass_reserves)
        fail_price = price_from_reserves(fail_reserves)
        if pass_price is None or fail_price is None:
            return None

        self.log.info(
            "chain_prices_derived",
            proposal_number=proposal.number,
            state=proposal.state_label,
            pass_price=pass_price,
            fail_price=fail_price,
        )
        return self._snapshot(
            pass_price=pass_price,
            fail_price=fail_price,
            # Spot stands in for TWAP; the oracle accounts are not read.
            pass_twap=pass_price,
            fail_twap=fail_price,
            threshold=compute_threshold(pass_price, fail_price),
            status=proposal.state_label.lower(),
        )
