"""Structured query source — MetaDAO GraphQL indexers, tried in order."""

from __future__ import annotations

import httpx

from threshold_tracker.models import ProposalSnapshot
from threshold_tracker.pricing import compute_threshold
from threshold_tracker.sources.base import Source
from threshold_tracker.sources.registry import register

PROPOSAL_QUERY = """
query GetProposal($proposalAcct: String!) {
  proposals(where: { proposal_acct: { _eq: $proposalAcct } }) {
    proposal_acct
    status
    pass_market_acct
    fail_market_acct
  }
  proposal_details(where: { proposal_acct: { _eq: $proposalAcct } }) {
    proposal_acct
    pass_price
    fail_price
    pass_twap
    fail_twap
  }
}
"""


def _number(value: object) -> float:
    """Indexer numerics may arrive as strings or nulls; missing means 0."""
    if value is None or value == "":
        return 0.0
    return float(value)  # type: ignore[arg-type]


def parse_proposal_response(body: dict) -> dict | None:
    """Pull the first proposal and its details out of a GraphQL body.

    Returns the merged fields, or None when either half is missing or not
    an object. Unparseable numbers raise ValueError.
    """
    data = body.get("data")
    if not isinstance(data, dict):
        return None
    proposals = data.get("proposals") or []
    details = data.get("proposal_details") or []
    if not isinstance(proposals, list) or not isinstance(details, list):
        return None
    if not proposals or not details:
        return None

    proposal, detail = proposals[0], details[0]
    if not isinstance(proposal, dict) or not isinstance(detail, dict):
        return None

    pass_price = _number(detail.get("pass_price"))
    fail_price = _number(detail.get("fail_price"))
    return {
        "proposal_pubkey": proposal.get("proposal_acct"),
        "status": proposal.get("status") or "unknown",
        "pass_price": pass_price,
        "fail_price": fail_price,
        "pass_twap": _number(detail.get("pass_twap")) or pass_price,
        "fail_twap": _number(detail.get("fail_twap")) or fail_price,
    }


@register
class GraphQLSource(Source):
    """Indexer-backed proposal state and prices, the most authoritative source."""

    name = "graphql"
    priority = 10

    def _from_body(self, body: dict) -> ProposalSnapshot | None:
        fields = parse_proposal_response(body)
        if fields is None:
            return None
        if not fields["proposal_pubkey"]:
            fields.pop("proposal_pubkey")
        return self._snapshot(
            threshold=compute_threshold(fields["pass_price"], fields["fail_price"]),
            **fields,
        )

    async def _fetch(self) -> ProposalSnapshot | None:
        variables = {"proposalAcct": self.ctx.proposal.pubkey}

        for endpoint in self.ctx.settings.graphql_endpoints:
            # Each endpoint stands alone; a bad body moves on to the next one.
            try:
                body = await self.ctx.metadao.post_graphql(endpoint, PROPOSAL_QUERY, variables)
                snapshot = self._from_body(body)
            except (httpx.HTTPError, ValueError, TypeError, AttributeError) as exc:
                self.log.debug("graphql_endpoint_failed", endpoint=endpoint, error=str(exc))
                continue

            if snapshot is None:
                self.log.debug("graphql_endpoint_incomplete", endpoint=endpoint)
                continue

            self.log.info("graphql_endpoint_hit", endpoint=endpoint)
            return snapshot

        return None
