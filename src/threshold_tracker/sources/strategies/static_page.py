"""Static HTML source — plain GET of the proposal page.

Many of the page's values are filled in client-side, so this is only a
fallback for when the rendered page is unavailable. A 429 ends the attempt;
the next scheduled cycle is the retry.
"""

from __future__ import annotations

from threshold_tracker.models import ProposalSnapshot
from threshold_tracker.sources.base import Source
from threshold_tracker.sources.extraction import extract_figures, parse_html
from threshold_tracker.sources.registry import register
from threshold_tracker.sources.strategies.rendered_page import snapshot_fields


@register
class StaticPageSource(Source):
    name = "static_page"
    priority = 30

    async def _fetch(self) -> ProposalSnapshot | None:
        await self.ctx.sleep(self.ctx.settings.page_delay_s)
        html = await self.ctx.metadao.fetch_page(self.ctx.proposal_url)

        parsed = parse_html(html)
        figures = extract_figures(
            parsed.text,
            parsed.next_data,
            scripts=parsed.scripts,
            html=html,
            tolerance=self.ctx.settings.threshold_tolerance,
        )
        if figures is None:
            self.log.info("page_structure_unrecognised", length=len(html))
            return None
        self.log.info("page_threshold_found", method=figures.method, threshold=figures.threshold)
        return self._snapshot(**snapshot_fields(figures))
