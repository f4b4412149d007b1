"""Rendered-page source: proposal page loaded in a headless browser."""

from __future__ import annotations

from threshold_tracker.models import ProposalSnapshot
from threshold_tracker.sources.base import Source
from threshold_tracker.sources.extraction import PageFigures, extract_figures
from threshold_tracker.sources.registry import register

PAGE_STATUS = "active"


def snapshot_fields(figures: PageFigures) -> dict:
    """Map extracted page figures onto snapshot fields; missing prices become 0."""
    return {
        "threshold": figures.threshold,
        "pass_price": figures.pass_price or 0.0,
        "fail_price": figures.fail_price or 0.0,
        "pass_twap": figures.pass_twap or figures.pass_price or 0.0,
        "fail_twap": figures.fail_twap or figures.fail_price or 0.0,
        "status": PAGE_STATUS,
    }


@register
class RenderedPageSource(Source):
    name = "rendered_page"
    priority = 20

    def is_available(self) -> bool:
        return self.ctx.renderer.is_available()

    async def _fetch(self) -> ProposalSnapshot | None:
        page = await self.ctx.renderer.render(self.ctx.proposal_url)
        figures = extract_figures(
            page.text,
            page.next_data,
            tolerance=self.ctx.settings.threshold_tolerance,
        )
        if figures is None:
            return None
        self.log.info("page_threshold_found", method=figures.method, threshold=figures.threshold)
        return self._snapshot(**snapshot_fields(figures))
