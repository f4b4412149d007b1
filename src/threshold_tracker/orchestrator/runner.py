"""Cycle runner — fetch, record, report, deliver.

One cycle per invocation. The loop mode exists for hosts without cron;
cycles never overlap because each one is awaited before sleeping.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import structlog

from threshold_tracker.config.loader import load_config
from threshold_tracker.config.schema import AppConfig, ReportConfig
from threshold_tracker.exchange import MetaDaoClient, PageRenderer, SolanaRpcClient
from threshold_tracker.history import HistoryStore, build_history_store
from threshold_tracker.logging.setup import setup_logging
from threshold_tracker.models import ProposalSnapshot, ThresholdReport, Unavailable
from threshold_tracker.notify import Notifier, TelegramNotifier
from threshold_tracker.orchestrator.fetcher import FetchOrchestrator
from threshold_tracker.report import build_report, format_report, format_unavailable
from threshold_tracker.sources import SourceContext

log = structlog.get_logger("runner")


@dataclass
class Tracker:
    """Everything one cycle needs, with the clients it owns."""

    orchestrator: FetchOrchestrator
    store: HistoryStore
    notifier: Notifier | None = None
    report: ReportConfig = field(default_factory=ReportConfig)
    resources: list[Any] = field(default_factory=list)

    async def aclose(self) -> None:
        for resource in self.resources:
            await resource.close()


@dataclass(frozen=True)
class CycleOutcome:
    success: bool
    snapshot: ProposalSnapshot | None = None
    report: ThresholdReport | None = None
    delivered: bool = False


def build_tracker(config: AppConfig) -> Tracker:
    """Wire clients, sources, store and notifier from configuration."""
    src = config.sources
    metadao = MetaDaoClient(
        site_url=config.proposal.site_url,
        market_api_url=src.market_api_url,
        timeout=src.request_timeout_s,
    )
    solana = SolanaRpcClient(rpc_url=src.rpc_url, timeout=src.request_timeout_s)
    renderer = PageRenderer(
        enabled=src.browser_enabled,
        navigation_timeout_s=src.navigation_timeout_s,
        interstitial_timeout_s=src.interstitial_timeout_s,
        settle_delay_s=src.settle_delay_s,
    )
    ctx = SourceContext(
        proposal=config.proposal,
        settings=src,
        metadao=metadao,
        solana=solana,
        renderer=renderer,
    )

    resources: list[Any] = [metadao, solana]
    notifier: TelegramNotifier | None = None
    if config.telegram.bot_token and config.telegram.chat_id:
        notifier = TelegramNotifier(config.telegram.bot_token, config.telegram.chat_id)
        resources.append(notifier)
    else:
        log.warning("telegram_disabled", reason="bot_token or chat_id not configured")

    return Tracker(
        orchestrator=FetchOrchestrator.from_context(ctx),
        store=build_history_store(config.history),
        notifier=notifier,
        report=config.report,
        resources=resources,
    )


async def _deliver(tracker: Tracker, text: str) -> bool:
    if tracker.notifier is None:
        return False
    return await tracker.notifier.send(text)


async def run_cycle(tracker: Tracker) -> CycleOutcome:
    """Run one fetch-record-report cycle.

    Success means a snapshot was acquired and recorded; delivery is
    reported separately since the notifier may be absent.
    """
    result = await tracker.orchestrator.fetch()

    if isinstance(result, Unavailable):
        delivered = await _deliver(tracker, format_unavailable())
        return CycleOutcome(success=False, delivered=delivered)

    with structlog.contextvars.bound_contextvars(proposal=result.proposal_pubkey):
        history = tracker.store.append(result)
        report = build_report(
            result,
            history,
            lookback=timedelta(minutes=tracker.report.lookback_minutes),
            tolerance=timedelta(minutes=tracker.report.tolerance_minutes),
        )
        delivered = await _deliver(tracker, format_report(report, tracker.report.pass_threshold))
        log.info(
            "cycle_complete",
            source=result.source,
            threshold=report.current,
            variation=report.variation,
            finalized=report.is_finalized,
            history_size=len(history.entries),
            delivered=delivered,
        )
    return CycleOutcome(success=True, snapshot=result, report=report, delivered=delivered)


async def run_once(config: AppConfig) -> bool:
    tracker = build_tracker(config)
    try:
        outcome = await run_cycle(tracker)
    except Exception:
        log.exception("cycle_error")
        return False
    finally:
        await tracker.aclose()
    return outcome.success


async def run_loop(config: AppConfig) -> None:
    """Run a cycle every ``schedule.interval_s`` seconds until cancelled."""
    tracker = build_tracker(config)
    interval = config.schedule.interval_s
    log.info("tracker_started", proposal=config.proposal.pubkey, interval_s=interval)
    try:
        while True:
            try:
                outcome = await run_cycle(tracker)
                if not outcome.success:
                    log.warning("cycle_without_data")
            except Exception:
                log.exception("cycle_error")
            await asyncio.sleep(interval)
    finally:
        await tracker.aclose()


def main(config_path: str | None = None, loop: bool = False) -> int:
    """Entry point: load config, set up logging, run once or forever."""
    config = load_config(config_path)
    setup_logging(level=config.logging.level, log_format=config.logging.format)
    if loop:
        asyncio.run(run_loop(config))
        return 0
    return 0 if asyncio.run(run_once(config)) else 1
