"""Fetch orchestration and the tracking cycle."""

from threshold_tracker.orchestrator.fetcher import FetchOrchestrator, instantiate_sources
from threshold_tracker.orchestrator.runner import CycleOutcome, Tracker, build_tracker, run_cycle

__all__ = [
    "CycleOutcome",
    "FetchOrchestrator",
    "Tracker",
    "build_tracker",
    "instantiate_sources",
    "run_cycle",
]
