"""Run the tracker as: python -m threshold_tracker.orchestrator [--config path] [--loop]."""

import argparse

from threshold_tracker.orchestrator.runner import main

parser = argparse.ArgumentParser(description="Proposal threshold tracker")
parser.add_argument("--config", default=None, help="Path to config.yaml")
parser.add_argument("--loop", action="store_true", help="Keep running at schedule.interval_s")
args = parser.parse_args()
raise SystemExit(main(config_path=args.config, loop=args.loop))
