#!/usr/bin/env python3
"""FastAPI server runner."""

import argparse

import structlog
import uvicorn

from threshold_tracker.api.app import create_app
from threshold_tracker.config import load_config
from threshold_tracker.logging.setup import setup_logging
from threshold_tracker.orchestrator.runner import build_tracker

logger = structlog.get_logger()


def main():
    """Run the FastAPI server."""
    parser = argparse.ArgumentParser(description="Threshold tracker HTTP server")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    config = load_config(args.config)
    setup_logging(level=config.logging.level, log_format=config.logging.format)
    app = create_app(build_tracker(config))

    logger.info("Starting FastAPI server", host=args.host, port=args.port)

    try:
        uvicorn.run(
            app,
            host=args.host,
            port=args.port,
            log_config=None  # Use our structlog setup
        )
    except Exception as e:
        logger.error("Failed to start server", error=str(e))
        raise


if __name__ == "__main__":
    main()
