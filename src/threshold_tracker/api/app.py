"""FastAPI application — health, manual trigger, history inspection."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from threshold_tracker.errors import DataUnavailableError
from threshold_tracker.orchestrator.runner import Tracker, run_cycle

logger = structlog.get_logger("api")


def create_app(tracker: Tracker) -> FastAPI:
    """Build the app around an already-wired tracker.

    The tracker's clients are closed when the app shuts down.
    """

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        await tracker.aclose()

    app = FastAPI(
        title="Threshold Tracker",
        description="Futarchy proposal threshold tracker",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.tracker = tracker

    @app.exception_handler(DataUnavailableError)
    async def _unavailable(_: Request, exc: DataUnavailableError) -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content={"error": str(exc), "attempted": exc.attempted},
        )

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "MetaDAO Threshold Tracker"

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        return "OK"

    @app.post("/trigger")
    async def trigger() -> JSONResponse:
        try:
            outcome = await run_cycle(app.state.tracker)
        except Exception as exc:
            logger.exception("trigger_failed")
            return JSONResponse(status_code=500, content={"error": str(exc)})

        return JSONResponse(
            status_code=200 if outcome.success else 500,
            content={
                "success": outcome.success,
                "message": "Update sent" if outcome.success else "Update failed",
                "delivered": outcome.delivered,
                "report": outcome.report.model_dump(mode="json") if outcome.report else None,
            },
        )

    @app.get("/history")
    async def history() -> dict[str, Any]:
        stored = app.state.tracker.store.load()
        if stored is None:
            raise HTTPException(status_code=404, detail="No history recorded")
        return stored.model_dump(mode="json", by_alias=True)

    @app.get("/snapshot")
    async def snapshot() -> dict[str, Any]:
        result = await app.state.tracker.orchestrator.require()
        return result.model_dump(mode="json")

    return app
