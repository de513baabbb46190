"""HTTP API exposing the validation engine."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException

from smart_commands.engine.orchestrator import CommandEngine

logger = logging.getLogger(__name__)


def create_app(engine: CommandEngine) -> FastAPI:
    """Build the API around an engine; the engine is closed on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await engine.aclose()

    app = FastAPI(title="Smart Commands API", lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict:
        state = engine.breaker_state()
        return {
            "status": "degraded" if state.open else "healthy",
            "ai_failures": state.failures,
            "cache_size": engine.cache_size(),
        }

    @app.post("/validate")
    async def validate(request: dict) -> dict:
        command = request.get("command", "")
        if not isinstance(command, str):
            raise HTTPException(status_code=400, detail="command must be a string")

        suggestion = await engine.resolve(command)
        return suggestion.to_dict()

    @app.post("/smart")
    async def smart(request: dict) -> dict:
        task = request.get("task", "")
        if not task or not isinstance(task, str):
            raise HTTPException(status_code=400, detail="task is required")

        suggestion = await engine.resolve_smart_command(task)
        return suggestion.to_dict()

    @app.delete("/cache")
    async def clear_cache() -> dict:
        cleared = engine.cache_size()
        engine.clear_cache()
        logger.info(f"Cleared {cleared} cached correction(s) via API")
        return {"cleared": cleared}

    return app
