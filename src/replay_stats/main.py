"""
replay-stats Main Application
=============================

FastAPI entry point for the replay frame assembly and stats service.

Events reach the FrameAssembler either from the optional WebSocket consumer
(stream.enabled) or from POST /events. Both go through one EventRouter.

Endpoints:
    GET  /              - Service information
    GET  /health        - Liveness check (is process alive?)
    GET  /ready         - Readiness check (match configured or stream connected?)
    GET  /metrics       - Assembler, router, consumer and computer metrics
    GET  /stats         - Current aggregated stats
    GET  /frames/latest - Latest frame that is safe to read
    POST /events        - Route one event or a list of events
    POST /reset         - Drop all match state and start over
"""

import asyncio
import functools
import json
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from replay_stats.config import settings
from replay_stats.frames import FrameAssembler
from replay_stats.models.lifecycle import MatchPhase
from replay_stats.stats import create_stat_computers
from replay_stats.stream import EventConsumer, EventRouter


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_assembler: Optional[FrameAssembler] = None
_router: Optional[EventRouter] = None
_event_consumer: Optional[EventConsumer] = None
_consumer_task: Optional[asyncio.Task] = None

_startup_time: float = 0.0
_reset_count: int = 0


# =============================================================================
# Getters
# =============================================================================

def get_assembler() -> Optional[FrameAssembler]:
    return _assembler

def get_router() -> Optional[EventRouter]:
    return _router

def get_event_consumer() -> Optional[EventConsumer]:
    return _event_consumer


# =============================================================================
# Assembler Factory
# =============================================================================

def create_assembler() -> FrameAssembler:
    """
    Create a frame assembler wired with the configured stat computers.

    Fails fast on an unknown computer name in the configuration.
    """
    factory = functools.partial(
        create_stat_computers,
        names=settings.stats.computers,
        punish_reset_frames=settings.stats.punish_reset_frames,
        combo_string_reset_frames=settings.stats.combo_string_reset_frames,
    )
    # Validate names before the first configuration arrives
    factory([])

    logger.info(f"Using stat computers: {settings.stats.computers}")
    return FrameAssembler(computer_factory=factory)


def _reset_pipeline() -> None:
    """Replace the assembler and point the router at the new one."""
    global _assembler, _router

    _assembler = create_assembler()
    if _router is None:
        _router = EventRouter(_assembler)
    else:
        _router.assembler = _assembler


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager with graceful shutdown."""
    global _router, _event_consumer, _consumer_task, _startup_time

    # Startup
    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")

    _router = None
    _reset_pipeline()

    if settings.stream.enabled:
        logger.info(f"Stream URL: {settings.stream.url}")
        _event_consumer = EventConsumer(
            url=settings.stream.url,
            router=_router,
            reconnect_backoff_ms=settings.stream.reconnect_backoff_ms,
            max_reconnect_attempts=settings.stream.max_reconnect_attempts,
        )
        _consumer_task = asyncio.create_task(
            _event_consumer.run(),
            name="event_consumer"
        )
    else:
        logger.info("Stream consumer disabled, accepting events over HTTP only")

    yield

    # Shutdown
    logger.info("Shutting down gracefully...")

    if _event_consumer:
        await _event_consumer.stop()

    if _consumer_task:
        try:
            await asyncio.wait_for(_consumer_task, timeout=5.0)
        except asyncio.TimeoutError:
            _consumer_task.cancel()
            try:
                await _consumer_task
            except asyncio.CancelledError:
                pass

    _event_consumer = None
    _consumer_task = None
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="replay-stats",
    description="Replay frame assembly and incremental stat computation",
    version=settings.service.version,
    lifespan=lifespan,
)


def _not_initialized() -> JSONResponse:
    return JSONResponse({"error": "Service not initialized"}, status_code=503)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": settings.service.name,
        "version": settings.service.version,
        "status": "running",
        "stream_enabled": settings.stream.enabled,
        "computers": settings.stats.computers,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """
    Liveness check - is the process alive?

    Always returns 200 if the service is running.
    """
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/ready")
async def ready() -> JSONResponse:
    """
    Readiness check - is the service ready to handle requests?

    Returns 200 once a match is configured or the stream is connected.
    Returns 503 otherwise.
    """
    assembler = get_assembler()
    consumer = get_event_consumer()

    stream_connected = consumer.connected if consumer else False
    phase = assembler.phase if assembler else MatchPhase.UNINITIALIZED
    match_configured = phase is not MatchPhase.UNINITIALIZED

    body = {
        "stream_connected": stream_connected,
        "match_configured": match_configured,
        "phase": phase.value,
    }
    if assembler is not None and (stream_connected or match_configured):
        return JSONResponse({"status": "ready", **body})
    return JSONResponse({"status": "not_ready", **body}, status_code=503)


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Detailed metrics for observability."""
    assembler = get_assembler()
    router = get_router()
    consumer = get_event_consumer()

    assembler_metrics = {}
    if assembler:
        orchestrator = assembler.orchestrator
        assembler_metrics = {
            "phase": assembler.phase.value,
            "ignored_events": assembler.ignored_count,
            "pairings": len(assembler.player_indices),
            "frames": assembler.get_frames().metrics(),
            "follower_frames": assembler.get_follower_frames().metrics(),
            "last_frame": orchestrator.last_frame,
            "dispatched_frames": orchestrator.dispatched_count,
            "computer_failures": orchestrator.failure_counts,
        }

    stream_metrics = {}
    if consumer:
        stream_metrics = {
            "stream_connected": consumer.connected,
            **consumer.metrics.to_dict(),
        }

    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "reset_count": _reset_count,
        "router": router.metrics.to_dict() if router else {},
        **assembler_metrics,
        **stream_metrics,
    })


@app.get("/stats")
async def stats() -> JSONResponse:
    """Get the current aggregated stats."""
    assembler = get_assembler()
    if assembler is None:
        return _not_initialized()

    return JSONResponse(assembler.get_stats().model_dump(mode="json"))


@app.get("/frames/latest")
async def latest_frame() -> JSONResponse:
    """Get the latest frame that is safe to read."""
    assembler = get_assembler()
    if assembler is None:
        return _not_initialized()

    frame = assembler.get_latest_frame()
    if frame is None:
        return JSONResponse({"error": "No frame available yet"}, status_code=404)

    return JSONResponse(frame.to_dict())


@app.post("/events")
async def post_events(request: Request) -> JSONResponse:
    """
    Route one event object or a list of event objects.

    Returns one outcome per event, in order.
    """
    router = get_router()
    if router is None:
        return _not_initialized()

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Rejected /events body: {e}")
        return JSONResponse({"error": "Body must be JSON"}, status_code=400)

    events = body if isinstance(body, list) else [body]
    outcomes = [router.route(event).value for event in events]

    return JSONResponse({
        "outcomes": outcomes,
        "phase": router.assembler.phase.value,
    })


@app.post("/reset")
async def reset() -> JSONResponse:
    """Drop all match state and start over with a fresh assembler."""
    global _reset_count

    if get_router() is None:
        return _not_initialized()

    _reset_pipeline()
    _reset_count += 1
    logger.info(f"Pipeline reset (count={_reset_count})")

    return JSONResponse({"status": "reset", "reset_count": _reset_count})


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    # Cloud Run uses PORT env var
    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "replay_stats.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )
