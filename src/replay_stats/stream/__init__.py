"""
Stream Module
=============

Event ingestion for replay-stats.

This module provides:
    - EventRouter: Validates event messages and feeds the FrameAssembler
    - EventConsumer: WebSocket client with reconnection

Example:
    from replay_stats.frames import FrameAssembler
    from replay_stats.stream import EventConsumer, EventRouter

    router = EventRouter(FrameAssembler())
    consumer = EventConsumer(
        url="ws://localhost:8000/ws/events",
        router=router,
        reconnect_backoff_ms=500,
    )

    task = asyncio.create_task(consumer.run())
"""

from replay_stats.stream.router import (
    EventRouter,
    EventRouterMetrics,
    EventType,
    RouteOutcome,
)
from replay_stats.stream.consumer import EventConsumer, EventConsumerMetrics


__all__ = [
    "EventConsumer",
    "EventConsumerMetrics",
    "EventRouter",
    "EventRouterMetrics",
    "EventType",
    "RouteOutcome",
]
