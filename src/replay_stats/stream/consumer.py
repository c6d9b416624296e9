"""
Event Consumer
==============

WebSocket client for consuming decoded replay events.

This module provides the EventConsumer class which:
    - Connects to an upstream replay event streamer
    - Parses each text message as one JSON event
    - Routes events to the FrameAssembler through an EventRouter
    - Handles reconnection with a fixed backoff

Design Rules:
    - Does NOT decode the binary replay format
    - Does NOT modify payloads
    - Logs malformed messages but continues processing
    - Reconnects automatically on disconnect
    - Exposes metrics for health monitoring
"""

import asyncio
import json
import logging
from typing import Any, Optional

import websockets
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedError,
    ConnectionClosedOK,
)

from replay_stats.stream.router import EventRouter, RouteOutcome


logger = logging.getLogger(__name__)


class EventConsumerMetrics:
    """Metrics for EventConsumer observability."""

    __slots__ = (
        "messages_received",
        "reconnect_count",
        "parse_errors",
        "rejected_events",
    )

    def __init__(self) -> None:
        self.messages_received: int = 0
        self.reconnect_count: int = 0
        self.parse_errors: int = 0
        self.rejected_events: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "messages_received": self.messages_received,
            "reconnect_count": self.reconnect_count,
            "parse_errors": self.parse_errors,
            "rejected_events": self.rejected_events,
        }


class EventConsumer:
    """
    WebSocket consumer for replay events.

    Attributes:
        url: WebSocket URL to connect to
        router: EventRouter that receives parsed messages
        connected: Whether currently connected
        metrics: Operational metrics

    Example:
        consumer = EventConsumer(
            url="ws://localhost:8000/ws/events",
            router=EventRouter(assembler),
        )

        task = asyncio.create_task(consumer.run())

        # Later, stop gracefully
        await consumer.stop()
        await task
    """

    def __init__(
        self,
        url: str,
        router: EventRouter,
        reconnect_backoff_ms: int = 500,
        max_reconnect_attempts: int = 0,
    ) -> None:
        """
        Initialize event consumer.

        Args:
            url: WebSocket URL of the event streamer
            router: Router to hand parsed events to
            reconnect_backoff_ms: Backoff between reconnect attempts
            max_reconnect_attempts: Max attempts (0 = unlimited)
        """
        self.url = url
        self.router = router
        self.reconnect_backoff_ms = reconnect_backoff_ms
        self.max_reconnect_attempts = max_reconnect_attempts

        # State
        self._websocket = None
        self._connected: bool = False
        self._running: bool = False
        self._stop_event: asyncio.Event = asyncio.Event()

        self.metrics = EventConsumerMetrics()

    @property
    def connected(self) -> bool:
        """Whether currently connected to the event streamer."""
        return self._connected

    async def run(self) -> None:
        """
        Start consuming events.

        Runs indefinitely, reconnecting on disconnect.
        Call stop() to terminate gracefully.
        """
        self._running = True
        self._stop_event.clear()

        logger.info(f"EventConsumer starting, connecting to {self.url}")

        while self._running:
            try:
                await self._connect_and_consume()
            except Exception as e:
                if not self._running:
                    break

                logger.error(f"Connection error: {e}")
                self._connected = False

                if (
                    self.max_reconnect_attempts > 0
                    and self.metrics.reconnect_count >= self.max_reconnect_attempts
                ):
                    logger.error(
                        f"Max reconnect attempts ({self.max_reconnect_attempts}) exceeded"
                    )
                    break

                self.metrics.reconnect_count += 1
                backoff_sec = self.reconnect_backoff_ms / 1000.0
                logger.info(
                    f"Reconnecting in {backoff_sec:.1f}s "
                    f"(attempt {self.metrics.reconnect_count})"
                )

                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=backoff_sec)
                    break
                except asyncio.TimeoutError:
                    pass

        logger.info("EventConsumer stopped")

    async def stop(self) -> None:
        """Signal the run loop to exit and close the connection."""
        logger.info("EventConsumer stopping...")
        self._running = False
        self._stop_event.set()

        if self._websocket is not None:
            try:
                await self._websocket.close()
            except ConnectionClosed:
                pass

        self._connected = False

    async def _connect_and_consume(self) -> None:
        """Connect to WebSocket and consume messages until disconnect."""
        async with websockets.connect(
            self.url,
            ping_interval=20,
            ping_timeout=10,
            close_timeout=5,
        ) as ws:
            self._websocket = ws
            self._connected = True
            logger.info(f"Connected to event streamer: {self.url}")

            try:
                async for message in ws:
                    if not self._running:
                        break
                    self.handle_message(message)

            except ConnectionClosedOK:
                logger.info("Connection closed normally")
            except ConnectionClosedError as e:
                logger.warning(f"Connection closed with error: {e}")
                raise
            except ConnectionClosed as e:
                logger.warning(f"Connection closed: {e}")
                raise
            finally:
                self._connected = False
                self._websocket = None

    def handle_message(self, raw: Any) -> Optional[RouteOutcome]:
        """
        Parse one raw message and route it.

        Args:
            raw: Text (or UTF-8 bytes) frame from the WebSocket

        Returns:
            RouteOutcome, or None if the message could not be parsed
        """
        self.metrics.messages_received += 1

        message = self._parse_message(raw)
        if message is None:
            return None

        outcome = self.router.route(message)
        if outcome is RouteOutcome.REJECTED:
            self.metrics.rejected_events += 1
        return outcome

    def _parse_message(self, raw: Any) -> Optional[dict]:
        """
        Decode a raw WebSocket message.

        Args:
            raw: Raw JSON string or bytes

        Returns:
            Decoded object, or None on parse error
        """
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            self.metrics.parse_errors += 1
            logger.error(f"Failed to parse event JSON: {e}")
            return None

        if not isinstance(data, dict):
            self.metrics.parse_errors += 1
            logger.error(f"Event must be a JSON object, got {type(data).__name__}")
            return None

        return data
