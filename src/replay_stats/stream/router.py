"""
Event Router
============

Turns raw event messages into typed payloads and hands them to the
FrameAssembler.

Message Format:
    {"type": "<event type>", "payload": {...}}

    game_start         -> FrameAssembler.on_match_configuration
    pre_frame_update   -> FrameAssembler.on_update(PRE, ...)
    post_frame_update  -> FrameAssembler.on_update(POST, ...)
    game_end           -> FrameAssembler.on_match_end

Design Rules:
    - Malformed messages are counted and logged, never raised
    - Unknown event types are counted and ignored
    - Routing is synchronous; the assembler is not thread safe
"""

import logging
from enum import Enum
from typing import Any

from pydantic import ValidationError

from replay_stats.frames.assembler import FrameAssembler
from replay_stats.models.events import (
    EventOutcome,
    GameEnd,
    GameStart,
    PostFrameUpdate,
    PreFrameUpdate,
    UpdateKind,
)


logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Event type names accepted on the wire."""

    GAME_START = "game_start"
    PRE_FRAME_UPDATE = "pre_frame_update"
    POST_FRAME_UPDATE = "post_frame_update"
    GAME_END = "game_end"


class RouteOutcome(str, Enum):
    """
    Result of routing one message.

    ACCEPTED and IGNORED mirror the assembler's answer. REJECTED means the
    message never reached the assembler.
    """

    ACCEPTED = "ACCEPTED"
    IGNORED = "IGNORED"
    REJECTED = "REJECTED"


class EventRouterMetrics:
    """Metrics for EventRouter observability."""

    __slots__ = (
        "events_received",
        "events_accepted",
        "events_ignored",
        "events_rejected",
        "unknown_types",
    )

    def __init__(self) -> None:
        self.events_received: int = 0
        self.events_accepted: int = 0
        self.events_ignored: int = 0
        self.events_rejected: int = 0
        self.unknown_types: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "events_received": self.events_received,
            "events_accepted": self.events_accepted,
            "events_ignored": self.events_ignored,
            "events_rejected": self.events_rejected,
            "unknown_types": self.unknown_types,
        }


class EventRouter:
    """
    Validates event messages and dispatches them to a FrameAssembler.

    Attributes:
        assembler: Target assembler
        metrics: Operational metrics

    Example:
        router = EventRouter(FrameAssembler())
        outcome = router.route({"type": "game_end", "payload": {}})
    """

    def __init__(self, assembler: FrameAssembler) -> None:
        self.assembler = assembler
        self.metrics = EventRouterMetrics()

    def route(self, message: Any) -> RouteOutcome:
        """
        Route a decoded JSON message.

        Args:
            message: Dict with "type" and "payload" keys

        Returns:
            RouteOutcome for the message
        """
        self.metrics.events_received += 1

        if not isinstance(message, dict):
            return self._reject(f"Event must be an object, got {type(message).__name__}")

        raw_type = message.get("type")
        payload = message.get("payload")
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            return self._reject(f"Event payload must be an object for type {raw_type!r}")

        try:
            event_type = EventType(raw_type)
        except ValueError:
            self.metrics.unknown_types += 1
            return self._reject(f"Unknown event type: {raw_type!r}")

        try:
            outcome = self._dispatch(event_type, payload)
        except ValidationError as e:
            return self._reject(
                f"Invalid {event_type.value} payload: {e.error_count()} error(s)"
            )

        if outcome is EventOutcome.ACCEPTED:
            self.metrics.events_accepted += 1
            return RouteOutcome.ACCEPTED

        self.metrics.events_ignored += 1
        return RouteOutcome.IGNORED

    def _dispatch(self, event_type: EventType, payload: dict) -> EventOutcome:
        if event_type is EventType.GAME_START:
            return self.assembler.on_match_configuration(GameStart.model_validate(payload))

        if event_type is EventType.GAME_END:
            return self.assembler.on_match_end(GameEnd.model_validate(payload))

        if event_type is EventType.PRE_FRAME_UPDATE:
            frame = self.assembler.on_update(
                UpdateKind.PRE, PreFrameUpdate.model_validate(payload)
            )
        else:
            frame = self.assembler.on_update(
                UpdateKind.POST, PostFrameUpdate.model_validate(payload)
            )
        return EventOutcome.ACCEPTED if frame is not None else EventOutcome.IGNORED

    def _reject(self, reason: str) -> RouteOutcome:
        self.metrics.events_rejected += 1
        logger.warning(reason)
        return RouteOutcome.REJECTED
