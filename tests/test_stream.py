"""
Stream Tests
============

Tests for event routing and the WebSocket consumer's message handling.
"""

import asyncio
import json

import pytest

from replay_stats.frames import FrameAssembler
from replay_stats.models.lifecycle import MatchPhase
from replay_stats.stream import EventConsumer, EventRouter, RouteOutcome


GAME_START = {
    "type": "game_start",
    "payload": {
        "stage_id": 3,
        "players": [
            {"player_index": 0, "character_id": 9},
            {"player_index": 1, "character_id": 2},
            {"player_index": 2, "type": 3},
        ],
    },
}


def post_message(frame, player_index, **fields):
    return {
        "type": "post_frame_update",
        "payload": {"frame": frame, "player_index": player_index, **fields},
    }


@pytest.fixture
def router():
    return EventRouter(FrameAssembler())


class TestEventRouter:
    """Tests for EventRouter.route."""

    def test_game_start(self, router):
        assert router.route(GAME_START) is RouteOutcome.ACCEPTED
        assert router.assembler.phase is MatchPhase.CONFIGURED
        assert len(router.assembler.player_indices) == 2

    def test_game_start_without_stage(self, router):
        outcome = router.route({"type": "game_start", "payload": {"players": []}})

        assert outcome is RouteOutcome.IGNORED
        assert router.metrics.events_ignored == 1

    def test_frame_updates(self, router):
        router.route(GAME_START)
        outcomes = [
            router.route(post_message(-123, 0, stocks_remaining=4)),
            router.route({"type": "pre_frame_update", "payload": {"frame": -123, "player_index": 1}}),
            router.route(post_message(-123, 1, stocks_remaining=4)),
        ]

        assert outcomes == [RouteOutcome.ACCEPTED] * 3
        assert router.assembler.orchestrator.dispatched_count == 1
        assert router.assembler.phase is MatchPhase.STREAMING

    def test_update_without_frame(self, router):
        assert router.route(post_message(None, 0)) is RouteOutcome.IGNORED

    def test_game_end(self, router):
        assert router.route({"type": "game_end", "payload": {"game_end_method": 2}}) is RouteOutcome.ACCEPTED
        assert router.assembler.get_game_end().game_end_method == 2

    def test_game_end_without_payload(self, router):
        assert router.route({"type": "game_end"}) is RouteOutcome.ACCEPTED

    def test_unknown_type(self, router):
        outcome = router.route({"type": "item_update", "payload": {}})

        assert outcome is RouteOutcome.REJECTED
        assert router.metrics.unknown_types == 1
        assert router.metrics.events_rejected == 1

    @pytest.mark.parametrize(
        "message",
        [
            [],
            "game_start",
            {"type": "game_start", "payload": [1, 2]},
            post_message(0, 9),
            {"type": "post_frame_update", "payload": {"frame": 0}},
        ],
    )
    def test_malformed_messages(self, router, message):
        assert router.route(message) is RouteOutcome.REJECTED
        assert router.metrics.events_rejected == 1

    def test_metrics(self, router):
        router.route(GAME_START)
        router.route(post_message(None, 0))
        router.route({"type": "nope"})

        assert router.metrics.to_dict() == {
            "events_received": 3,
            "events_accepted": 1,
            "events_ignored": 1,
            "events_rejected": 1,
            "unknown_types": 1,
        }


class TestEventConsumer:
    """Tests for EventConsumer message handling."""

    @pytest.fixture
    def consumer(self, router):
        return EventConsumer(url="ws://127.0.0.1:9/ws/events", router=router)

    def test_initial_state(self, consumer):
        assert consumer.connected is False
        assert consumer.metrics.to_dict() == {
            "messages_received": 0,
            "reconnect_count": 0,
            "parse_errors": 0,
            "rejected_events": 0,
        }

    def test_handles_text_message(self, consumer):
        assert consumer.handle_message(json.dumps(GAME_START)) is RouteOutcome.ACCEPTED
        assert consumer.router.assembler.phase is MatchPhase.CONFIGURED

    def test_handles_bytes_message(self, consumer):
        raw = json.dumps(post_message(5, 0)).encode("utf-8")

        assert consumer.handle_message(raw) is RouteOutcome.ACCEPTED

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]", "42"])
    def test_parse_errors(self, consumer, raw):
        assert consumer.handle_message(raw) is None
        assert consumer.metrics.parse_errors == 1
        assert consumer.metrics.messages_received == 1

    def test_rejected_events_counted(self, consumer):
        consumer.handle_message(json.dumps({"type": "nope"}))

        assert consumer.metrics.rejected_events == 1

    def test_gives_up_after_max_attempts(self, router):
        """An unreachable streamer is retried up to the configured limit."""
        consumer = EventConsumer(
            url="ws://127.0.0.1:9/ws/events",
            router=router,
            reconnect_backoff_ms=100,
            max_reconnect_attempts=1,
        )

        asyncio.run(asyncio.wait_for(consumer.run(), timeout=10.0))

        assert consumer.metrics.reconnect_count == 1
        assert consumer.connected is False
