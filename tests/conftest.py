"""
Test Configuration
==================

Pytest fixtures and test configuration for replay-stats.
"""

import pytest


@pytest.fixture
def game_start():
    """Provide a singles GameStart with two empty slots."""
    from replay_stats.models.events import GameStart

    return GameStart.model_validate({
        "stage_id": 31,
        "players": [
            {"player_index": 0, "port": 1, "type": 0, "character_id": 0x12, "start_stocks": 4},
            {"player_index": 1, "port": 2, "type": 0, "character_id": 0x02, "start_stocks": 4},
            {"player_index": 2, "port": 3, "type": 3},
            {"player_index": 3, "port": 4, "type": 3},
        ],
    })


@pytest.fixture
def make_post():
    """Factory for PostFrameUpdate payloads with neutral defaults."""
    from replay_stats.models.events import PostFrameUpdate

    def _make(frame, player_index, **fields):
        values = {
            "frame": frame,
            "player_index": player_index,
            "internal_character_id": 0x02,
            "action_state_id": 0x0E,
            "percent": 0.0,
            "stocks_remaining": 4,
            "action_state_counter": 0.0,
        }
        values.update(fields)
        return PostFrameUpdate(**values)

    return _make


@pytest.fixture
def make_pre():
    """Factory for PreFrameUpdate payloads with neutral defaults."""
    from replay_stats.models.events import PreFrameUpdate

    def _make(frame, player_index, **fields):
        return PreFrameUpdate(frame=frame, player_index=player_index, **fields)

    return _make


@pytest.fixture
def singles_indices():
    """Both pairings of a port 1 vs port 2 singles match."""
    from replay_stats.models.lifecycle import PlayerIndices

    return [
        PlayerIndices(player_index=0, opponent_index=1),
        PlayerIndices(player_index=1, opponent_index=0),
    ]


@pytest.fixture
def frame_builder(make_post, make_pre):
    """
    Build completed FrameEntry objects directly, bypassing the assembler.

    Usage: frame_builder(frame, {0: {...post fields}, 1: {...}}, pre={0: {...}})
    """
    from replay_stats.models.events import UpdateKind
    from replay_stats.models.frame import FrameEntry

    def _build(frame, posts, pre=None):
        entry = FrameEntry(frame=frame)
        for player_index, fields in posts.items():
            entry.set(player_index, UpdateKind.POST, make_post(frame, player_index, **fields))
        for player_index, fields in (pre or {}).items():
            entry.set(player_index, UpdateKind.PRE, make_pre(frame, player_index, **fields))
        return entry

    return _build


class RecordingComputer:
    """Stat computer that records every frame number it receives."""

    def __init__(self, name="recording", fail_on=None):
        self.name = name
        self.frames = []
        self.fail_on = fail_on

    def process_frame(self, frame):
        if self.fail_on is not None and frame.frame == self.fail_on:
            raise RuntimeError(f"boom at {frame.frame}")
        self.frames.append(frame.frame)

    def fetch(self):
        return list(self.frames)


@pytest.fixture
def recording_factory():
    """
    Computer factory that builds one RecordingComputer per configuration.

    The most recently built computer is available as `factory.last`.
    """

    class _Factory:
        def __init__(self):
            self.built = []

        def __call__(self, indices):
            computer = RecordingComputer()
            self.built.append(computer)
            return [computer]

        @property
        def last(self):
            return self.built[-1]

    return _Factory()


@pytest.fixture
def recording_computer():
    """The RecordingComputer class, for tests that build their own."""
    return RecordingComputer
