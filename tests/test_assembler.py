"""
Frame Assembler Tests
=====================

Tests for configuration handling, frame merging, dispatch gating, the
character correction, and latest-frame reporting.
"""

import pytest

from replay_stats.frames.assembler import FrameAssembler
from replay_stats.models.events import EventOutcome, GameEnd, GameStart, UpdateKind
from replay_stats.models.lifecycle import MatchPhase, PlayerIndices
from replay_stats.stats.common import Frames


@pytest.fixture
def assembler(recording_factory):
    """Assembler whose stat computers record dispatched frame numbers."""
    return FrameAssembler(computer_factory=recording_factory)


@pytest.fixture
def configured(assembler, game_start):
    assembler.on_match_configuration(game_start)
    return assembler


def feed_posts(assembler, make_post, frame, player_indices=(0, 1), **fields):
    for player_index in player_indices:
        assembler.on_update(UpdateKind.POST, make_post(frame, player_index, **fields))


class TestConfiguration:
    """Tests for on_match_configuration."""

    def test_missing_stage_is_ignored(self, assembler):
        """A configuration without a stage id changes nothing."""
        outcome = assembler.on_match_configuration(GameStart(players=[]))

        assert outcome is EventOutcome.IGNORED
        assert assembler.get_settings() is None
        assert assembler.phase is MatchPhase.UNINITIALIZED
        assert assembler.ignored_count == 1

    def test_empty_slots_are_dropped(self, assembler, game_start):
        """Only active players remain in the accepted settings."""
        outcome = assembler.on_match_configuration(game_start)

        assert outcome is EventOutcome.ACCEPTED
        assert [p.player_index for p in assembler.get_settings().players] == [0, 1]
        assert assembler.player_indices == [
            PlayerIndices(player_index=0, opponent_index=1),
            PlayerIndices(player_index=1, opponent_index=0),
        ]
        assert assembler.phase is MatchPhase.CONFIGURED

    def test_incoming_settings_not_mutated(self, assembler, game_start, make_post):
        """The correction edits the stored copy, not the caller's object."""
        assembler.on_match_configuration(game_start)
        assembler.on_update(
            UpdateKind.POST, make_post(Frames.FIRST, 0, internal_character_id=0x07)
        )

        assert game_start.players[0].character_id == 0x12
        assert len(game_start.players) == 4

    def test_non_singles_disables_dispatch(self, assembler, make_post):
        """Three active players resolve to no pairings."""
        config = GameStart.model_validate({
            "stage_id": 8,
            "players": [{"player_index": i} for i in range(3)],
        })
        assembler.on_match_configuration(config)
        feed_posts(assembler, make_post, 0, player_indices=(0, 1, 2))

        assert assembler.player_indices == []
        assert assembler.orchestrator.dispatched_count == 0
        assert assembler.get_stats().last_frame == 0

    def test_custom_pairing_resolver(self, recording_factory, game_start):
        """The resolver result is used, minus pairings on inactive slots."""
        def resolver(settings):
            return [
                PlayerIndices(player_index=0, opponent_index=1),
                PlayerIndices(player_index=0, opponent_index=3),
            ]

        assembler = FrameAssembler(pairing_resolver=resolver, computer_factory=recording_factory)
        assembler.on_match_configuration(game_start)

        assert assembler.player_indices == [PlayerIndices(player_index=0, opponent_index=1)]

    def test_reconfiguration_resets_computers(self, configured, recording_factory, game_start, make_post):
        """A second configuration builds fresh computers; frames are kept."""
        feed_posts(configured, make_post, 0)
        first = recording_factory.last

        configured.on_match_configuration(game_start)
        feed_posts(configured, make_post, 1)

        assert first.frames == [0]
        assert recording_factory.last is not first
        assert recording_factory.last.frames == [1]
        assert 0 in configured.get_frames()


class TestPhases:
    """Tests for MatchPhase transitions."""

    def test_full_lifecycle(self, assembler, game_start, make_post):
        """UNINITIALIZED -> CONFIGURED -> STREAMING -> ENDED."""
        assert assembler.phase is MatchPhase.UNINITIALIZED

        assembler.on_match_configuration(game_start)
        assert assembler.phase is MatchPhase.CONFIGURED

        feed_posts(assembler, make_post, Frames.FIRST)
        assert assembler.phase is MatchPhase.STREAMING

        assert assembler.on_match_end(GameEnd(game_end_method=2)) is EventOutcome.ACCEPTED
        assert assembler.phase is MatchPhase.ENDED

    def test_updates_before_configuration(self, assembler, make_post, recording_factory):
        """Updates are stored but nothing is dispatched before configuration."""
        feed_posts(assembler, make_post, 0)

        assert assembler.phase is MatchPhase.UNINITIALIZED
        assert 0 in assembler.get_frames()
        assert recording_factory.last.frames == []

    def test_configuration_after_end_keeps_ended(self, assembler, game_start):
        """A late configuration does not reopen an ended match."""
        assembler.on_match_end(GameEnd())
        assembler.on_match_configuration(game_start)

        assert assembler.phase is MatchPhase.ENDED


class TestUpdates:
    """Tests for on_update merging and dispatch."""

    def test_missing_frame_is_ignored(self, configured, make_post):
        """An update without a frame number stores nothing."""
        result = configured.on_update(UpdateKind.POST, make_post(None, 0))

        assert result is None
        assert len(configured.get_frames()) == 0
        assert configured.get_stats().last_frame is None
        assert configured.phase is MatchPhase.CONFIGURED

    def test_returns_partial_frame(self, configured, make_post):
        """The returned entry reflects what has arrived so far."""
        entry = configured.on_update(UpdateKind.POST, make_post(4, 0))

        assert entry.frame == 4
        assert entry.post(0) is not None
        assert entry.post(1) is None

    def test_no_double_dispatch(self, configured, make_post, recording_factory):
        """A duplicate post for a completed frame is not dispatched again."""
        feed_posts(configured, make_post, 10)
        configured.on_update(UpdateKind.POST, make_post(10, 1, percent=5.0))
        configured.on_update(UpdateKind.POST, make_post(10, 0, percent=5.0))

        assert recording_factory.last.frames == [10]
        assert configured.get_frames().get(10).post(1).percent == 5.0

    def test_all_or_nothing_gate(self, configured, make_post, make_pre, recording_factory):
        """One missing opponent post blocks the frame for every pairing."""
        configured.on_update(UpdateKind.POST, make_post(10, 0))
        configured.on_update(UpdateKind.PRE, make_pre(10, 1))

        assert recording_factory.last.frames == []

        configured.on_update(UpdateKind.POST, make_post(10, 1))
        assert recording_factory.last.frames == [10]

    def test_follower_updates_are_separate(self, configured, make_post, recording_factory):
        """Follower updates never complete a primary frame."""
        configured.on_update(UpdateKind.POST, make_post(3, 0))
        configured.on_update(UpdateKind.POST, make_post(3, 1, is_follower=True))

        assert configured.get_frames().get(3).post(1) is None
        assert configured.get_follower_frames().get(3).post(1) is not None
        assert recording_factory.last.frames == []

    def test_last_frame_is_monotonic(self, configured, make_post):
        """An older frame arriving late does not lower the last frame."""
        configured.on_update(UpdateKind.POST, make_post(50, 0))
        configured.on_update(UpdateKind.POST, make_post(20, 0))

        assert configured.get_stats().last_frame == 50
        assert configured.get_frames().latest_index == 50

    def test_playable_count_floor(self, configured, make_post):
        """No playable frames before the countdown ends."""
        feed_posts(configured, make_post, Frames.FIRST_PLAYABLE - 10)

        assert configured.get_stats().playable_frame_count == 0

    def test_dispatch_then_incomplete_frame(self, configured, make_post, recording_factory):
        """Frame -2 completes and dispatches; frame 200 with one post does not."""
        feed_posts(configured, make_post, -2)

        assert recording_factory.last.frames == [-2]
        assert configured.get_stats().playable_frame_count == 0

        configured.on_update(UpdateKind.POST, make_post(200, 0))

        stats = configured.get_stats()
        assert recording_factory.last.frames == [-2]
        assert stats.last_frame == 200
        assert stats.playable_frame_count == 200 - Frames.FIRST_PLAYABLE

    def test_far_frame_number_is_ignored(self, configured, make_post, recording_factory):
        """A frame far outside the stored range is dropped without side effects."""
        feed_posts(configured, make_post, 10)

        result = configured.on_update(UpdateKind.POST, make_post(50_000_000, 0))

        assert result is None
        assert configured.ignored_count == 1
        assert configured.get_stats().last_frame == 10
        assert configured.get_frames().latest_index == 10
        assert recording_factory.last.frames == [10]

    def test_returned_frame_is_read_only(self, configured, make_post):
        """Callers cannot edit stored frames through the returned entry."""
        entry = configured.on_update(UpdateKind.POST, make_post(4, 0))

        with pytest.raises(TypeError):
            entry.players[1] = entry.players[0]

        assert configured.get_frames().get(4).post(1) is None

    def test_countdown_frames_are_not_playable(self, configured, make_post):
        """Every countdown frame up to -1 leaves the playable count at 0."""
        for frame in range(-3, 0):
            feed_posts(configured, make_post, frame)
            assert configured.get_stats().playable_frame_count == 0

        feed_posts(configured, make_post, 1)
        assert configured.get_stats().playable_frame_count == 1


class TestCharacterCorrection:
    """Tests for the Zelda/Sheik correction during priming."""

    def character_of(self, assembler, player_index):
        for player in assembler.get_settings().players:
            if player.player_index == player_index:
                return player.character_id
        return None

    def test_sheik_correction_at_first_frame(self, configured, make_post):
        """Internal Sheik at the first frame sets public Sheik."""
        configured.on_update(
            UpdateKind.POST, make_post(Frames.FIRST, 0, internal_character_id=0x07)
        )

        assert self.character_of(configured, 0) == 0x13

    def test_zelda_correction(self, configured, make_post):
        """Internal Zelda at the first frame sets public Zelda."""
        configured.on_update(
            UpdateKind.POST, make_post(Frames.FIRST, 1, internal_character_id=0x13)
        )

        assert self.character_of(configured, 1) == 0x12

    def test_no_correction_after_priming(self, configured, make_post):
        """The same code after the first frame is left alone."""
        configured.on_update(
            UpdateKind.POST, make_post(Frames.FIRST + 1, 0, internal_character_id=0x07)
        )

        assert self.character_of(configured, 0) == 0x12

    def test_no_correction_from_pre_update(self, configured, make_pre):
        """Pre updates never change the character."""
        configured.on_update(UpdateKind.PRE, make_pre(Frames.FIRST, 0))

        assert self.character_of(configured, 0) == 0x12

    def test_unknown_slot_is_skipped(self, configured, make_post):
        """A correction for a slot outside the settings does nothing."""
        configured.on_update(
            UpdateKind.POST, make_post(Frames.FIRST, 3, internal_character_id=0x07)
        )

        assert [p.player_index for p in configured.get_settings().players] == [0, 1]

    def test_without_settings(self, assembler, make_post):
        """Before configuration the correction is a no-op."""
        entry = assembler.on_update(
            UpdateKind.POST, make_post(Frames.FIRST, 0, internal_character_id=0x07)
        )

        assert entry is not None
        assert assembler.get_settings() is None


class TestLatestFrame:
    """Tests for get_latest_frame."""

    def test_empty_store(self, assembler):
        """No frames means no latest frame, ended or not."""
        assert assembler.get_latest_frame() is None

        assembler.on_match_end(GameEnd())
        assert assembler.get_latest_frame() is None

    def test_in_progress_returns_previous_frame(self, configured, make_post):
        """While running, the newest frame is still filling in."""
        for frame in range(Frames.FIRST, Frames.FIRST + 4):
            feed_posts(configured, make_post, frame)

        assert configured.get_latest_frame().frame == Frames.FIRST + 2

    def test_ended_returns_newest_frame(self, configured, make_post):
        """After the end marker the newest frame is final."""
        for frame in range(Frames.FIRST, Frames.FIRST + 4):
            feed_posts(configured, make_post, frame)
        configured.on_match_end(GameEnd())

        assert configured.get_latest_frame().frame == Frames.FIRST + 3

    def test_single_frame_in_progress(self, configured, make_post):
        """One frame stored and not ended: the frame before it is absent."""
        feed_posts(configured, make_post, Frames.FIRST)

        assert configured.get_latest_frame() is None


class TestStats:
    """Tests for get_stats."""

    def test_neutral_aggregate_before_configuration(self):
        """Stats before configuration are empty, not an error."""
        stats = FrameAssembler().get_stats()

        assert stats.last_frame is None
        assert stats.playable_frame_count == 0
        assert stats.game_complete is False
        assert stats.overall == []
        assert set(stats.outputs) == {"actions", "conversions", "combos", "stocks", "inputs"}
        assert all(output == [] for output in stats.outputs.values())

    def test_game_complete_flag(self, configured):
        """game_complete follows the end marker."""
        assert configured.get_stats().game_complete is False

        configured.on_match_end(GameEnd())
        assert configured.get_stats().game_complete is True

    def test_default_computers_produce_overall(self, game_start, make_post):
        """With the default computers every pairing gets an overall entry."""
        assembler = FrameAssembler()
        assembler.on_match_configuration(game_start)
        for frame in range(Frames.FIRST, Frames.FIRST + 5):
            feed_posts(assembler, make_post, frame)

        stats = assembler.get_stats()

        assert [o.player_index for o in stats.overall] == [0, 1]
        assert len(stats.output("stocks")) == 2
