"""
Frame Assembler
===============

Single entry point for decoded replay events.

The assembler:
    - Accepts the match configuration (game start) and resolves pairings
    - Merges pre/post updates into the primary or follower frame store
    - Corrects the Zelda/Sheik character id from the first post updates
    - Forwards every primary frame to the StatsOrchestrator, which decides
      whether the frame is complete and dispatches it
    - Reports the latest safe frame and the aggregated stats

Design Rules:
    - Expected bad input (no frame number, no stage id) is ignored, not raised
    - Only primary-store frames reach the stat computers
    - Processing is synchronous; each call runs to completion
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Union

from replay_stats.frames.store import FrameStore
from replay_stats.models.events import (
    EventOutcome,
    GameEnd,
    GameStart,
    PlayerType,
    PostFrameUpdate,
    PreFrameUpdate,
    UpdateKind,
)
from replay_stats.models.frame import FrameEntry
from replay_stats.models.lifecycle import MatchPhase, PlayerIndices
from replay_stats.models.stats import ComputedStats
from replay_stats.stats.base import StatComputer
from replay_stats.stats.common import Frames
from replay_stats.stats.orchestrator import StatsOrchestrator, create_stat_computers
from replay_stats.stats.pairing import (
    PairingResolver,
    get_singles_opponent_indices,
    validate_pairings,
)


logger = logging.getLogger(__name__)


# Internal (in-game) character id -> public character id, applied while priming
CHARACTER_ID_CORRECTIONS: Dict[int, int] = {
    0x07: 0x13,  # Sheik
    0x13: 0x12,  # Zelda
}


class FrameAssembler:
    """
    Owns the frame stores, the match configuration, and the orchestrator.

    Attributes:
        phase: Current MatchPhase
        player_indices: Pairings resolved from the accepted configuration

    Example:
        assembler = FrameAssembler()

        assembler.on_match_configuration(game_start)
        for kind, payload in updates:
            assembler.on_update(kind, payload)
        assembler.on_match_end(game_end)

        stats = assembler.get_stats()
    """

    def __init__(
        self,
        pairing_resolver: PairingResolver = get_singles_opponent_indices,
        computer_factory: Optional[Callable[[Sequence[PlayerIndices]], List[StatComputer]]] = None,
    ) -> None:
        """
        Initialize the assembler.

        Args:
            pairing_resolver: Maps an accepted configuration to pairings
            computer_factory: Builds the stat computers for a pairing set;
                None uses the default computers
        """
        self._pairing_resolver = pairing_resolver
        self._computer_factory = computer_factory or create_stat_computers

        self._settings: Optional[GameStart] = None
        self._game_end: Optional[GameEnd] = None
        self._player_frames = FrameStore(base=Frames.FIRST)
        self._follower_frames = FrameStore(base=Frames.FIRST)
        self._latest_frame_index: Optional[int] = None
        self._player_indices: List[PlayerIndices] = []
        self._phase = MatchPhase.UNINITIALIZED
        self._ignored_count = 0

        self._stats = self._new_orchestrator([])

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def phase(self) -> MatchPhase:
        return self._phase

    @property
    def player_indices(self) -> List[PlayerIndices]:
        return list(self._player_indices)

    @property
    def orchestrator(self) -> StatsOrchestrator:
        return self._stats

    @property
    def ignored_count(self) -> int:
        """Events discarded as unusable."""
        return self._ignored_count

    def get_settings(self) -> Optional[GameStart]:
        return self._settings

    def get_game_end(self) -> Optional[GameEnd]:
        return self._game_end

    def get_frames(self) -> FrameStore:
        return self._player_frames

    def get_follower_frames(self) -> FrameStore:
        return self._follower_frames

    # =========================================================================
    # Event Handlers
    # =========================================================================

    def on_match_configuration(self, config: GameStart) -> EventOutcome:
        """
        Accept a game start event.

        A configuration without a stage id means the stream has not reached
        usable settings yet and is ignored. A later valid configuration
        replaces the previous one and resets all stat computers.

        Args:
            config: Game start payload

        Returns:
            ACCEPTED or IGNORED
        """
        if config.stage_id is None:
            self._ignored_count += 1
            logger.debug("Ignoring game start without stage id")
            return EventOutcome.IGNORED

        if self._settings is not None and self._latest_frame_index is not None:
            logger.warning(
                f"Match reconfigured after frame {self._latest_frame_index}; "
                f"stats collected so far are discarded"
            )

        active_players = [p for p in config.players if p.type != PlayerType.EMPTY]
        self._settings = config.model_copy(
            update={"players": [p.model_copy() for p in active_players]}
        )
        self._player_indices = validate_pairings(
            self._settings, self._pairing_resolver(self._settings)
        )
        self._stats = self._new_orchestrator(self._player_indices)

        if self._phase is not MatchPhase.ENDED:
            self._phase = MatchPhase.CONFIGURED

        logger.info(
            f"Match configured: stage={config.stage_id}, "
            f"players={[p.player_index for p in active_players]}, "
            f"pairings={len(self._player_indices)}"
        )
        return EventOutcome.ACCEPTED

    def on_match_end(self, marker: GameEnd) -> EventOutcome:
        """Record the game end marker. Frame data is left unchanged."""
        self._game_end = marker
        self._phase = MatchPhase.ENDED
        logger.info(
            f"Match ended: method={marker.game_end_method}, "
            f"last_frame={self._latest_frame_index}"
        )
        return EventOutcome.ACCEPTED

    def on_update(
        self,
        kind: UpdateKind,
        payload: Union[PreFrameUpdate, PostFrameUpdate],
    ) -> Optional[FrameEntry]:
        """
        Merge a pre or post frame update.

        Args:
            kind: PRE or POST
            payload: Update payload; frame None means ignore

        Returns:
            The (possibly still partial) frame as a read-only view, or None
            if ignored
        """
        if payload.frame is None:
            self._ignored_count += 1
            return None

        frame_number = payload.frame
        store = self._follower_frames if payload.is_follower else self._player_frames
        frame = store.write(frame_number, payload.player_index, kind, payload)
        if frame is None:
            self._ignored_count += 1
            return None

        if self._latest_frame_index is None or frame_number > self._latest_frame_index:
            self._latest_frame_index = frame_number

        if self._phase is MatchPhase.CONFIGURED:
            self._phase = MatchPhase.STREAMING

        if kind is UpdateKind.POST and frame_number <= Frames.FIRST:
            self._correct_character_id(payload)

        if not payload.is_follower:
            self._stats.process_frame(frame)

        return frame

    def _correct_character_id(self, payload: PostFrameUpdate) -> None:
        corrected = CHARACTER_ID_CORRECTIONS.get(payload.internal_character_id)
        if corrected is None or self._settings is None:
            return

        for player in self._settings.players:
            if player.player_index == payload.player_index:
                if player.character_id != corrected:
                    logger.debug(
                        f"Correcting character for player {player.player_index}: "
                        f"{player.character_id} -> {corrected}"
                    )
                player.character_id = corrected
                return

    # =========================================================================
    # Queries
    # =========================================================================

    def get_latest_frame(self) -> Optional[FrameEntry]:
        """
        Get the most recent frame that is safe to read.

        While the match is running the newest frame may still be receiving
        updates, so the one before it is returned.

        Returns:
            Frame entry, or None if that frame was never stored
        """
        frame_index = (
            self._latest_frame_index
            if self._latest_frame_index is not None
            else Frames.FIRST
        )
        index_to_use = frame_index if self._game_end is not None else frame_index - 1
        return self._player_frames.get(index_to_use)

    def get_stats(self) -> ComputedStats:
        """Aggregated stats plus whether the game end marker was seen."""
        stats = self._stats.fetch()
        stats.game_complete = self._game_end is not None
        return stats

    def _new_orchestrator(self, indices: Sequence[PlayerIndices]) -> StatsOrchestrator:
        return StatsOrchestrator(indices, computers=self._computer_factory(indices))
