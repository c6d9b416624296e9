"""
Punish Tracking
===============

Shared machinery for the conversion and combo computers.

A punish is a run of hits by one player on the other. Both computers open
a punish when the opponent is put in stun and record each move that
deals damage; they differ only in when the punish is considered over.

Move Attribution:
    A new move starts when damage is dealt and the attacker's action state
    differs from the one that landed the previous hit (or the action state
    counter restarted, for repeated moves like jabs). Otherwise the damage
    is added to the current move as an extra hit.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from replay_stats.models.events import PostFrameUpdate
from replay_stats.models.frame import FrameEntry
from replay_stats.models.lifecycle import PlayerIndices
from replay_stats.models.stats import MoveLanded, PunishRecord
from replay_stats.stats.common import calc_damage_taken, did_lose_stock, is_in_stun


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PunishState:
    """Per-pairing running state."""

    punish: Optional[PunishRecord] = None
    move: Optional[MoveLanded] = None
    reset_counter: int = 0
    last_hit_animation: Optional[int] = None
    prev_player: Optional[PostFrameUpdate] = None
    prev_opponent: Optional[PostFrameUpdate] = None


class PunishComputer:
    """
    Base class for punish-style computers.

    Subclasses set `name` and `record_type`, and implement
    `_advance_reset_counter`.
    """

    name = "punishes"
    record_type = PunishRecord

    def __init__(self, indices: Sequence[PlayerIndices], reset_frames: int) -> None:
        """
        Args:
            indices: Tracked pairings
            reset_frames: Frames the reset counter may reach before the
                punish ends
        """
        if reset_frames < 1:
            raise ValueError("reset_frames must be >= 1")

        self._indices = list(indices)
        self.reset_frames = reset_frames
        self._states: Dict[PlayerIndices, PunishState] = {
            pairing: PunishState() for pairing in self._indices
        }
        self._records: List[PunishRecord] = []

    def process_frame(self, frame: FrameEntry) -> None:
        for pairing in self._indices:
            player = frame.post(pairing.player_index)
            opponent = frame.post(pairing.opponent_index)
            if player is None or opponent is None:
                continue
            state = self._states[pairing]
            self._handle_punish(state, pairing, frame.frame, player, opponent)
            state.prev_player = player
            state.prev_opponent = opponent

    def _handle_punish(
        self,
        state: PunishState,
        pairing: PlayerIndices,
        frame_number: int,
        player: PostFrameUpdate,
        opponent: PostFrameUpdate,
    ) -> None:
        prev_player = state.prev_player
        prev_opponent = state.prev_opponent
        opponent_in_stun = is_in_stun(opponent.action_state_id)
        damage_taken = calc_damage_taken(opponent, prev_opponent) if prev_opponent else 0.0

        action_changed = player.action_state_id != state.last_hit_animation
        counter = player.action_state_counter or 0.0
        prev_counter = (prev_player.action_state_counter or 0.0) if prev_player else 0.0
        if action_changed or counter < prev_counter:
            state.last_hit_animation = None

        if opponent_in_stun:
            if state.punish is None:
                state.punish = self.record_type(
                    player_index=pairing.player_index,
                    opponent_index=pairing.opponent_index,
                    start_frame=frame_number,
                    start_percent=(prev_opponent.percent or 0.0) if prev_opponent else 0.0,
                    current_percent=opponent.percent or 0.0,
                )
                state.move = None
                self._records.append(state.punish)

            if damage_taken:
                if state.last_hit_animation is None:
                    state.move = MoveLanded(
                        player_index=pairing.player_index,
                        frame=frame_number,
                        move_id=player.last_attack_landed,
                    )
                    state.punish.moves.append(state.move)

                if state.move is not None:
                    state.move.hit_count += 1
                    state.move.damage += damage_taken

                # The previous frame holds the animation that actually connected
                if prev_player is not None:
                    state.last_hit_animation = prev_player.action_state_id

        if state.punish is None:
            return

        opponent_lost_stock = did_lose_stock(opponent, prev_opponent)
        if not opponent_lost_stock:
            state.punish.current_percent = opponent.percent or 0.0

        self._advance_reset_counter(state, opponent)

        should_terminate = False
        if opponent_lost_stock:
            state.punish.did_kill = True
            should_terminate = True
        if state.reset_counter > self.reset_frames:
            should_terminate = True

        if should_terminate:
            logger.debug(
                f"{self.name}: player {pairing.player_index} punish from frame "
                f"{state.punish.start_frame} ended at {frame_number} (kill={state.punish.did_kill})"
            )
            state.punish.end_frame = frame_number
            state.punish.end_percent = (prev_opponent.percent or 0.0) if prev_opponent else 0.0
            state.punish = None
            state.move = None

    def _advance_reset_counter(self, state: PunishState, opponent: PostFrameUpdate) -> None:
        raise NotImplementedError

    def fetch(self) -> List[PunishRecord]:
        return [record.model_copy(deep=True) for record in self._records]
