"""
Action Counts Computer
======================

Counts techniques and common actions from post-frame action states.

Detection:
    - Roll, spot dodge, air dodge, ledge grab: entering the state
    - Dash dance: dash, turn, dash on consecutive frames
    - Grab: success when a grab moves into its pull state, whiff otherwise
    - L-cancel: the landing frame's reported status
    - Wavedash/waveland: entering special landing straight from an air dodge
      or a controlled jump. A knee bend in the last 8 frames makes it a
      wavedash, otherwise a waveland. The air dodge used is not counted
      as an air dodge.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Sequence

from replay_stats.models.frame import FrameEntry
from replay_stats.models.lifecycle import PlayerIndices
from replay_stats.models.stats import ActionCounts
from replay_stats.stats.common import LCancelStatus, State


WAVEDASH_WINDOW_FRAMES = 8

_GRAB_STATES = (State.GRAB, State.DASH_GRAB)
_GRAB_PULL_STATES = (State.GRAB_PULL, State.DASH_GRAB_PULL)


@dataclass(slots=True)
class _ActionState:
    counts: ActionCounts
    animations: Deque[Optional[int]] = field(
        default_factory=lambda: deque(maxlen=WAVEDASH_WINDOW_FRAMES)
    )


def _is_wavedash_initiation(state: Optional[int]) -> bool:
    if state is None:
        return False
    if state == State.AIR_DODGE:
        return True
    return State.CONTROLLED_JUMP_START <= state <= State.CONTROLLED_JUMP_END


class ActionsComputer:
    """Technique counter, one ActionCounts per tracked player."""

    name = "actions"

    def __init__(self, indices: Sequence[PlayerIndices]) -> None:
        self._indices = list(indices)
        self._states: Dict[PlayerIndices, _ActionState] = {
            pairing: _ActionState(
                counts=ActionCounts(
                    player_index=pairing.player_index,
                    opponent_index=pairing.opponent_index,
                )
            )
            for pairing in self._indices
        }

    def process_frame(self, frame: FrameEntry) -> None:
        for pairing in self._indices:
            post = frame.post(pairing.player_index)
            if post is None:
                continue
            state = self._states[pairing]
            state.animations.append(post.action_state_id)
            self._handle_action_compute(state)

            if post.l_cancel_status == LCancelStatus.SUCCESS:
                state.counts.l_cancel_success_count += 1
            elif post.l_cancel_status == LCancelStatus.FAILURE:
                state.counts.l_cancel_fail_count += 1

    def _handle_action_compute(self, state: _ActionState) -> None:
        animations = list(state.animations)
        counts = state.counts
        current = animations[-1]
        prev = animations[-2] if len(animations) >= 2 else None
        prev_prev = animations[-3] if len(animations) >= 3 else None

        did_start_action = current != prev

        if (
            current == State.DASH
            and prev == State.TURN
            and prev_prev == State.DASH
        ):
            counts.dash_dance_count += 1

        if did_start_action:
            if current in (State.ROLL_FORWARD, State.ROLL_BACKWARD):
                counts.roll_count += 1
            elif current == State.SPOT_DODGE:
                counts.spot_dodge_count += 1
            elif current == State.AIR_DODGE:
                counts.air_dodge_count += 1
            elif current == State.CLIFF_CATCH:
                counts.ledgegrab_count += 1

            if prev in _GRAB_STATES:
                if current in _GRAB_PULL_STATES:
                    counts.grab_success_count += 1
                else:
                    counts.grab_fail_count += 1

        self._handle_wavedash(counts, animations, current, prev)

    def _handle_wavedash(
        self,
        counts: ActionCounts,
        animations: List[Optional[int]],
        current: Optional[int],
        prev: Optional[int],
    ) -> None:
        if current != State.LANDING_FALL_SPECIAL or not _is_wavedash_initiation(prev):
            return

        recent = set(animations)
        # Only air dodge and landing in the window: a late air dodge, not a wavedash
        if recent == {State.AIR_DODGE, State.LANDING_FALL_SPECIAL}:
            return

        if State.AIR_DODGE in recent:
            counts.air_dodge_count -= 1

        if State.KNEE_BEND in recent:
            counts.wavedash_count += 1
        else:
            counts.waveland_count += 1

    def fetch(self) -> List[ActionCounts]:
        return [
            self._states[pairing].counts.model_copy(deep=True)
            for pairing in self._indices
        ]
