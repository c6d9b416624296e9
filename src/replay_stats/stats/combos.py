"""
Combo Computer
==============

Combos are strings of hits the opponent could not escape: the combo ends
once the opponent has spent the combo reset window out of hitstun, grabs,
techs, knockdowns, and death animations, or loses the stock.
"""

from typing import Sequence

from replay_stats.models.events import PostFrameUpdate
from replay_stats.models.lifecycle import PlayerIndices
from replay_stats.models.stats import ComboRecord
from replay_stats.stats.common import Timers, is_dead, is_down, is_in_stun, is_teching
from replay_stats.stats.punish import PunishComputer, PunishState


class ComboComputer(PunishComputer):
    """Punish computer that ends once the opponent escapes."""

    name = "combos"
    record_type = ComboRecord

    def __init__(
        self,
        indices: Sequence[PlayerIndices],
        reset_frames: int = Timers.COMBO_STRING_RESET_FRAMES,
    ) -> None:
        super().__init__(indices, reset_frames)

    def _advance_reset_counter(self, state: PunishState, opponent: PostFrameUpdate) -> None:
        action_state = opponent.action_state_id
        if (
            is_in_stun(action_state)
            or is_teching(action_state)
            or is_down(action_state)
            or is_dead(action_state)
        ):
            state.reset_counter = 0
        else:
            state.reset_counter += 1
