"""
Conversion Computer
===================

Conversions (punishes) measure what a player got out of an opening: every
hit from the opening until the opponent has been back in control for the
punish reset window, or loses the stock.

Opening Types (computed on the copies fetch returns; stored records stay
"unknown"):
    trade:           another conversion started on the same frame
    counter-attack:  the attacker was still being punished when it started
    neutral-win:     anything else
"""

from itertools import groupby
from typing import List, Sequence

from replay_stats.models.events import PostFrameUpdate
from replay_stats.models.lifecycle import PlayerIndices
from replay_stats.models.stats import ConversionRecord
from replay_stats.stats.common import Timers, is_in_control, is_in_stun
from replay_stats.stats.punish import PunishComputer, PunishState


class ConversionComputer(PunishComputer):
    """Punish computer that ends once the opponent regains control."""

    name = "conversions"
    record_type = ConversionRecord

    def __init__(
        self,
        indices: Sequence[PlayerIndices],
        reset_frames: int = Timers.PUNISH_RESET_FRAMES,
    ) -> None:
        super().__init__(indices, reset_frames)

    def _advance_reset_counter(self, state: PunishState, opponent: PostFrameUpdate) -> None:
        if is_in_stun(opponent.action_state_id):
            state.reset_counter = 0

        # Counting starts once the opponent is in control and then runs until
        # the next hit, regardless of what the opponent does in between
        should_start = state.reset_counter == 0 and is_in_control(opponent.action_state_id)
        should_continue = state.reset_counter > 0
        if should_start or should_continue:
            state.reset_counter += 1

    def fetch(self) -> List[ConversionRecord]:
        records = super().fetch()
        _populate_opening_types(records)
        return records


def _populate_opening_types(records: List[ConversionRecord]) -> None:
    ordered = sorted(records, key=lambda c: c.start_frame)

    for _, group in groupby(ordered, key=lambda c: c.start_frame):
        group = list(group)
        is_trade = len(group) >= 2

        for conversion in group:
            if is_trade:
                conversion.opening_type = "trade"
            elif _was_being_punished(conversion, records):
                conversion.opening_type = "counter-attack"
            else:
                conversion.opening_type = "neutral-win"


def _was_being_punished(conversion: ConversionRecord, records: List[ConversionRecord]) -> bool:
    for other in records:
        if other.player_index != conversion.opponent_index:
            continue
        if other.opponent_index != conversion.player_index:
            continue
        if other.start_frame >= conversion.start_frame:
            continue
        if other.end_frame is None or other.end_frame >= conversion.start_frame:
            return True
    return False
