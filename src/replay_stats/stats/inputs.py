"""
Input Computer
==============

Counts controller inputs from pre-frame updates, starting at the first
playable frame.

An input is:
    - a physical button going from released to pressed (low 12 bits)
    - the main stick or c-stick entering a new non dead-zone region
    - an analog trigger crossing the 0.3 press threshold
"""

from typing import Dict, List, Optional, Sequence

from replay_stats.models.events import PreFrameUpdate
from replay_stats.models.frame import FrameEntry
from replay_stats.models.lifecycle import PlayerIndices
from replay_stats.models.stats import InputCounts
from replay_stats.stats.common import Frames, JoystickRegion, get_joystick_region


BUTTON_MASK = 0xFFF
TRIGGER_PRESS_THRESHOLD = 0.3


class InputComputer:
    """Controller input counter, one InputCounts per tracked player."""

    name = "inputs"

    def __init__(self, indices: Sequence[PlayerIndices]) -> None:
        self._indices = list(indices)
        self._counts: Dict[PlayerIndices, InputCounts] = {
            pairing: InputCounts(
                player_index=pairing.player_index,
                opponent_index=pairing.opponent_index,
            )
            for pairing in self._indices
        }
        self._prev_pre: Dict[PlayerIndices, Optional[PreFrameUpdate]] = {
            pairing: None for pairing in self._indices
        }

    def process_frame(self, frame: FrameEntry) -> None:
        for pairing in self._indices:
            pre = frame.pre(pairing.player_index)
            if pre is None:
                continue
            prev = self._prev_pre[pairing]
            self._prev_pre[pairing] = pre

            if frame.frame < Frames.FIRST_PLAYABLE or prev is None:
                continue
            self._count_inputs(self._counts[pairing], pre, prev)

    def _count_inputs(self, counts: InputCounts, pre: PreFrameUpdate, prev: PreFrameUpdate) -> None:
        # Bits set now that were clear last frame
        button_changes = (~prev.physical_buttons) & pre.physical_buttons & BUTTON_MASK
        new_presses = bin(button_changes).count("1")
        counts.button_input_count += new_presses
        counts.input_count += new_presses

        prev_stick = get_joystick_region(prev.joystick_x, prev.joystick_y)
        stick = get_joystick_region(pre.joystick_x, pre.joystick_y)
        if stick != prev_stick and stick != JoystickRegion.DZ:
            counts.joystick_input_count += 1
            counts.input_count += 1

        prev_cstick = get_joystick_region(prev.cstick_x, prev.cstick_y)
        cstick = get_joystick_region(pre.cstick_x, pre.cstick_y)
        if cstick != prev_cstick and cstick != JoystickRegion.DZ:
            counts.cstick_input_count += 1
            counts.input_count += 1

        if prev.physical_l_trigger < TRIGGER_PRESS_THRESHOLD <= pre.physical_l_trigger:
            counts.trigger_input_count += 1
            counts.input_count += 1
        if prev.physical_r_trigger < TRIGGER_PRESS_THRESHOLD <= pre.physical_r_trigger:
            counts.trigger_input_count += 1
            counts.input_count += 1

    def fetch(self) -> List[InputCounts]:
        return [self._counts[pairing].model_copy(deep=True) for pairing in self._indices]
