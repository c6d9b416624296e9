"""
Common Stat Definitions
=======================

Frame boundaries, timers, action state ranges, and the small predicates
shared by the stat computers.

Action state ids are the game's internal animation state numbers. Ranges
are inclusive.
"""

from enum import IntEnum
from typing import Optional

from replay_stats.models.events import PostFrameUpdate


class Frames:
    """Fixed frame numbers of a replay."""

    # First frame index of every replay; also the end of the priming window
    FIRST = -123
    # Countdown frames are negative; playable time starts at frame 0
    FIRST_PLAYABLE = 0


class Timers:
    """Default reset windows, in frames."""

    PUNISH_RESET_FRAMES = 45
    RECOVERY_RESET_FRAMES = 45
    COMBO_STRING_RESET_FRAMES = 45


FRAMES_PER_MINUTE = 3600


class State:
    """Action state ids and ranges."""

    # Ranges
    DYING_START = 0x000
    DYING_END = 0x00A
    GROUNDED_CONTROL_START = 0x00E
    GROUNDED_CONTROL_END = 0x018
    CONTROLLED_JUMP_START = 0x018
    CONTROLLED_JUMP_END = 0x022
    SQUAT_START = 0x027
    SQUAT_END = 0x029
    GROUND_ATTACK_START = 0x02C
    GROUND_ATTACK_END = 0x040
    DAMAGE_START = 0x04B
    DAMAGE_END = 0x05B
    GUARD_START = 0x0B2
    GUARD_END = 0x0B6
    DOWN_START = 0x0B7
    DOWN_END = 0x0C6
    TECH_START = 0x0C7
    TECH_END = 0x0CC
    CAPTURE_START = 0x0DF
    CAPTURE_END = 0x0E8
    COMMAND_GRAB_RANGE1_START = 0x10A
    COMMAND_GRAB_RANGE1_END = 0x130
    COMMAND_GRAB_RANGE2_START = 0x147
    COMMAND_GRAB_RANGE2_END = 0x152

    # Single states
    TURN = 0x012
    DASH = 0x014
    KNEE_BEND = 0x018
    LANDING_FALL_SPECIAL = 0x02B
    GRAB = 0x0D4
    GRAB_PULL = 0x0D5
    DASH_GRAB = 0x0D6
    DASH_GRAB_PULL = 0x0D7
    ROLL_FORWARD = 0x0E9
    ROLL_BACKWARD = 0x0EA
    SPOT_DODGE = 0x0EB
    AIR_DODGE = 0x0EC
    CLIFF_CATCH = 0x0FC
    BARREL_WAIT = 0x125


class LCancelStatus(IntEnum):
    """L-cancel result reported on the landing frame."""

    NOT_APPLICABLE = 0
    SUCCESS = 1
    FAILURE = 2


class JoystickRegion(IntEnum):
    """Eight-way stick regions plus the dead zone."""

    DZ = 0
    NE = 1
    SE = 2
    SW = 3
    NW = 4
    N = 5
    E = 6
    S = 7
    W = 8


JOYSTICK_REGION_THRESHOLD = 0.2875


# =============================================================================
# Action State Predicates
# =============================================================================

def _in_range(state: Optional[int], start: int, end: int) -> bool:
    return state is not None and start <= state <= end


def is_dead(state: Optional[int]) -> bool:
    return _in_range(state, State.DYING_START, State.DYING_END)


def is_damaged(state: Optional[int]) -> bool:
    return _in_range(state, State.DAMAGE_START, State.DAMAGE_END)


def is_grabbed(state: Optional[int]) -> bool:
    return _in_range(state, State.CAPTURE_START, State.CAPTURE_END)


def is_command_grabbed(state: Optional[int]) -> bool:
    """Held by a character-specific grab (Bowser side-b, Kirby inhale...)."""
    if state is None or state == State.BARREL_WAIT:
        return False
    return (
        _in_range(state, State.COMMAND_GRAB_RANGE1_START, State.COMMAND_GRAB_RANGE1_END)
        or _in_range(state, State.COMMAND_GRAB_RANGE2_START, State.COMMAND_GRAB_RANGE2_END)
    )


def is_teching(state: Optional[int]) -> bool:
    return _in_range(state, State.TECH_START, State.TECH_END)


def is_down(state: Optional[int]) -> bool:
    return _in_range(state, State.DOWN_START, State.DOWN_END)


def is_in_control(state: Optional[int]) -> bool:
    """
    Whether the character can act freely on the ground.

    Covers grounded control states, crouching, grounded attacks, and the
    standing grab.
    """
    if state is None:
        return False
    ground = State.GROUNDED_CONTROL_START <= state <= State.GROUNDED_CONTROL_END
    squat = State.SQUAT_START <= state <= State.SQUAT_END
    ground_attack = State.GROUND_ATTACK_START < state <= State.GROUND_ATTACK_END
    return ground or squat or ground_attack or state == State.GRAB


def is_in_stun(state: Optional[int]) -> bool:
    """Damaged, grabbed, or command grabbed."""
    return is_damaged(state) or is_grabbed(state) or is_command_grabbed(state)


# =============================================================================
# Frame Helpers
# =============================================================================

def calc_damage_taken(current: PostFrameUpdate, previous: PostFrameUpdate) -> float:
    """Percent gained between two post updates of the same player."""
    return (current.percent or 0.0) - (previous.percent or 0.0)


def did_lose_stock(current: Optional[PostFrameUpdate], previous: Optional[PostFrameUpdate]) -> bool:
    if current is None or previous is None:
        return False
    if current.stocks_remaining is None or previous.stocks_remaining is None:
        return False
    return previous.stocks_remaining - current.stocks_remaining > 0


def get_joystick_region(x: float, y: float) -> JoystickRegion:
    """Classify a stick position into one of eight regions or the dead zone."""
    t = JOYSTICK_REGION_THRESHOLD
    if x >= t and y >= t:
        return JoystickRegion.NE
    if x >= t and y <= -t:
        return JoystickRegion.SE
    if x <= -t and y <= -t:
        return JoystickRegion.SW
    if x <= -t and y >= t:
        return JoystickRegion.NW
    if y >= t:
        return JoystickRegion.N
    if x >= t:
        return JoystickRegion.E
    if y <= -t:
        return JoystickRegion.S
    if x <= -t:
        return JoystickRegion.W
    return JoystickRegion.DZ
