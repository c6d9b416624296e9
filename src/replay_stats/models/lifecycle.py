"""
Match Lifecycle
===============

Discrete lifecycle phases of a single match, tracked by the FrameAssembler.

Transitions:
    UNINITIALIZED -> CONFIGURED:  first accepted game start
    CONFIGURED    -> CONFIGURED:  later accepted game start (state reset)
    CONFIGURED    -> STREAMING:   first accepted frame update
    any           -> ENDED:       game end marker

ENDED only changes how the latest frame is reported. Updates after the end
marker are still merged and dispatched.
"""

from dataclasses import dataclass
from enum import Enum


class MatchPhase(str, Enum):
    """
    Lifecycle phase of a match.

    Attributes:
        UNINITIALIZED: No usable configuration seen yet
        CONFIGURED: Configuration accepted, no frame updates since
        STREAMING: Frame updates are arriving
        ENDED: Game end marker received
    """

    UNINITIALIZED = "UNINITIALIZED"
    CONFIGURED = "CONFIGURED"
    STREAMING = "STREAMING"
    ENDED = "ENDED"


@dataclass(frozen=True, slots=True)
class PlayerIndices:
    """
    A tracked (player, opponent) pairing.

    Both indices reference active player slots. Pairings are resolved once
    per accepted configuration and never change afterwards.
    """

    player_index: int
    opponent_index: int
