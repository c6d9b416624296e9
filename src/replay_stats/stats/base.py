"""
Stat Computer Contract
======================

The protocol every stat computer implements, and the completion gate that
decides whether a frame may be handed to them.

Design Rules:
    - process_frame mutates only the computer's own state
    - fetch is a pure read and works before any frame was processed
    - Computers receive a frame only once every tracked pairing has both
      post updates present
"""

from typing import Any, Iterable, Protocol, runtime_checkable

from replay_stats.models.frame import FrameEntry
from replay_stats.models.lifecycle import PlayerIndices


@runtime_checkable
class StatComputer(Protocol):
    """
    Protocol for stat computers.

    Implementations:
        - ActionsComputer
        - ConversionComputer
        - ComboComputer
        - StockComputer
        - InputComputer
    """

    name: str

    def process_frame(self, frame: FrameEntry) -> None:
        """
        Consume one completed frame.

        Args:
            frame: Frame with post updates present for every tracked player
        """
        ...

    def fetch(self) -> Any:
        """
        Get the computer's current output.

        Returns:
            Current derived statistic; empty before any frame
        """
        ...


def is_completed_frame(indices: Iterable[PlayerIndices], frame: FrameEntry) -> bool:
    """
    Check whether a frame is fully received for every pairing.

    All-or-nothing: one missing post update anywhere means the frame is
    not complete for any pairing.

    Args:
        indices: Tracked pairings
        frame: Frame to check

    Returns:
        True if every player and opponent has a post update in the frame
    """
    for pairing in indices:
        if frame.post(pairing.player_index) is None:
            return False
        if frame.post(pairing.opponent_index) is None:
            return False
    return True
