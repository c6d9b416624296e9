"""
Stats Orchestrator
==================

Completion-gated fan-out of frames to the registered stat computers.

The orchestrator:
    - Tracks the last frame number it has seen (dispatched or not)
    - Hands a frame to every computer once the frame is complete for all
      tracked pairings, never twice for the same frame number
    - Isolates computer failures so one broken computer cannot stop the rest
    - Aggregates computer outputs on demand into ComputedStats

Registration:
    Computers are built once per accepted configuration and called in
    registration order. The default order is actions, conversions, combos,
    stocks, inputs.
"""

import logging
from collections import Counter
from typing import Callable, Dict, List, Optional, Sequence, Set

from replay_stats.models.frame import FrameEntry
from replay_stats.models.lifecycle import PlayerIndices
from replay_stats.models.stats import ComputedStats
from replay_stats.stats.actions import ActionsComputer
from replay_stats.stats.base import StatComputer, is_completed_frame
from replay_stats.stats.combos import ComboComputer
from replay_stats.stats.common import Frames, Timers
from replay_stats.stats.conversions import ConversionComputer
from replay_stats.stats.inputs import InputComputer
from replay_stats.stats.overall import generate_overall_stats
from replay_stats.stats.stocks import StockComputer


logger = logging.getLogger(__name__)


DEFAULT_COMPUTERS = ["actions", "conversions", "combos", "stocks", "inputs"]

ComputerFactory = Callable[[Sequence[PlayerIndices]], List[StatComputer]]


# =============================================================================
# Computer Registry
# =============================================================================

def create_stat_computers(
    indices: Sequence[PlayerIndices],
    names: Optional[Sequence[str]] = None,
    punish_reset_frames: int = Timers.PUNISH_RESET_FRAMES,
    combo_string_reset_frames: int = Timers.COMBO_STRING_RESET_FRAMES,
) -> List[StatComputer]:
    """
    Build stat computers by name, in the given order.

    Args:
        indices: Tracked pairings
        names: Computer names; None for the default set
        punish_reset_frames: Conversion reset window
        combo_string_reset_frames: Combo reset window

    Returns:
        Computers in registration order

    Raises:
        ValueError: On an unknown or repeated computer name
    """
    builders: Dict[str, Callable[[], StatComputer]] = {
        "actions": lambda: ActionsComputer(indices),
        "conversions": lambda: ConversionComputer(indices, punish_reset_frames),
        "combos": lambda: ComboComputer(indices, combo_string_reset_frames),
        "stocks": lambda: StockComputer(indices),
        "inputs": lambda: InputComputer(indices),
    }

    names = list(DEFAULT_COMPUTERS if names is None else names)
    if len(set(names)) != len(names):
        raise ValueError(f"Stat computer names must be unique: {names}")

    computers = []
    for name in names:
        if name not in builders:
            raise ValueError(f"Unknown stat computer: {name}")
        computers.append(builders[name]())
    return computers


# =============================================================================
# Orchestrator
# =============================================================================

class StatsOrchestrator:
    """
    Completion gate plus fan-out over a fixed list of stat computers.

    With no pairings nothing is dispatched, but the last frame is still
    tracked so playable_frame_count stays meaningful.

    Attributes:
        indices: Tracked pairings
        last_frame: Highest frame number seen, None before any
        dispatched_count: Number of frames handed to the computers

    Example:
        orchestrator = StatsOrchestrator(indices)

        for frame in frames:
            orchestrator.process_frame(frame)

        stats = orchestrator.fetch()
    """

    def __init__(
        self,
        indices: Sequence[PlayerIndices],
        computers: Optional[Sequence[StatComputer]] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            indices: Tracked pairings
            computers: Computers to register; None builds the default set
        """
        self.indices: List[PlayerIndices] = list(indices)
        self._computers: List[StatComputer] = (
            list(computers) if computers is not None else create_stat_computers(self.indices)
        )
        self.last_frame: Optional[int] = None
        self._dispatched: Set[int] = set()
        self._failures: Counter = Counter()

        logger.info(
            f"StatsOrchestrator initialized: pairings={len(self.indices)}, "
            f"computers={[c.name for c in self._computers]}"
        )

    @property
    def computers(self) -> List[StatComputer]:
        """Registered computers, in dispatch order."""
        return list(self._computers)

    @property
    def dispatched_count(self) -> int:
        return len(self._dispatched)

    @property
    def failure_counts(self) -> Dict[str, int]:
        """Number of failed calls per computer name."""
        return dict(self._failures)

    def process_frame(self, frame: FrameEntry) -> bool:
        """
        Offer a frame for dispatch.

        Args:
            frame: Current view of a primary frame

        Returns:
            True if the frame was handed to the computers on this call
        """
        if self.last_frame is None or frame.frame > self.last_frame:
            self.last_frame = frame.frame

        if not self.indices:
            return False

        # Don't compute stats on frames that have not been fully received
        if not is_completed_frame(self.indices, frame):
            return False

        if frame.frame in self._dispatched:
            return False
        self._dispatched.add(frame.frame)

        for computer in self._computers:
            try:
                computer.process_frame(frame)
            except Exception:
                self._failures[computer.name] += 1
                logger.exception(
                    f"Stat computer '{computer.name}' failed on frame {frame.frame}"
                )
        return True

    def playable_frame_count(self) -> int:
        if self.last_frame is None or self.last_frame < Frames.FIRST_PLAYABLE:
            return 0
        return self.last_frame - Frames.FIRST_PLAYABLE

    def fetch(self) -> ComputedStats:
        """
        Pull every computer's current output.

        Returns:
            Fresh ComputedStats; game_complete is left for the caller
        """
        outputs = {}
        for computer in self._computers:
            try:
                outputs[computer.name] = computer.fetch()
            except Exception:
                self._failures[computer.name] += 1
                logger.exception(f"Stat computer '{computer.name}' failed to fetch")

        playable_frame_count = self.playable_frame_count()
        overall = generate_overall_stats(
            self.indices,
            inputs=outputs.get("inputs", []),
            stocks=outputs.get("stocks", []),
            conversions=outputs.get("conversions", []),
            playable_frame_count=playable_frame_count,
        )

        return ComputedStats(
            last_frame=self.last_frame,
            playable_frame_count=playable_frame_count,
            outputs=outputs,
            overall=overall,
        )
