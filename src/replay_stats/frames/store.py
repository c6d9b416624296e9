"""
Frame Store
===========

Frame-number indexed storage for assembled frames.

Frame numbers are dense and start at a fixed negative index, so the store
is a growable list addressed by `frame - base` instead of a dict. It grows
forward as new frames arrive, and backward in the rare case an earlier
frame than the current base shows up.

Design Rules:
    - Entries are created on first write and never removed
    - Writes are last-write-wins per (frame, player, kind)
    - Gaps between written frames read as missing
    - A write more than max_gap frames away from the stored range is
      rejected, so a corrupt frame number cannot allocate without bound
"""

import logging
from typing import Iterator, List, Optional

from replay_stats.models.events import UpdateKind
from replay_stats.models.frame import FrameEntry
from replay_stats.stats.common import FRAMES_PER_MINUTE


logger = logging.getLogger(__name__)


# Largest jump, in frames, a write may make past either end of the store
MAX_FRAME_GAP = FRAMES_PER_MINUTE


class FrameStore:
    """
    Offset-indexed arena of FrameEntry objects.

    Attributes:
        base: Frame number stored at list position 0
        latest_index: Highest frame number written, None if empty

    Example:
        store = FrameStore(base=-123)
        store.write(-123, 0, UpdateKind.POST, payload)
        entry = store.get(-123)
    """

    def __init__(self, base: int, max_gap: int = MAX_FRAME_GAP) -> None:
        """
        Initialize an empty store.

        Args:
            base: Reported base until the first write, which moves it to
                the frame written
            max_gap: Largest distance a write may land from the stored range
        """
        if max_gap < 1:
            raise ValueError("max_gap must be >= 1")

        self._base = base
        self._max_gap = max_gap
        self._rejected_count = 0
        self._entries: List[Optional[FrameEntry]] = []
        self._count = 0
        self._latest_index: Optional[int] = None

    @property
    def base(self) -> int:
        return self._base

    @property
    def latest_index(self) -> Optional[int]:
        return self._latest_index

    def write(
        self, frame: int, player_index: int, kind: UpdateKind, payload
    ) -> Optional[FrameEntry]:
        """
        Store a sub-record, creating the frame entry if needed.

        Args:
            frame: Frame number
            player_index: Player slot
            kind: Which sub-record to set
            payload: Frozen update payload

        Returns:
            The frame entry after the write, or None if the frame is too
            far from the stored range
        """
        if not self._entries:
            # Nothing stored yet: start the arena at the first frame seen
            self._base = frame
        elif self._gap_to(frame) > self._max_gap:
            self._rejected_count += 1
            logger.warning(
                f"Rejected frame {frame}: more than {self._max_gap} frames outside "
                f"stored range {self._base}..{self._base + len(self._entries) - 1}"
            )
            return None

        entry = self._ensure(frame)
        entry.set(player_index, kind, payload)
        if self._latest_index is None or frame > self._latest_index:
            self._latest_index = frame
        return entry

    def get(self, frame: int) -> Optional[FrameEntry]:
        position = frame - self._base
        if position < 0 or position >= len(self._entries):
            return None
        return self._entries[position]

    def _gap_to(self, frame: int) -> int:
        position = frame - self._base
        if position < 0:
            return -position
        return position - len(self._entries) + 1

    def _ensure(self, frame: int) -> FrameEntry:
        position = frame - self._base
        if position < 0:
            # Earlier than anything stored: shift the base back
            logger.debug(f"Extending frame store base from {self._base} to {frame}")
            self._entries[0:0] = [None] * -position
            self._base = frame
            position = 0
        if position >= len(self._entries):
            self._entries.extend([None] * (position - len(self._entries) + 1))

        entry = self._entries[position]
        if entry is None:
            entry = FrameEntry(frame=frame)
            self._entries[position] = entry
            self._count += 1
        return entry

    def __contains__(self, frame: int) -> bool:
        return self.get(frame) is not None

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[FrameEntry]:
        """Iterate stored frames in frame number order."""
        return (entry for entry in self._entries if entry is not None)

    def metrics(self) -> dict:
        """
        Get store metrics for observability.

        Returns:
            Dict with frame_count, base, latest_index, rejected_count
        """
        return {
            "frame_count": self._count,
            "base": self._base,
            "latest_index": self._latest_index,
            "rejected_count": self._rejected_count,
        }
