"""
Frames Module
=============

Frame assembly and storage.

This module provides:
    - FrameStore: Offset-indexed arena of assembled frames
    - FrameAssembler: Event entry point that merges updates into frames
      and feeds the stats orchestrator
"""

from replay_stats.frames.assembler import CHARACTER_ID_CORRECTIONS, FrameAssembler
from replay_stats.frames.store import FrameStore


__all__ = [
    "CHARACTER_ID_CORRECTIONS",
    "FrameAssembler",
    "FrameStore",
]
