"""
replay-stats
============

Incremental frame assembly and statistics for Melee replay event streams.

This package takes partial per-frame updates decoded from a replay, merges
them into frame-indexed snapshots, and drives a set of pluggable stat
computers over every frame that is fully populated for the tracked
player/opponent pairings.

Components:
    - frames: Frame store and the top-level FrameAssembler
    - stats: Completion gate, orchestrator, and stat computers
    - stream: Event routing and the WebSocket event consumer
    - models: Pydantic payload, frame, and stats models

Example:
    from replay_stats.frames import FrameAssembler
    from replay_stats.models import GameStart, PostFrameUpdate, UpdateKind

    assembler = FrameAssembler()
    assembler.on_match_configuration(game_start)
    assembler.on_update(UpdateKind.POST, post_update)
    print(assembler.get_stats().playable_frame_count)
"""

__version__ = "0.1.0"
__author__ = "replay-stats contributors"

__all__ = [
    "__version__",
]
