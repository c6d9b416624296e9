"""
Data Models
===========

Pydantic models and dataclasses for replay-stats.

This module re-exports all data models for convenient access.

Models:
    Events:
        - GameStart, PlayerSettings, PlayerType: Match configuration
        - PreFrameUpdate, PostFrameUpdate: Partial frame updates
        - GameEnd: Terminal marker
        - UpdateKind, EventOutcome: Event discriminants and results

    Frames:
        - FrameEntry, PlayerFrameData: Assembled frame views

    Lifecycle:
        - MatchPhase: Match lifecycle phase
        - PlayerIndices: Tracked (player, opponent) pairing

    Stats:
        - StockRecord, ConversionRecord, ComboRecord, MoveLanded
        - ActionCounts, InputCounts
        - OverallStats, RatioStat, InputTotals
        - ComputedStats: Complete aggregate output
"""

from replay_stats.models.events import (
    EventOutcome,
    GameEnd,
    GameStart,
    PlayerSettings,
    PlayerType,
    PostFrameUpdate,
    PreFrameUpdate,
    UpdateKind,
)
from replay_stats.models.frame import FrameEntry, PlayerFrameData
from replay_stats.models.lifecycle import MatchPhase, PlayerIndices
from replay_stats.models.stats import (
    ActionCounts,
    ComboRecord,
    ComputedStats,
    ConversionRecord,
    InputCounts,
    InputTotals,
    MoveLanded,
    OverallStats,
    RatioStat,
    StockRecord,
)

__all__ = [
    # Events
    "EventOutcome",
    "GameEnd",
    "GameStart",
    "PlayerSettings",
    "PlayerType",
    "PostFrameUpdate",
    "PreFrameUpdate",
    "UpdateKind",
    # Frames
    "FrameEntry",
    "PlayerFrameData",
    # Lifecycle
    "MatchPhase",
    "PlayerIndices",
    # Stats
    "ActionCounts",
    "ComboRecord",
    "ComputedStats",
    "ConversionRecord",
    "InputCounts",
    "InputTotals",
    "MoveLanded",
    "OverallStats",
    "RatioStat",
    "StockRecord",
]
