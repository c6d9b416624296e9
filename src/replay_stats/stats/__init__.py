"""
Stats Module
============

Completion-gated stat computation over assembled frames.

This module provides:
    - StatComputer: Protocol every computer implements
    - is_completed_frame: The all-or-nothing completion gate
    - StatsOrchestrator: Fan-out and aggregation
    - Pairing resolvers
    - The built-in computers (actions, conversions, combos, stocks, inputs)

Design Philosophy:
    Computers are pluggable black boxes. The orchestrator knows only the
    two-method protocol and the computer's name.
"""

from replay_stats.stats.actions import ActionsComputer
from replay_stats.stats.base import StatComputer, is_completed_frame
from replay_stats.stats.combos import ComboComputer
from replay_stats.stats.common import Frames, Timers
from replay_stats.stats.conversions import ConversionComputer
from replay_stats.stats.inputs import InputComputer
from replay_stats.stats.orchestrator import (
    DEFAULT_COMPUTERS,
    StatsOrchestrator,
    create_stat_computers,
)
from replay_stats.stats.overall import generate_overall_stats
from replay_stats.stats.pairing import (
    PairingResolver,
    get_singles_opponent_indices,
    validate_pairings,
)
from replay_stats.stats.stocks import StockComputer

__all__ = [
    "ActionsComputer",
    "ComboComputer",
    "ConversionComputer",
    "DEFAULT_COMPUTERS",
    "Frames",
    "InputComputer",
    "PairingResolver",
    "StatComputer",
    "StatsOrchestrator",
    "StockComputer",
    "Timers",
    "create_stat_computers",
    "generate_overall_stats",
    "get_singles_opponent_indices",
    "is_completed_frame",
    "validate_pairings",
]
