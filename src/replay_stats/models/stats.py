"""
Stats Output Models
===================

This module defines the output contract for computed replay statistics.

Output Contract:
    {
        "last_frame": 5012,
        "playable_frame_count": 5051,
        "game_complete": true,
        "outputs": {
            "stocks": [...],
            "conversions": [...],
            "combos": [...],
            "actions": [...],
            "inputs": [...]
        },
        "overall": [
            {
                "player_index": 0,
                "opponent_index": 1,
                "conversion_count": 14,
                "total_damage": 412.5,
                "kill_count": 4,
                "neutral_win_ratio": {"count": 9, "total": 17, "ratio": 0.53}
            }
        ]
    }

Design Rules:
    - Every stat computer owns its own records; fetch returns copies
    - `outputs` is keyed by stat computer name and is open-ended
    - All outputs are deterministic for a given input sequence
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Per-Computer Records
# =============================================================================

class StockRecord(BaseModel):
    """
    One stock (life) of a player.

    Attributes:
        start_frame: Frame the stock became live
        end_frame: Frame the stock was lost, None while alive
        end_percent: Percent on the frame before the stock was lost
        count: Stocks remaining when this stock started
        death_animation: Action state on the frame of death
    """

    player_index: int
    opponent_index: int
    start_frame: int
    end_frame: Optional[int] = None
    start_percent: float = 0.0
    end_percent: Optional[float] = None
    current_percent: float = 0.0
    count: Optional[int] = None
    death_animation: Optional[int] = None


class MoveLanded(BaseModel):
    """A move that connected during a punish."""

    player_index: int
    frame: int
    move_id: Optional[int] = None
    hit_count: int = 0
    damage: float = 0.0


class PunishRecord(BaseModel):
    """
    A sequence of hits by player_index on opponent_index.

    Attributes:
        start_percent: Opponent percent before the first hit
        current_percent: Opponent percent on the latest processed frame
        end_percent: Opponent percent when the punish ended
        did_kill: Whether the punish ended with a stock loss
    """

    player_index: int
    opponent_index: int
    start_frame: int
    end_frame: Optional[int] = None
    start_percent: float = 0.0
    current_percent: float = 0.0
    end_percent: Optional[float] = None
    moves: List[MoveLanded] = Field(default_factory=list)
    did_kill: bool = False


class ComboRecord(PunishRecord):
    """A punish that ends once the opponent escapes stun."""


class ConversionRecord(PunishRecord):
    """
    A punish that ends once the opponent regains control.

    opening_type is one of: unknown, neutral-win, counter-attack, trade.
    """

    opening_type: str = "unknown"


class ActionCounts(BaseModel):
    """Technique and action counters for one player."""

    player_index: int
    opponent_index: int
    wavedash_count: int = 0
    waveland_count: int = 0
    air_dodge_count: int = 0
    dash_dance_count: int = 0
    spot_dodge_count: int = 0
    ledgegrab_count: int = 0
    roll_count: int = 0
    grab_success_count: int = 0
    grab_fail_count: int = 0
    l_cancel_success_count: int = 0
    l_cancel_fail_count: int = 0


class InputCounts(BaseModel):
    """Controller input counters for one player."""

    player_index: int
    opponent_index: int
    input_count: int = 0
    joystick_input_count: int = 0
    cstick_input_count: int = 0
    button_input_count: int = 0
    trigger_input_count: int = 0


# =============================================================================
# Overall Aggregation
# =============================================================================

class RatioStat(BaseModel):
    """A count over a total; ratio is None when total is 0."""

    count: float = 0
    total: float = 0
    ratio: Optional[float] = None


class InputTotals(BaseModel):
    """Input counts grouped by controller part."""

    buttons: int = 0
    triggers: int = 0
    joystick: int = 0
    cstick: int = 0
    total: int = 0


class OverallStats(BaseModel):
    """Summary stats for one tracked pairing."""

    player_index: int
    opponent_index: int
    input_counts: InputTotals = Field(default_factory=InputTotals)
    conversion_count: int = 0
    total_damage: float = 0.0
    kill_count: int = 0
    successful_conversions: RatioStat = Field(default_factory=RatioStat)
    inputs_per_minute: RatioStat = Field(default_factory=RatioStat)
    digital_inputs_per_minute: RatioStat = Field(default_factory=RatioStat)
    openings_per_kill: RatioStat = Field(default_factory=RatioStat)
    damage_per_opening: RatioStat = Field(default_factory=RatioStat)
    neutral_win_ratio: RatioStat = Field(default_factory=RatioStat)
    counter_hit_ratio: RatioStat = Field(default_factory=RatioStat)
    beneficial_trade_ratio: RatioStat = Field(default_factory=RatioStat)


class ComputedStats(BaseModel):
    """
    Aggregated statistics snapshot, rebuilt on every fetch.

    Attributes:
        last_frame: Last primary frame number observed, None before any
        playable_frame_count: Frames since the countdown ended (>= 0)
        game_complete: Whether the game end marker was received
        outputs: Stat computer name to its fetched output
        overall: One summary per tracked pairing
    """

    last_frame: Optional[int] = Field(default=None, description="Last frame observed")
    playable_frame_count: int = Field(default=0, ge=0, description="Frames after countdown")
    game_complete: bool = Field(default=False, description="Game end marker received")
    outputs: Dict[str, Any] = Field(default_factory=dict)
    overall: List[OverallStats] = Field(default_factory=list)

    def output(self, name: str) -> Any:
        """Get one stat computer's output, or an empty list if absent."""
        return self.outputs.get(name, [])
