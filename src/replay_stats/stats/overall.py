"""
Overall Stats
=============

Per-pairing summary derived from the input, stock, and conversion outputs.

Ratios:
    inputs_per_minute      = inputs / (playable frames / 3600)
    openings_per_kill      = conversions / kills
    damage_per_opening     = damage dealt in conversions / conversions
    neutral_win_ratio      = own neutral-win openings / both players' neutral wins
    counter_hit_ratio      = own counter-attacks / both players' counter-attacks
    beneficial_trade_ratio = trades that favored the player / own trades

NO NEW FRAME PROCESSING. This module only combines fetched outputs.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from replay_stats.models.lifecycle import PlayerIndices
from replay_stats.models.stats import (
    ConversionRecord,
    InputCounts,
    InputTotals,
    OverallStats,
    RatioStat,
    StockRecord,
)
from replay_stats.stats.common import FRAMES_PER_MINUTE


def get_ratio(count: float, total: float) -> RatioStat:
    return RatioStat(
        count=count,
        total=total,
        ratio=count / total if total else None,
    )


def generate_overall_stats(
    indices: Sequence[PlayerIndices],
    inputs: Sequence[InputCounts],
    stocks: Sequence[StockRecord],
    conversions: Sequence[ConversionRecord],
    playable_frame_count: int,
) -> List[OverallStats]:
    """
    Build one OverallStats per pairing.

    Args:
        indices: Tracked pairings
        inputs: InputComputer output
        stocks: StockComputer output
        conversions: ConversionComputer output, opening types populated
        playable_frame_count: Frames after the countdown

    Returns:
        Summaries in pairing order
    """
    inputs_by_player = {counts.player_index: counts for counts in inputs}

    conversions_by_player: Dict[int, List[ConversionRecord]] = defaultdict(list)
    for conversion in conversions:
        conversions_by_player[conversion.player_index].append(conversion)

    stocks_by_player: Dict[int, List[StockRecord]] = defaultdict(list)
    for stock in stocks:
        stocks_by_player[stock.player_index].append(stock)

    game_minutes = playable_frame_count / FRAMES_PER_MINUTE

    overall = []
    for pairing in indices:
        player_index = pairing.player_index
        opponent_index = pairing.opponent_index

        input_totals = _input_totals(inputs_by_player.get(player_index))

        player_conversions = conversions_by_player[player_index]
        opponent_conversions = conversions_by_player[opponent_index]
        successful = [c for c in player_conversions if len(c.moves) > 1]
        conversion_count = len(player_conversions)
        total_damage = sum(c.current_percent - c.start_percent for c in player_conversions)
        kill_count = sum(1 for s in stocks_by_player[opponent_index] if s.end_frame is not None)

        overall.append(OverallStats(
            player_index=player_index,
            opponent_index=opponent_index,
            input_counts=input_totals,
            conversion_count=conversion_count,
            total_damage=total_damage,
            kill_count=kill_count,
            successful_conversions=get_ratio(len(successful), conversion_count),
            inputs_per_minute=get_ratio(input_totals.total, game_minutes),
            digital_inputs_per_minute=get_ratio(input_totals.buttons, game_minutes),
            openings_per_kill=get_ratio(conversion_count, kill_count),
            damage_per_opening=get_ratio(total_damage, conversion_count),
            neutral_win_ratio=_opening_ratio(
                player_conversions, opponent_conversions, "neutral-win"
            ),
            counter_hit_ratio=_opening_ratio(
                player_conversions, opponent_conversions, "counter-attack"
            ),
            beneficial_trade_ratio=_beneficial_trade_ratio(
                player_conversions, opponent_conversions
            ),
        ))

    return overall


def _input_totals(counts: Optional[InputCounts]) -> InputTotals:
    if counts is None:
        return InputTotals()
    return InputTotals(
        buttons=counts.button_input_count,
        triggers=counts.trigger_input_count,
        joystick=counts.joystick_input_count,
        cstick=counts.cstick_input_count,
        total=counts.input_count,
    )


def _opening_ratio(
    player_conversions: Sequence[ConversionRecord],
    opponent_conversions: Sequence[ConversionRecord],
    opening_type: str,
) -> RatioStat:
    player_count = sum(1 for c in player_conversions if c.opening_type == opening_type)
    opponent_count = sum(1 for c in opponent_conversions if c.opening_type == opening_type)
    return get_ratio(player_count, player_count + opponent_count)


def _beneficial_trade_ratio(
    player_conversions: Sequence[ConversionRecord],
    opponent_conversions: Sequence[ConversionRecord],
) -> RatioStat:
    player_trades = [c for c in player_conversions if c.opening_type == "trade"]
    opponent_trades = [c for c in opponent_conversions if c.opening_type == "trade"]

    benefits = 0
    for mine, theirs in zip(player_trades, opponent_trades):
        my_damage = mine.current_percent - mine.start_percent
        their_damage = theirs.current_percent - theirs.start_percent
        if mine.did_kill and not theirs.did_kill:
            benefits += 1
        elif my_damage > their_damage:
            benefits += 1

    return get_ratio(benefits, len(player_trades))
