"""
Stock Computer
==============

Tracks each player's stocks: when they start, the percent carried, and
how they end.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from replay_stats.models.events import PostFrameUpdate
from replay_stats.models.frame import FrameEntry
from replay_stats.models.lifecycle import PlayerIndices
from replay_stats.models.stats import StockRecord
from replay_stats.stats.common import did_lose_stock, is_dead


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _StockState:
    stock: Optional[StockRecord] = None
    prev_post: Optional[PostFrameUpdate] = None


class StockComputer:
    """
    Stock lifecycle computer.

    A stock opens on the first frame the player is not in a dying state and
    closes on the frame stocks_remaining drops.
    """

    name = "stocks"

    def __init__(self, indices: Sequence[PlayerIndices]) -> None:
        self._indices = list(indices)
        self._states: Dict[PlayerIndices, _StockState] = {
            pairing: _StockState() for pairing in self._indices
        }
        self._stocks: List[StockRecord] = []

    def process_frame(self, frame: FrameEntry) -> None:
        for pairing in self._indices:
            state = self._states[pairing]
            post = frame.post(pairing.player_index)
            if post is None:
                continue
            self._handle_stock(state, pairing, frame.frame, post)
            state.prev_post = post

    def _handle_stock(
        self,
        state: _StockState,
        pairing: PlayerIndices,
        frame_number: int,
        post: PostFrameUpdate,
    ) -> None:
        if state.stock is None:
            if is_dead(post.action_state_id):
                return

            state.stock = StockRecord(
                player_index=pairing.player_index,
                opponent_index=pairing.opponent_index,
                start_frame=frame_number,
                count=post.stocks_remaining,
            )
            self._stocks.append(state.stock)
        elif did_lose_stock(post, state.prev_post):
            state.stock.end_frame = frame_number
            state.stock.end_percent = state.prev_post.percent or 0.0
            state.stock.death_animation = post.action_state_id
            logger.debug(
                f"Player {pairing.player_index} lost a stock at frame {frame_number}"
            )
            state.stock = None
            return

        state.stock.current_percent = post.percent or 0.0

    def fetch(self) -> List[StockRecord]:
        return [stock.model_copy(deep=True) for stock in self._stocks]
