"""
Pairing Resolution
==================

Resolvers map a match configuration to the (player, opponent) pairings
that stats are tracked for. The FrameAssembler takes a resolver as
configuration and only consumes its result.
"""

import logging
from typing import Callable, List

from replay_stats.models.events import GameStart
from replay_stats.models.lifecycle import PlayerIndices


logger = logging.getLogger(__name__)


PairingResolver = Callable[[GameStart], List[PlayerIndices]]


def get_singles_opponent_indices(settings: GameStart) -> List[PlayerIndices]:
    """
    Resolve pairings for a singles match.

    Exactly two active players yield one pairing per side. Any other
    player count yields no pairings, which disables stat dispatch.

    Args:
        settings: Accepted configuration with inactive slots removed

    Returns:
        Pairings, or an empty list if the match is not singles
    """
    if len(settings.players) != 2:
        return []

    first, second = settings.players
    return [
        PlayerIndices(player_index=first.player_index, opponent_index=second.player_index),
        PlayerIndices(player_index=second.player_index, opponent_index=first.player_index),
    ]


def validate_pairings(settings: GameStart, indices: List[PlayerIndices]) -> List[PlayerIndices]:
    """
    Drop pairings that reference slots outside the active participants.

    Args:
        settings: Accepted configuration with inactive slots removed
        indices: Resolver output

    Returns:
        The pairings whose player and opponent are both active and distinct
    """
    active = {player.player_index for player in settings.players}
    valid = []
    for pairing in indices:
        if (
            pairing.player_index in active
            and pairing.opponent_index in active
            and pairing.player_index != pairing.opponent_index
        ):
            valid.append(pairing)
        else:
            logger.warning(f"Dropping pairing with inactive or repeated slot: {pairing}")
    return valid
