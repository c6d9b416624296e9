"""
Frame Data Model
================

Frame representation assembled from independently arriving updates.

A FrameEntry is a partially constructed aggregate: the assembler fills in
pre and post sub-records per player slot as updates arrive. Sub-records are
overwritten (last write wins) but never removed.

Design Rules:
    - Only the FrameAssembler writes into a FrameEntry
    - Sub-records are frozen payload models, safe to keep references to
    - Readers get read-only views; stat computers never modify frames
"""

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from replay_stats.models.events import PostFrameUpdate, PreFrameUpdate, UpdateKind


@dataclass(frozen=True, slots=True)
class PlayerFrameData:
    """
    Pre and post sub-records for one player slot in one frame.

    Attributes:
        pre: Pre-frame update, if received
        post: Post-frame update, if received
    """

    pre: Optional[PreFrameUpdate] = None
    post: Optional[PostFrameUpdate] = None

    def with_update(self, kind: UpdateKind, payload) -> "PlayerFrameData":
        """Copy with one sub-record replaced."""
        if kind is UpdateKind.PRE:
            return replace(self, pre=payload)
        return replace(self, post=payload)


class FrameEntry:
    """
    All player data received so far for one frame number.

    Readers get `players` as a read-only mapping of frozen PlayerFrameData;
    only `set` changes an entry, and only the FrameStore calls it.

    Attributes:
        frame: Frame number (negative during the pre-game countdown)
        players: Player slot to its sub-records (read-only view)
    """

    __slots__ = ("_frame", "_players")

    def __init__(self, frame: int) -> None:
        self._frame = frame
        self._players: Dict[int, PlayerFrameData] = {}

    @property
    def frame(self) -> int:
        return self._frame

    @property
    def players(self) -> Mapping[int, PlayerFrameData]:
        return MappingProxyType(self._players)

    def set(self, player_index: int, kind: UpdateKind, payload) -> None:
        """Store a sub-record, replacing any previous one of the same kind."""
        data = self._players.get(player_index, PlayerFrameData())
        self._players[player_index] = data.with_update(kind, payload)

    def pre(self, player_index: int) -> Optional[PreFrameUpdate]:
        data = self._players.get(player_index)
        return data.pre if data else None

    def post(self, player_index: int) -> Optional[PostFrameUpdate]:
        data = self._players.get(player_index)
        return data.post if data else None

    def to_dict(self) -> dict:
        """Export as dictionary for serialization."""
        return {
            "frame": self._frame,
            "players": {
                index: {
                    "pre": data.pre.model_dump() if data.pre else None,
                    "post": data.post.model_dump() if data.post else None,
                }
                for index, data in sorted(self._players.items())
            },
        }

    def __repr__(self) -> str:
        """Compact repr listing which sub-records are present."""
        parts = []
        for index, data in sorted(self._players.items()):
            flags = ("pre" if data.pre else "") + ("+post" if data.post else "")
            parts.append(f"{index}:{flags.lstrip('+') or '-'}")
        return f"FrameEntry(frame={self._frame}, players=[{', '.join(parts)}])"
