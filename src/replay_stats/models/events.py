"""
Event Payload Schema
====================

This module defines the Pydantic models for the decoded replay events that
feed the frame assembler.

The binary replay format is decoded upstream. Each event arrives here as a
typed payload:

    GameStart         -> match configuration (stage, player slots)
    PreFrameUpdate    -> player state before the frame is simulated (inputs)
    PostFrameUpdate   -> player state after the frame is simulated
    GameEnd           -> terminal marker

Input Contract (JSON form, as received by the router):
    {
        "type": "post_frame_update",
        "payload": {
            "frame": -123,
            "player_index": 0,
            "is_follower": false,
            "internal_character_id": 7,
            "action_state_id": 322,
            "percent": 0.0,
            "stocks_remaining": 4
        }
    }

Guarantees (from the decoder):
    - frame is None only while the stream has not resolved a frame number
    - updates within one stream arrive in non-decreasing frame order
    - frame update payloads are never modified after emission

Example:
    from replay_stats.models.events import PostFrameUpdate

    update = PostFrameUpdate.model_validate(message["payload"])
    print(f"Received post update for frame {update.frame}")
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class UpdateKind(str, Enum):
    """
    Which half of a frame an update fills in.

    Attributes:
        PRE: State captured before inputs are applied
        POST: State captured after collision detection
    """

    PRE = "pre"
    POST = "post"


class EventOutcome(str, Enum):
    """
    Result of offering an event to the assembler.

    Missing frame numbers and missing stage ids are expected while a stream
    warms up, so they are reported here instead of raised.
    """

    ACCEPTED = "ACCEPTED"
    IGNORED = "IGNORED"


class PlayerType(int, Enum):
    """The game's classification of a player slot."""

    HUMAN = 0
    CPU = 1
    DEMO = 2
    EMPTY = 3


# =============================================================================
# Match Configuration
# =============================================================================

class PlayerSettings(BaseModel):
    """
    One player slot from the game start event.

    character_id is the only field changed after acceptance: the first
    frames of a replay reveal whether a Zelda/Sheik slot actually started
    as the other form.

    Attributes:
        player_index: 0-indexed port of the slot
        port: 1-indexed controller port
        type: Slot type; EMPTY slots are dropped from the active set
        character_id: Public (character select) character id
        start_stocks: Stocks at game start
    """

    player_index: int = Field(..., ge=0, le=3, description="0-indexed slot")
    port: Optional[int] = Field(default=None, ge=1, le=4, description="Controller port")
    type: PlayerType = Field(default=PlayerType.HUMAN, description="Slot type")
    character_id: Optional[int] = Field(default=None, ge=0, description="Public character id")
    character_color: Optional[int] = Field(default=None, ge=0, description="Costume index")
    start_stocks: Optional[int] = Field(default=None, ge=0, description="Starting stocks")
    team_id: Optional[int] = Field(default=None, description="Team color in teams mode")
    display_name: str = Field(default="", description="Netplay display name")
    connect_code: str = Field(default="", description="Netplay connect code")


class GameStart(BaseModel):
    """
    Match configuration event.

    A missing stage_id means the stream has not reached a usable
    configuration yet; the assembler ignores such events.
    """

    stage_id: Optional[int] = Field(default=None, description="Stage id")
    is_teams: bool = Field(default=False, description="Teams mode flag")
    is_pal: Optional[bool] = Field(default=None, description="PAL version flag")
    players: List[PlayerSettings] = Field(default_factory=list)


class GameEnd(BaseModel):
    """Terminal marker. Its presence alone flips the match to ended."""

    game_end_method: Optional[int] = Field(default=None, description="How the game ended")
    lras_initiator: Optional[int] = Field(default=None, description="Player who quit out, if any")

    class Config:
        """Pydantic model configuration."""

        frozen = True


# =============================================================================
# Frame Updates
# =============================================================================

class PreFrameUpdate(BaseModel):
    """
    Player state right before controller inputs are used for the frame.

    Attributes:
        frame: Frame number, None while unresolved
        player_index: Slot the update belongs to
        is_follower: True for follower entities (Nana)
        physical_buttons: Raw controller button bitfield
        joystick_x, joystick_y: Processed main stick position [-1, 1]
        cstick_x, cstick_y: Processed c-stick position [-1, 1]
        physical_l_trigger, physical_r_trigger: Raw analog triggers [0, 1]
    """

    frame: Optional[int] = Field(default=None, description="Frame number")
    player_index: int = Field(..., ge=0, le=3, description="Slot index")
    is_follower: bool = Field(default=False, description="Follower entity flag")
    random_seed: Optional[int] = Field(default=None)
    action_state_id: Optional[int] = Field(default=None, ge=0)
    position_x: Optional[float] = Field(default=None)
    position_y: Optional[float] = Field(default=None)
    facing_direction: Optional[float] = Field(default=None)
    joystick_x: float = Field(default=0.0)
    joystick_y: float = Field(default=0.0)
    cstick_x: float = Field(default=0.0)
    cstick_y: float = Field(default=0.0)
    trigger: float = Field(default=0.0)
    buttons: int = Field(default=0, ge=0)
    physical_buttons: int = Field(default=0, ge=0)
    physical_l_trigger: float = Field(default=0.0)
    physical_r_trigger: float = Field(default=0.0)
    percent: Optional[float] = Field(default=None)

    class Config:
        """Pydantic model configuration."""

        frozen = True


class PostFrameUpdate(BaseModel):
    """
    Player state at the end of the frame, used for all stat computation.

    Attributes:
        frame: Frame number, None while unresolved
        player_index: Slot the update belongs to
        is_follower: True for follower entities (Nana)
        internal_character_id: In-game character id (differs from the
            public id; used for the Zelda/Sheik correction)
        action_state_id: Current action state
        percent: Current damage percent
        stocks_remaining: Stocks left
        last_attack_landed: Move id of the last attack this player landed
        action_state_counter: Frames since the action state started
        l_cancel_status: 1 success, 2 failure, 0 otherwise
    """

    frame: Optional[int] = Field(default=None, description="Frame number")
    player_index: int = Field(..., ge=0, le=3, description="Slot index")
    is_follower: bool = Field(default=False, description="Follower entity flag")
    internal_character_id: Optional[int] = Field(default=None, ge=0)
    action_state_id: Optional[int] = Field(default=None, ge=0)
    position_x: Optional[float] = Field(default=None)
    position_y: Optional[float] = Field(default=None)
    facing_direction: Optional[float] = Field(default=None)
    percent: Optional[float] = Field(default=None, ge=0.0)
    shield_size: Optional[float] = Field(default=None)
    last_attack_landed: Optional[int] = Field(default=None)
    current_combo_count: Optional[int] = Field(default=None)
    last_hit_by: Optional[int] = Field(default=None)
    stocks_remaining: Optional[int] = Field(default=None, ge=0)
    action_state_counter: Optional[float] = Field(default=None)
    l_cancel_status: Optional[int] = Field(default=None)
    is_airborne: Optional[bool] = Field(default=None)

    class Config:
        """Pydantic model configuration."""

        frozen = True
