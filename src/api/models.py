"""Requests and Response models"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from src.core.models import Post, as_utc
from src.core.shared_types import Color, Winner

PlayerName = str


# --- REQUEST MODELS ---
class PostRecord(BaseModel):
    """A post as handed over by the log-fetching collaborator (content-store JSON)."""

    author: str
    created: datetime
    json_metadata: str | dict[str, Any] = "{}"
    permlink: str = ""
    title: str = ""

    @field_validator("created")
    @classmethod
    def validate_created(cls, value: datetime) -> datetime:
        return as_utc(value)

    def to_post(self) -> Post:
        return Post(
            author=self.author,
            created=self.created,
            json_metadata=self.json_metadata,
            permlink=self.permlink,
            title=self.title,
        )


class GameStateRequest(BaseModel):
    game_id: str
    root: PostRecord
    replies: list[PostRecord] = Field(default_factory=list)


class RatingsUpdateRequest(BaseModel):
    games: list[GameStateRequest]


# --- RESPONSE MODELS ---
class GameStateResponse(BaseModel):
    game_id: str
    title: str
    status: str
    board: str
    black_player: PlayerName
    white_player: Optional[PlayerName]
    turn: Optional[Color]
    applied_moves: int
    finished: bool
    winner: Optional[Winner]
    score: dict[Color, int]
    timeout_minutes: int
    last_move_time: datetime
    move_history: list[str]
    timeout_claimable: bool
    spectator_replies: int = 0


class RatingResponse(BaseModel):
    player: PlayerName
    rating: int


class PostDraft(BaseModel):
    """A reply ready to be signed and broadcast by the transport collaborator."""

    title: str
    body: str
    json_metadata: dict[str, Any]
