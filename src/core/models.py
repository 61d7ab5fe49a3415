"""
Boundary layer data model(s).

These objects are passed across boundaries: the log-fetching collaborator hands `Post`s to the Service,
the replay engine returns a `DerivedState`, and the cache / rating stores persist `CacheEntry` and `RatingTable`.
(Decouples the wire format of the content store and the DB layout from the domain layer.)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from src.core.shared_types import Color, Winner

# Type aliases to make the models easier to read
PlayerName = str
Cell = Optional[Color]


def as_utc(moment: datetime) -> datetime:
    """Content stores hand out naive UTC timestamps. Make them comparable with aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass
class Post:
    """One record of the content store: a game root or a reply to it. Nothing about it is trusted."""

    author: str
    created: datetime
    json_metadata: str | dict[str, Any] = "{}"
    permlink: str = ""
    title: str = ""

    def __post_init__(self) -> None:
        self.created = as_utc(self.created)


@dataclass(frozen=True)
class DerivedState:
    """Everything the replay engine knows about a game. A pure function of (root, replies)."""

    board: tuple[Cell, ...]
    turn: Optional[Color]
    applied_moves: int
    black_player: PlayerName
    white_player: Optional[PlayerName]
    finished: bool
    winner: Optional[Winner]
    score: dict[Color, int]
    last_move_time: datetime
    timeout_minutes: int
    title: str = ""
    game_start_time: Optional[datetime] = None
    move_history: tuple[int, ...] = ()


@dataclass(frozen=True)
class Fingerprint:
    """Cheap summary of a reply set. `digest` is only filled in when content hashing is enabled."""

    count: int
    last_created: Optional[datetime]
    digest: Optional[str] = None


@dataclass(frozen=True)
class CacheEntry:
    fingerprint: Fingerprint
    state: DerivedState


@dataclass
class RatingTable:
    watermark: Optional[datetime] = None
    ratings: dict[PlayerName, int] = field(default_factory=dict)
