"""
Game records and events, parsed out of untrusted posts.

The content store is an open log: game roots and replies share it with comments, votes, and other
applications' traffic. Anything that does not parse into one of the shapes below is noise and is dropped
(returned as None), never raised.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictInt,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from src.core.exceptions import InvalidRecordError
from src.core.models import Post
from src.core.shared_types import Action, Color
from src.reversi.board import NUM_CELLS
from src.reversi.timeouts import DEFAULT_TIMEOUT_MINUTES, clamp_timeout_minutes

logger = logging.getLogger(__name__)

APP_NAME = "reversteem"
APP_VERSION = "0.1"
APP_INFO = f"{APP_NAME}/{APP_VERSION}"
GAME_START = "game_start"


# --- WIRE SHAPES (json_metadata) ---
def _whole_number(value: Any) -> Any:
    """JSON has one number type: 19.0 and 19 are the same index. Fractions stay floats and are rejected."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


WholeNumber = Annotated[StrictInt, BeforeValidator(_whole_number)]


class _ActionMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    app: str

    @field_validator("app")
    @classmethod
    def validate_app(cls, value: str) -> str:
        if not value.startswith(APP_NAME + "/"):
            raise ValueError(f"Not a {APP_NAME} record: app={value!r}")
        return value


class JoinMetadata(_ActionMetadata):
    action: Literal["join"] = "join"


class MoveMetadata(_ActionMetadata):
    action: Literal["move"] = "move"
    index: Annotated[WholeNumber, Field(ge=0, lt=NUM_CELLS)]
    move_number: Annotated[WholeNumber, Field(alias="moveNumber", ge=0)]


class TimeoutClaimMetadata(_ActionMetadata):
    action: Literal["timeout_claim"] = "timeout_claim"
    claim_against: Color = Field(alias="claimAgainst")
    move_number: Annotated[WholeNumber, Field(alias="moveNumber", ge=0)]


ActionMetadata = Annotated[
    Union[JoinMetadata, MoveMetadata, TimeoutClaimMetadata],
    Field(discriminator="action"),
]
_action_adapter: TypeAdapter[ActionMetadata] = TypeAdapter(ActionMetadata)


class GameStartMetadata(BaseModel):
    """Root metadata. Lenient on purpose: a root always yields a GameRecord, bad fields fall back to defaults."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    app: str = APP_INFO
    type: str = GAME_START
    black: Optional[str] = None
    timeout_minutes: int = Field(default=DEFAULT_TIMEOUT_MINUTES, alias="timeoutMinutes")
    invites: list[str] = Field(default_factory=list)

    @field_validator("app", "type", "black", mode="before")
    @classmethod
    def validate_text(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str):
            return value
        return cls.model_fields[info.field_name].default

    @field_validator("timeout_minutes", mode="before")
    @classmethod
    def validate_timeout_minutes(cls, value: Any) -> int:
        return clamp_timeout_minutes(value)

    @field_validator("invites", mode="before")
    @classmethod
    def validate_invites(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(name).lower() for name in value if str(name)]


# --- DOMAIN EVENTS ---
@dataclass(frozen=True)
class GameRecord:
    author: str
    created: datetime
    timeout_minutes: int
    title: str = ""
    permlink: str = ""
    invites: tuple[str, ...] = ()

    def admits(self, player: str) -> bool:
        """Open games admit anybody. Games with an invite list only admit the invited."""
        return not self.invites or player.lower() in self.invites


@dataclass(frozen=True)
class JoinEvent:
    author: str
    created: datetime
    position: int


@dataclass(frozen=True)
class MoveEvent:
    author: str
    created: datetime
    position: int
    index: int
    move_number: int


@dataclass(frozen=True)
class TimeoutClaimEvent:
    author: str
    created: datetime
    position: int
    claim_against: Color
    move_number: int


ChildEvent = JoinEvent | MoveEvent | TimeoutClaimEvent


def load_metadata(post: Post) -> Optional[dict[str, Any]]:
    """Decode `json_metadata`, or None if it is not a JSON object."""
    metadata = post.json_metadata
    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except (ValueError, RecursionError):
            # ValueError also covers integers past the int-string conversion limit
            return None
    return metadata if isinstance(metadata, dict) else None


def parse_game_record(root: Post) -> GameRecord:
    """Never fails. Each unusable field falls back to its own default, the others are kept."""
    metadata = GameStartMetadata.model_validate(load_metadata(root) or {})
    return GameRecord(
        author=root.author,
        created=root.created,
        timeout_minutes=metadata.timeout_minutes,
        title=root.title,
        permlink=root.permlink,
        invites=tuple(metadata.invites),
    )


def parse_child_event(reply: Post, position: int) -> Optional[ChildEvent]:
    """`position` is the reply's place in the log as delivered. It breaks timestamp ties."""
    raw = load_metadata(reply)
    if raw is None:
        return None
    try:
        metadata = _action_adapter.validate_python(raw)
    except ValidationError as err:
        logger.debug("Dropping reply by %s at position %d: %d validation error(s)", reply.author, position, err.error_count())
        return None

    if isinstance(metadata, JoinMetadata):
        return JoinEvent(reply.author, reply.created, position)
    if isinstance(metadata, MoveMetadata):
        return MoveEvent(reply.author, reply.created, position, metadata.index, metadata.move_number)
    return TimeoutClaimEvent(
        reply.author, reply.created, position, metadata.claim_against, metadata.move_number
    )


def is_game_root(post: Post) -> bool:
    metadata = load_metadata(post)
    if metadata is None:
        return False
    app = metadata.get("app")
    return isinstance(app, str) and app.startswith(APP_NAME + "/") and metadata.get("type") == GAME_START


def is_game_reply(post: Post) -> bool:
    metadata = load_metadata(post)
    if metadata is None:
        return False
    app = metadata.get("app")
    return (
        isinstance(app, str)
        and app.startswith(APP_NAME + "/")
        and metadata.get("action") in {action.value for action in Action}
    )


def classify_replies(replies: list[Post]) -> tuple[list[Post], list[Post]]:
    """Split a thread into (game replies, spectator replies), keeping log order within each."""
    game_replies: list[Post] = []
    spectator_replies: list[Post] = []
    for reply in replies:
        if is_game_reply(reply):
            game_replies.append(reply)
        else:
            spectator_replies.append(reply)
    return game_replies, spectator_replies


# --- OUTGOING METADATA ---
def _dump(model_cls: type[BaseModel], **fields: Any) -> dict[str, Any]:
    try:
        return model_cls(app=APP_INFO, **fields).model_dump(by_alias=True, mode="json", exclude_none=True)
    except ValidationError as err:
        raise InvalidRecordError(f"Cannot build {model_cls.__name__}: {err}") from err


def game_start_metadata(black: str, timeout_minutes: int, invites: list[str] | None = None) -> dict[str, Any]:
    return _dump(
        GameStartMetadata,
        black=black,
        timeout_minutes=timeout_minutes,
        invites=invites or [],
    )


def join_metadata() -> dict[str, Any]:
    return _dump(JoinMetadata)


def move_metadata(index: int, move_number: int) -> dict[str, Any]:
    return _dump(MoveMetadata, index=index, move_number=move_number)


def timeout_claim_metadata(claim_against: Color, move_number: int) -> dict[str, Any]:
    return _dump(TimeoutClaimMetadata, claim_against=claim_against, move_number=move_number)
