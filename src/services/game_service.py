"""Orchestration between the transport collaborator, the replay engine, and the cache / rating stores."""

from datetime import datetime, timezone
from typing import Optional, Self, Sequence

from src.api.models import (
    GameStateRequest,
    GameStateResponse,
    PostDraft,
    RatingResponse,
    RatingsUpdateRequest,
)
from src.core.config import SETTINGS, Settings
from src.core.exceptions import GameStateError, IllegalMoveError, NotYourTurnError
from src.core.models import DerivedState, PlayerName, Post, RatingTable
from src.core.shared_types import Color, Winner, opponent
from src.db.repository import BlobStore
from src.reversi.board import NUM_CELLS, Board, index_to_coord, legal_move_flips
from src.reversi.events import classify_replies, join_metadata, move_metadata, timeout_claim_metadata
from src.reversi.rating import GameOutcome
from src.reversi.replay import compute_state
from src.reversi.timeouts import is_timeout_claimable, preset_name
from src.services.rating_service import RatingService
from src.services.state_cache import StateCache

DISCOVERY_TAGS = ["reversi", "othello", "board", "game", "steem"]


def game_status(state: DerivedState) -> str:
    if state.finished:
        if state.winner == Winner.DRAW:
            return "Finished: Draw"
        winner = state.black_player if state.winner == Winner.BLACK else state.white_player
        return f"Finished: {winner} wins"
    if state.white_player is None:
        return "Waiting for opponent"
    return "In Progress"


def build_game_tags(timeout_minutes: int, rating: int) -> list[str]:
    """First tag: the time preset (or mins-N), second: the creator's rating. Used to filter game listings."""
    time_tag = preset_name(timeout_minutes) or f"mins-{timeout_minutes}"
    return [time_tag, f"elo-{rating}", *DISCOVERY_TAGS]


def _player(state: DerivedState, color: Color) -> Optional[PlayerName]:
    return state.black_player if color == Color.BLACK else state.white_player


class GameService:
    """Orchestration of layers for games replayed from a content store."""

    def __init__(self, cache: StateCache, ratings: RatingService) -> None:
        self.cache = cache
        self.ratings = ratings

    @classmethod
    def from_store(cls, store: BlobStore, settings: Settings = SETTINGS) -> Self:
        cache = StateCache(
            store,
            enabled=settings.cache_enabled,
            content_hash=settings.cache_content_hash,
        )
        return cls(cache, RatingService(store))

    # -- engine entry points --
    def compute_state(self, root: Post, replies: Sequence[Post]) -> DerivedState:
        """Fresh replay, bypassing the cache."""
        return compute_state(root, replies)

    def get_or_compute(self, game_id: str, root: Post, replies: Sequence[Post]) -> DerivedState:
        return self.cache.get_or_compute(game_id, root, replies)

    # -- API routes logic --
    def get_game_state(self, request: GameStateRequest, now: Optional[datetime] = None) -> GameStateResponse:
        """Replay (or fetch from cache) one game thread. Spectator comments in the thread are counted, not replayed."""
        root = request.root.to_post()
        game_replies, spectator_replies = classify_replies([reply.to_post() for reply in request.replies])
        state = self.get_or_compute(request.game_id, root, game_replies)
        return GameStateResponse(
            game_id=request.game_id,
            title=state.title,
            status=game_status(state),
            board=Board(list(state.board)).to_string(),
            black_player=state.black_player,
            white_player=state.white_player,
            turn=state.turn,
            applied_moves=state.applied_moves,
            finished=state.finished,
            winner=state.winner,
            score=state.score,
            timeout_minutes=state.timeout_minutes,
            last_move_time=state.last_move_time,
            move_history=[index_to_coord(index) for index in state.move_history],
            timeout_claimable=is_timeout_claimable(state, now or datetime.now(timezone.utc)),
            spectator_replies=len(spectator_replies),
        )

    def update_ratings(self, request: RatingsUpdateRequest) -> RatingTable:
        """Replay every listed game and fold the finished ones into the rating table."""
        outcomes: list[GameOutcome] = []
        for game in request.games:
            root = game.root.to_post()
            game_replies, _ = classify_replies([reply.to_post() for reply in game.replies])
            state = self.get_or_compute(game.game_id, root, game_replies)
            outcomes.append(GameOutcome.from_state(root.created, state))
        return self.ratings.update(outcomes)

    def get_rating(self, player: PlayerName) -> RatingResponse:
        return RatingResponse(player=player, rating=self.ratings.rating(player))

    def game_tags(self, timeout_minutes: int, player: PlayerName) -> list[str]:
        return build_game_tags(timeout_minutes, self.ratings.rating(player))

    # -- drafting replies --
    def draft_join(self, state: DerivedState, player: PlayerName) -> PostDraft:
        if state.finished:
            raise GameStateError("Cannot join a finished game.")
        if state.white_player is not None:
            raise GameStateError(f"Game already has an opponent: {state.white_player}")
        if player == state.black_player:
            raise GameStateError("Cannot join your own game.")
        body = f"## @{player} joined as White\n\n" + Board(list(state.board)).to_markdown()
        return PostDraft(title="Join Game", body=body, json_metadata=join_metadata())

    def draft_move(self, state: DerivedState, player: PlayerName, index: int) -> PostDraft:
        """Check the move locally and draft the reply. Replay stays the authority on whether it counts."""
        if state.finished or state.turn is None:
            raise GameStateError("Game is finished.")
        if state.white_player is None:
            raise GameStateError("No opponent yet.")
        if player != _player(state, state.turn):
            raise NotYourTurnError(f"It is {state.turn}'s turn, not {player}'s.")

        if not 0 <= index < NUM_CELLS:
            raise IllegalMoveError(f"No such cell: {index}")
        board = Board(list(state.board))
        flips = legal_move_flips(board, index, state.turn)
        if not flips:
            raise IllegalMoveError(f"Move not allowed: {index_to_coord(index)}")
        board.place(index, state.turn, flips)

        body = (
            f"## Move by @{player}\n\n"
            f"Played at {index_to_coord(index)}\n\n" + board.to_markdown()
        )
        return PostDraft(
            title="Reversi Move",
            body=body,
            json_metadata=move_metadata(index, state.applied_moves),
        )

    def draft_timeout_claim(self, state: DerivedState, player: PlayerName, now: datetime) -> PostDraft:
        if not is_timeout_claimable(state, now) or state.turn is None:
            raise GameStateError("No timeout can be claimed right now.")
        if player != _player(state, opponent(state.turn)):
            raise NotYourTurnError(f"Only the opponent of {state.turn} can claim a timeout.")
        body = f"## @{player} claims a timeout against {state.turn}\n"
        return PostDraft(
            title="Timeout Claim",
            body=body,
            json_metadata=timeout_claim_metadata(state.turn, state.applied_moves),
        )
