"""
The replay engine: folds a game root and its replies into a DerivedState.

Every observer replaying the same log must land on the same state, so:
* replies are ordered by their recorded timestamp only (stable: ties keep the order the log was delivered in),
* invalid replies are skipped, never raised on (they are how cheating attempts look from here),
* the wall clock is never consulted. A game only ends on time through an explicit, recorded timeout claim.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Self, Sequence

from src.core.models import DerivedState, Post
from src.core.shared_types import Color, Winner, opponent
from src.reversi.board import Board, count_discs, has_any_legal_move, legal_move_flips
from src.reversi.events import (
    ChildEvent,
    GameRecord,
    JoinEvent,
    MoveEvent,
    TimeoutClaimEvent,
    parse_child_event,
    parse_game_record,
)
from src.reversi.timeouts import claim_is_late
from src.reversi.turns import resolve_turn

logger = logging.getLogger(__name__)


def ordered_events(replies: Sequence[Post]) -> list[ChildEvent]:
    """Parse the replies and sort them by timestamp. `sorted` is stable, so equal timestamps keep log order."""
    events = [
        event
        for position, reply in enumerate(replies)
        if (event := parse_child_event(reply, position)) is not None
    ]
    return sorted(events, key=lambda event: event.created)


@dataclass
class Replay:
    """Running state while folding over the events. Lives only for the duration of one `compute_state` call."""

    record: GameRecord
    board: Board
    turn: Color
    last_move_time: datetime
    white_player: Optional[str] = None
    game_start_time: Optional[datetime] = None
    applied: list[int] = field(default_factory=list)
    claims: list[TimeoutClaimEvent] = field(default_factory=list)
    halted: bool = False

    @classmethod
    def start(cls, record: GameRecord) -> Self:
        return cls(
            record=record,
            board=Board.starting_position(),
            turn=Color.BLACK,
            last_move_time=record.created,
        )

    @property
    def black_player(self) -> str:
        return self.record.author

    def player(self, color: Color) -> Optional[str]:
        return self.black_player if color == Color.BLACK else self.white_player

    def apply(self, event: ChildEvent) -> None:
        if isinstance(event, JoinEvent):
            self._join(event)
        elif isinstance(event, MoveEvent):
            self._move(event)
        else:
            # adjudicated once the move stream is exhausted: later moves can still change the turn
            self.claims.append(event)

    def _join(self, event: JoinEvent) -> None:
        if self.white_player is not None:
            return
        if event.author == self.black_player:
            logger.debug("Ignoring join by the black player %s", event.author)
            return
        if not self.record.admits(event.author):
            logger.debug("Ignoring join by uninvited player %s", event.author)
            return
        self.white_player = event.author
        self.game_start_time = event.created

    def _move(self, event: MoveEvent) -> None:
        mover = resolve_turn(self.board, self.turn)
        if mover is None:
            # Nobody can move: the game ended here, whatever else the log says.
            self.halted = True
            return
        self.turn = mover

        if event.move_number != len(self.applied):
            logger.debug("Rejecting move #%d by %s: %d moves applied", event.move_number, event.author, len(self.applied))
            return
        if self.white_player is None:
            logger.debug("Rejecting move by %s: no opponent has joined", event.author)
            return
        if event.author != self.player(mover):
            logger.debug("Rejecting move by %s: it is %s's turn", event.author, mover)
            return

        flips = legal_move_flips(self.board, event.index, mover)
        if not flips:
            logger.debug("Rejecting move by %s: index %d flips nothing", event.author, event.index)
            return

        self.board.place(event.index, mover, flips)
        self.applied.append(event.index)
        self.last_move_time = event.created
        self.turn = opponent(mover)

    def adjudicate_claims(self) -> Optional[Color]:
        """The colour of the first valid timeout claimant, if any."""
        claimant = opponent(self.turn)
        for claim in self.claims:
            if claim.move_number != len(self.applied):
                continue
            if claim.claim_against != self.turn:
                continue
            if claim.author != self.player(claimant):
                continue
            if claim_is_late(self.last_move_time, claim.created, self.record.timeout_minutes):
                return claimant
        return None


def compute_state(root: Post, replies: Sequence[Post]) -> DerivedState:
    """Replay the whole log from scratch. Any input, including no replies at all, yields a state."""
    replay = Replay.start(parse_game_record(root))
    for event in ordered_events(replies):
        replay.apply(event)
        if replay.halted:
            break

    # the player handed the turn after the last move might have to pass as well
    replay.turn = resolve_turn(replay.board, replay.turn) or replay.turn

    black, white = count_discs(replay.board)
    finished = not has_any_legal_move(replay.board, Color.BLACK) and not has_any_legal_move(replay.board, Color.WHITE)
    winner: Optional[Winner] = None
    if finished:
        winner = Winner.BLACK if black > white else Winner.WHITE if white > black else Winner.DRAW
    else:
        claimant = replay.adjudicate_claims()
        if claimant is not None:
            finished = True
            winner = Winner(claimant.value)

    return DerivedState(
        board=tuple(replay.board.cells),
        turn=None if finished else replay.turn,
        applied_moves=len(replay.applied),
        black_player=replay.black_player,
        white_player=replay.white_player,
        finished=finished,
        winner=winner,
        score={Color.BLACK: black, Color.WHITE: white},
        last_move_time=replay.last_move_time,
        timeout_minutes=replay.record.timeout_minutes,
        title=replay.record.title,
        game_start_time=replay.game_start_time,
        move_history=tuple(replay.applied),
    )
