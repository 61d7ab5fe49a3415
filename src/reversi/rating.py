"""
Elo ratings over finished games.

The table is updated incrementally: the watermark remembers the creation time of the last game that
was folded in, so feeding the same games again changes nothing.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Self

from src.core.models import DerivedState, PlayerName, RatingTable, as_utc
from src.core.shared_types import Winner

logger = logging.getLogger(__name__)

ELO_BASE = 1200
ELO_K = 32

SCORE_BLACK: dict[Winner, float] = {
    Winner.BLACK: 1.0,
    Winner.WHITE: 0.0,
    Winner.DRAW: 0.5,
}


@dataclass(frozen=True)
class GameOutcome:
    """What the rating engine needs from one game: when its root was created and how it ended."""

    created: datetime
    black_player: Optional[PlayerName]
    white_player: Optional[PlayerName]
    finished: bool
    winner: Optional[Winner]

    @classmethod
    def from_state(cls, created: datetime, state: DerivedState) -> Self:
        return cls(
            created=as_utc(created),
            black_player=state.black_player,
            white_player=state.white_player,
            finished=state.finished,
            winner=state.winner,
        )


def round_half_up(value: float) -> int:
    """`round()` rounds halves to even. Observers sharing a table must agree, so pin the rule down."""
    return math.floor(value + 0.5)


def expected_score(rating: int, opponent_rating: int) -> float:
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / 400.0))


def current_rating(table: RatingTable, player: PlayerName) -> int:
    return table.ratings.get(player, ELO_BASE)


def update_ratings(table: RatingTable, games: Iterable[GameOutcome]) -> RatingTable:
    """Fold finished games into a copy of the table, oldest first. Games at or before the watermark are skipped."""
    updated = RatingTable(watermark=table.watermark, ratings=dict(table.ratings))

    for game in sorted(games, key=lambda game: game.created):
        if updated.watermark is not None and game.created <= updated.watermark:
            continue
        if not game.finished or game.winner is None or not game.black_player or not game.white_player:
            # skip, but keep going: later games in the batch are still processed
            continue

        black = current_rating(updated, game.black_player)
        white = current_rating(updated, game.white_player)
        expected_black = expected_score(black, white)
        score_black = SCORE_BLACK[game.winner]

        updated.ratings[game.black_player] = round_half_up(black + ELO_K * (score_black - expected_black))
        updated.ratings[game.white_player] = round_half_up(
            white + ELO_K * ((1 - score_black) - (1 - expected_black))
        )
        updated.watermark = game.created
        logger.info(
            "Rated %s (%d -> %d) vs %s (%d -> %d): %s",
            game.black_player,
            black,
            updated.ratings[game.black_player],
            game.white_player,
            white,
            updated.ratings[game.white_player],
            game.winner,
        )
    return updated
