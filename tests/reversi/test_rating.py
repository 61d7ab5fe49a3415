"""Unit tests for src/reversi/rating.py"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from src.core.models import RatingTable
from src.core.shared_types import Winner
from src.reversi.rating import (
    ELO_BASE,
    GameOutcome,
    current_rating,
    expected_score,
    round_half_up,
    update_ratings,
)

DAY_ONE = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _game(
    day: int,
    winner: Optional[Winner] = Winner.BLACK,
    black: Optional[str] = "alice",
    white: Optional[str] = "bob",
    finished: bool = True,
) -> GameOutcome:
    return GameOutcome(
        created=DAY_ONE + timedelta(days=day),
        black_player=black,
        white_player=white,
        finished=finished,
        winner=winner if finished else None,
    )


def test_expected_score() -> None:
    assert expected_score(1200, 1200) == 0.5
    assert expected_score(1600, 1200) == pytest.approx(10 / 11)
    assert expected_score(1200, 1600) == pytest.approx(1 / 11)


@pytest.mark.parametrize("value, rounded", [(0.5, 1), (1.5, 2), (2.5, 3), (-0.5, 0), (1215.49, 1215)])
def test_round_half_up(value: float, rounded: int) -> None:
    assert round_half_up(value) == rounded


def test_unseen_player_has_base_rating() -> None:
    assert current_rating(RatingTable(), "nobody") == ELO_BASE == 1200


def test_black_win_between_new_players_is_symmetric() -> None:
    table = update_ratings(RatingTable(), [_game(0, Winner.BLACK)])
    assert table.ratings == {"alice": 1216, "bob": 1184}
    assert table.ratings["alice"] - 1200 == 1200 - table.ratings["bob"]
    assert table.watermark == DAY_ONE


def test_white_win_and_draw() -> None:
    assert update_ratings(RatingTable(), [_game(0, Winner.WHITE)]).ratings == {"alice": 1184, "bob": 1216}
    assert update_ratings(RatingTable(), [_game(0, Winner.DRAW)]).ratings == {"alice": 1200, "bob": 1200}


def test_ratings_build_on_each_other() -> None:
    """After alice wins once, a second win earns less: she was expected to win."""
    table = update_ratings(RatingTable(), [_game(0), _game(1)])
    # expected score for 1216 vs 1184 is ~0.546, so 32 * 0.454 = 14.5 -> 15
    assert table.ratings == {"alice": 1231, "bob": 1169}
    assert table.watermark == DAY_ONE + timedelta(days=1)


def test_games_are_processed_in_creation_order() -> None:
    in_order = update_ratings(RatingTable(), [_game(0, Winner.BLACK), _game(1, Winner.WHITE)])
    shuffled = update_ratings(RatingTable(), [_game(1, Winner.WHITE), _game(0, Winner.BLACK)])
    assert in_order == shuffled


def test_rerun_is_idempotent() -> None:
    games = [_game(0), _game(1, Winner.DRAW)]
    once = update_ratings(RatingTable(), games)
    twice = update_ratings(once, games)
    assert twice == once


def test_incremental_update_only_processes_new_games() -> None:
    first = update_ratings(RatingTable(), [_game(0)])
    second = update_ratings(first, [_game(0), _game(1, Winner.WHITE)])
    assert second == update_ratings(RatingTable(), [_game(0), _game(1, Winner.WHITE)])


def test_input_table_is_not_mutated() -> None:
    table = RatingTable()
    update_ratings(table, [_game(0)])
    assert table == RatingTable()


def test_unrated_games_are_skipped_but_batch_continues() -> None:
    games = [
        _game(0, finished=False),
        _game(1, white=None),
        _game(2, black=""),
        _game(3, Winner.BLACK),
    ]
    table = update_ratings(RatingTable(), games)
    assert table.ratings == {"alice": 1216, "bob": 1184}
    assert table.watermark == DAY_ONE + timedelta(days=3)


def test_unrated_game_does_not_move_the_watermark() -> None:
    table = update_ratings(RatingTable(), [_game(0), _game(5, finished=False)])
    assert table.watermark == DAY_ONE
