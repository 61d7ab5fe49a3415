"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.models import Post
from src.core.shared_types import Color
from src.db.schema import Base
from src.reversi.board import Board
from src.reversi.events import APP_INFO

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)

GAME_CREATED = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
BLACK = "alice"
WHITE = "bob"

ReplyFactory = Callable[..., Post]


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


@pytest.fixture
def root_post() -> Post:
    """A game created by alice with the default time limit."""
    return Post(
        author=BLACK,
        created=GAME_CREATED,
        json_metadata={"app": APP_INFO, "type": "game_start", "black": BLACK},
        permlink="reversteem-1",
        title="alice's game",
    )


@pytest.fixture
def reply() -> ReplyFactory:
    """Call the inner function with the author, minutes after game creation, and the action fields."""

    def _create_reply(author: str, minutes: float, **metadata: Any) -> Post:
        return Post(
            author=author,
            created=GAME_CREATED + timedelta(minutes=minutes),
            json_metadata={"app": APP_INFO, **metadata},
        )

    return _create_reply


@pytest.fixture
def join(reply: ReplyFactory) -> Callable[[str, float], Post]:
    def _join(author: str = WHITE, minutes: float = 1) -> Post:
        return reply(author, minutes, action="join")

    return _join


@pytest.fixture
def move(reply: ReplyFactory) -> Callable[[str, float, int, int], Post]:
    def _move(author: str, minutes: float, index: int, move_number: int) -> Post:
        return reply(author, minutes, action="move", index=index, moveNumber=move_number)

    return _move


@pytest.fixture
def claim(reply: ReplyFactory) -> Callable[[str, float, Color, int], Post]:
    def _claim(author: str, minutes: float, against: Color, move_number: int) -> Post:
        return reply(
            author,
            minutes,
            action="timeout_claim",
            claimAgainst=against.value,
            moveNumber=move_number,
        )

    return _claim


@pytest.fixture
def board_with() -> Callable[[dict[int, Color]], Board]:
    """Empty board with discs on the given indices."""

    def _create_board(discs: dict[int, Color]) -> Board:
        board = Board.empty()
        for index, color in discs.items():
            board.cells[index] = color
        return board

    return _create_board
