"""Persists the rating table in the blob store and feeds finished games into it."""

import logging
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from src.core.exceptions import RepositoryError
from src.core.models import PlayerName, RatingTable
from src.db.repository import BlobStore
from src.reversi.rating import GameOutcome, current_rating, update_ratings

logger = logging.getLogger(__name__)

RATINGS_KEY = "ratings"

_table_adapter: TypeAdapter[RatingTable] = TypeAdapter(RatingTable)


class RatingService:
    def __init__(self, store: BlobStore) -> None:
        self.store = store

    def load(self) -> RatingTable:
        """The stored table, or an empty one. A corrupt table is an error: silently starting over would reset everybody."""
        blob = self.store.get(RATINGS_KEY)
        if blob is None:
            return RatingTable()
        try:
            return _table_adapter.validate_json(blob)
        except ValidationError as err:
            raise RepositoryError("Stored rating table is unreadable.") from err

    def save(self, table: RatingTable) -> None:
        self.store.set(RATINGS_KEY, _table_adapter.dump_json(table).decode("utf-8"))

    def update(self, games: Iterable[GameOutcome]) -> RatingTable:
        before = self.load()
        after = update_ratings(before, games)
        if after != before:
            self.save(after)
            logger.info("Rating watermark moved from %s to %s", before.watermark, after.watermark)
        return after

    def rating(self, player: PlayerName) -> int:
        return current_rating(self.load(), player)
