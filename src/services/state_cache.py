"""
Incremental cache in front of the replay engine.

A stored state is reused only while the fingerprint of the reply set is unchanged.
The cache is purely an optimisation: with it disabled, every call replays from scratch and
returns exactly the same states.
"""

import hashlib
import json
import logging
from dataclasses import replace
from typing import Callable, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from src.core.models import CacheEntry, DerivedState, Fingerprint, Post
from src.db.repository import BlobStore
from src.reversi.replay import compute_state

logger = logging.getLogger(__name__)

ReplayFn = Callable[[Post, Sequence[Post]], DerivedState]

_entry_adapter: TypeAdapter[CacheEntry] = TypeAdapter(CacheEntry)


def _canonical(reply: Post) -> str:
    metadata = reply.json_metadata
    if not isinstance(metadata, str):
        metadata = json.dumps(metadata, sort_keys=True, default=str)
    return json.dumps([reply.author, reply.created.isoformat(), reply.permlink, metadata])


def fingerprint(replies: Sequence[Post], content_hash: bool = False) -> Fingerprint:
    """(count, newest timestamp), optionally strengthened with a digest of every record."""
    ordered = sorted(replies, key=lambda reply: reply.created)
    digest = None
    if content_hash:
        hasher = hashlib.sha256()
        for reply in ordered:
            hasher.update(_canonical(reply).encode("utf-8"))
            hasher.update(b"\n")
        digest = hasher.hexdigest()
    return Fingerprint(
        count=len(ordered),
        last_created=ordered[-1].created if ordered else None,
        digest=digest,
    )


class StateCache:
    """Memoizes DerivedStates per game id in a BlobStore."""

    def __init__(
        self,
        store: BlobStore,
        compute: ReplayFn = compute_state,
        enabled: bool = True,
        content_hash: bool = False,
    ) -> None:
        self.store = store
        self.compute = compute
        self.enabled = enabled
        self.content_hash = content_hash

    @staticmethod
    def key(game_id: str) -> str:
        return f"state:{game_id}"

    def get_or_compute(self, game_id: str, root: Post, replies: Sequence[Post]) -> DerivedState:
        if not self.enabled:
            return self.compute(root, replies)

        current = fingerprint(replies, self.content_hash)
        entry = self._load(game_id)
        if entry is not None and entry.fingerprint == current:
            # the title lives on the root, which can be edited without touching the replies
            return replace(entry.state, title=root.title)

        logger.info("Replaying game %s (%d replies)", game_id, current.count)
        state = self.compute(root, replies)
        self.store.set(self.key(game_id), _entry_adapter.dump_json(CacheEntry(current, state)).decode("utf-8"))
        return state

    def _load(self, game_id: str) -> Optional[CacheEntry]:
        blob = self.store.get(self.key(game_id))
        if blob is None:
            return None
        try:
            return _entry_adapter.validate_json(blob)
        except ValidationError:
            logger.warning("Discarding unreadable cache entry for game %s", game_id)
            return None
