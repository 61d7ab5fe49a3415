"""Implementation of BlobStore in process memory (single process, or tests)."""

from threading import Lock


class InMemoryBlobStore:
    def __init__(self) -> None:
        self._blobs: dict[str, str] = {}
        self._lock = Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._blobs.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._blobs[key] = value

    def clear(self) -> None:
        with self._lock:
            self._blobs.clear()
