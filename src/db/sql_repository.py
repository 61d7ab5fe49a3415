"""Implementation of BlobStore using SQLAlchemy"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import RepositoryError
from src.db.schema import DBBlob


class SQLBlobStore:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get(self, key: str) -> str | None:
        """Get the blob stored under key, if a record exists."""
        blob_db = self._fetch_blob(key)
        if blob_db:
            return blob_db.value
        return None

    def set(self, key: str, value: str) -> None:
        """
        Insert or overwrite. Last writer wins: two observers writing the same key
        computed the same blob from the same log, so a stale overwrite is harmless.
        """
        try:
            blob_db = self._fetch_blob(key)
            if blob_db is None:
                self.db.add(DBBlob(key=key, value=value))
            else:
                blob_db.value = value
            self.db.commit()
        except SQLAlchemyError as err:
            self.db.rollback()
            raise RepositoryError(f"Could not store blob {key!r}") from err

    def delete(self, key: str) -> bool:
        """Remove a blob. Returns whether a record existed."""
        blob_db = self._fetch_blob(key)
        if not blob_db:
            return False
        self.db.delete(blob_db)
        self.db.commit()
        return True

    def _fetch_blob(self, key: str) -> DBBlob | None:
        query = select(DBBlob).where(DBBlob.key == key)
        return self.db.scalar(query)
