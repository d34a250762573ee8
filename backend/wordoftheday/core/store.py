from __future__ import annotations

import logging
from typing import List

from sqlalchemy import delete, insert, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..config import DatabaseSettings
from ..models import Word, WordRecord
from .database import create_schema, database_url, make_engine, make_sessionmaker
from .errors import StoreError, WordNotFoundError

logger = logging.getLogger(__name__)

_COLUMNS = (WordRecord.id, WordRecord.word, WordRecord.custom_definition)


def _to_word(row) -> Word:
    return Word(id=row.id, word=row.word, custom_definition=row.custom_definition or "")


class WordStore:
    """
    Persistence for word records. Every call checks a connection out of the
    engine pool for a single statement and returns it before handing back a
    plain Word.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = make_sessionmaker(engine)

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "WordStore":
        engine = make_engine(database_url(settings))
        return cls(engine)

    def create_schema(self) -> None:
        create_schema(self.engine)

    def ping(self) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreError("unable to ping database", exc) from exc

    def insert_word(self, word: str, custom_definition: str = "") -> Word:
        stmt = (
            insert(WordRecord)
            .values(word=word, custom_definition=custom_definition or "")
            .returning(*_COLUMNS)
        )
        try:
            with self._session_factory.begin() as db:
                inserted = _to_word(db.execute(stmt).one())
        except SQLAlchemyError as exc:
            raise StoreError("unable to insert word", exc) from exc

        logger.info("Word inserted successfully id=%s", inserted.id)
        return inserted

    def list_words(self) -> List[Word]:
        try:
            with self._session_factory() as db:
                words = [_to_word(row) for row in db.execute(select(*_COLUMNS))]
        except SQLAlchemyError as exc:
            raise StoreError("unable to get words", exc) from exc

        logger.info("Words queried successfully row_count=%d", len(words))
        return words

    def delete_word(self, word_id: int) -> Word:
        stmt = delete(WordRecord).where(WordRecord.id == word_id).returning(*_COLUMNS)
        try:
            with self._session_factory.begin() as db:
                row = db.execute(stmt).one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError("unable to delete word", exc) from exc

        if row is None:
            raise WordNotFoundError(f"unable to delete word: no word with id {word_id}")

        deleted = _to_word(row)
        logger.info("Word deleted successfully id=%s", deleted.id)
        return deleted
