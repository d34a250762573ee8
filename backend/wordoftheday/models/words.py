from dataclasses import dataclass

from sqlalchemy import Column, Integer, Text

from ..core.database import Base


class WordRecord(Base):
    __tablename__ = "words"
    # ids must never be reused after a delete, which SQLite only guarantees
    # with AUTOINCREMENT
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    word = Column(Text, nullable=False, default="", server_default="")
    custom_definition = Column(Text, nullable=False, default="", server_default="")


@dataclass(frozen=True)
class Word:
    """A word as seen outside the store. Never bound to a session."""

    id: int
    word: str
    custom_definition: str = ""
