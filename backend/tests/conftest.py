from __future__ import annotations

import os
from typing import List, Optional

import pytest

from wordoftheday.core.database import make_engine
from wordoftheday.core.errors import StoreError
from wordoftheday.core.service import WordService
from wordoftheday.core.store import WordStore
from wordoftheday.models import Word


class FakeWordStore:
    """
    Canned responses for the store capabilities. Setting `err` makes every
    call raise it, to check how failures are wrapped.
    """

    def __init__(self):
        self.insert_word_response: Optional[Word] = None
        self.delete_word_response: Optional[Word] = None
        self.list_words_response: List[Word] = []
        self.err: Optional[StoreError] = None
        self.calls: List[tuple] = []

    def insert_word(self, word: str, custom_definition: str = "") -> Word:
        self.calls.append(("insert_word", word, custom_definition))
        if self.err:
            raise self.err
        return self.insert_word_response

    def delete_word(self, word_id: int) -> Word:
        self.calls.append(("delete_word", word_id))
        if self.err:
            raise self.err
        return self.delete_word_response

    def list_words(self) -> List[Word]:
        self.calls.append(("list_words",))
        if self.err:
            raise self.err
        return list(self.list_words_response)


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine):
    s = WordStore(engine)
    s.create_schema()
    return s


@pytest.fixture
def service(store):
    return WordService.from_store(store)


@pytest.fixture
def fake_store():
    return FakeWordStore()


@pytest.fixture
def fake_service(fake_store):
    return WordService(querier=fake_store, modifier=fake_store)


_ENV_PREFIXES = ("SERVER_", "HTTP_PROXY_", "DB_", "SMTP_", "LOG_")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Settings read the environment and ./.env, keep both out of the tests."""
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
