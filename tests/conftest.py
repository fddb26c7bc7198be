"""Shared pytest fixtures for the search workflow and storage tests."""

from __future__ import annotations

from typing import Any, Sequence

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from bookfinder.db.session import Database
from bookfinder.domain.models import BookDoc
from bookfinder.i18n import I18nService
from bookfinder.services.exceptions import SearchTransportError
from bookfinder.services.key_value import KeyValueStore
from bookfinder.services.query_store import QueryStore
from bookfinder.services.search import BookFinder


class FakeSearchClient:
    """Records every title it is asked for and replays canned outcomes."""

    def __init__(self, docs: Sequence[dict[str, Any]] | None = None, *, error: Exception | None = None) -> None:
        self.docs = [BookDoc.model_validate(doc) for doc in (docs or [])]
        self.error = error
        self.calls: list[str] = []

    async def search_by_title(self, title: str) -> list[BookDoc]:
        self.calls.append(title)
        if self.error is not None:
            raise self.error
        return list(self.docs)

    def cover_url(self, doc: BookDoc, size: str = "M") -> str:
        if not doc.cover_i:
            return "https://via.placeholder.com/150x200?text=No+Cover"
        return f"https://covers.openlibrary.org/b/id/{doc.cover_i}-{size}.jpg"


class MemoryStore:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


@pytest.fixture
def database():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    db = Database(engine=engine)
    db.create_all()
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture
def key_value_store(database) -> KeyValueStore:
    return KeyValueStore(database)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def query_store(memory_store) -> QueryStore:
    return QueryStore(memory_store)


@pytest.fixture
def i18n() -> I18nService:
    return I18nService(default_locale="en")


@pytest.fixture
def make_finder(query_store):
    def _factory(docs=None, *, error: Exception | None = None) -> tuple[BookFinder, FakeSearchClient]:
        client = FakeSearchClient(docs, error=error)
        return BookFinder(client, query_store), client

    return _factory


@pytest.fixture
def transport_error() -> SearchTransportError:
    return SearchTransportError("connection refused")
