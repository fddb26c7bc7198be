"""Live query text plus the single remembered search."""

from __future__ import annotations

from typing import Protocol

from bookfinder.logging import logger

DEFAULT_REMEMBER_KEY = "lastQuery"


class StringStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class QueryStore:
    """Holds the query being edited and the last one that found books.

    ``remember`` and ``load_remembered`` use one fixed key, so the store
    keeps at most one persisted query and each submission overwrites it.
    """

    def __init__(self, storage: StringStore, *, key: str = DEFAULT_REMEMBER_KEY) -> None:
        self._storage = storage
        self._key = key
        self.current = ""
        self.last_successful: str | None = None

    def set_query(self, text: str) -> None:
        self.current = text

    def load_remembered(self) -> str | None:
        value = self._storage.get(self._key)
        if not value:
            return None
        self.current = value
        logger.info("remembered_query_loaded", query=value)
        return value

    def remember(self, text: str) -> None:
        self._storage.set(self._key, text)
        logger.info("query_remembered", query=text)


__all__ = ["DEFAULT_REMEMBER_KEY", "QueryStore", "StringStore"]
