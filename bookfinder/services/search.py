"""Title search workflow: validation, fetch lifecycle, results and selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError

from bookfinder.domain.models import BookDoc, ResultSet, SearchStatus
from bookfinder.logging import logger
from bookfinder.services.exceptions import (
    NETWORK_ERROR_MESSAGE,
    NoResultsError,
    QueryValidationError,
    SearchError,
    SelectionError,
)
from bookfinder.services.query_store import QueryStore

RESULT_LIMIT = 20


class TitleSearchClient(Protocol):
    async def search_by_title(self, title: str) -> Sequence[BookDoc]: ...

    def cover_url(self, doc: BookDoc, size: str = "M") -> str: ...


@dataclass(slots=True)
class FinderState:
    results: ResultSet = ()
    status: SearchStatus = field(default_factory=SearchStatus.idle)
    selected: BookDoc | None = None
    generation: int = 0


class BookFinder:
    """Owns the application state and is the only place that mutates it.

    Submissions are not queued or cancelled. When two overlap, each one
    writes its outcome as it resolves, so the last to resolve is what
    stays visible.
    """

    def __init__(
        self,
        client: TitleSearchClient,
        query_store: QueryStore,
        *,
        result_limit: int = RESULT_LIMIT,
    ) -> None:
        self._client = client
        self.query_store = query_store
        self.result_limit = result_limit
        self.state = FinderState()

    @property
    def query(self) -> str:
        return self.query_store.current

    @property
    def results(self) -> ResultSet:
        return self.state.results

    @property
    def status(self) -> SearchStatus:
        return self.state.status

    @property
    def generation(self) -> int:
        return self.state.generation

    @property
    def selected(self) -> BookDoc | None:
        return self.state.selected

    def set_query(self, text: str) -> None:
        self.query_store.set_query(text)

    async def search(self, query_text: str | None = None) -> SearchStatus:
        """Explicit user submission: remember the text, then submit it."""

        if query_text is not None:
            self.set_query(query_text)
        text = self.query
        try:
            self.query_store.remember(text)
        except SQLAlchemyError as exc:
            logger.warning("query_remember_failed", query=text, error=str(exc))
        return await self.submit(text)

    async def replay_remembered(self) -> str | None:
        """Startup path: re-run the remembered query without re-saving it."""

        remembered = self.query_store.load_remembered()
        if remembered is None:
            return None
        await self.submit(remembered)
        return remembered

    async def submit(self, query_text: str) -> SearchStatus:
        try:
            _validate(query_text)
        except QueryValidationError as exc:
            self._finish_failed(query_text, exc)
            return self.status

        self._set_status(SearchStatus.loading(), query_text)
        try:
            docs = await self._client.search_by_title(query_text)
            if not docs:
                raise NoResultsError()
        except SearchError as exc:
            self._finish_failed(query_text, exc)
        except Exception:
            self._replace_results(())
            self._set_status(SearchStatus.failed(NETWORK_ERROR_MESSAGE), query_text)
            raise
        else:
            self._replace_results(tuple(docs[: self.result_limit]))
            self.query_store.last_successful = query_text
            self._set_status(SearchStatus.succeeded(), query_text, results=len(self.state.results))
        return self.status

    def select(self, item: BookDoc) -> BookDoc:
        if item not in self.state.results:
            raise SelectionError("Selected book is not part of the current results.")
        self.state.selected = item
        return item

    def select_index(self, index: int, *, generation: int | None = None) -> BookDoc:
        """Select by position, optionally pinned to the result set it was shown from."""

        if generation is not None and generation != self.state.generation:
            raise SelectionError(
                f"Result set {generation} was replaced by {self.state.generation}."
            )
        if not 0 <= index < len(self.state.results):
            raise SelectionError(f"No book at position {index} in the current results.")
        return self.select(self.state.results[index])

    def dismiss(self) -> None:
        self.state.selected = None

    def cover_url(self, doc: BookDoc, size: str = "M") -> str:
        return self._client.cover_url(doc, size)

    def _replace_results(self, results: ResultSet) -> None:
        # Every replacement gets a new generation, even an empty one.
        self.state.results = results
        self.state.generation += 1

    def _finish_failed(self, query_text: str, exc: SearchError) -> None:
        self._replace_results(())
        self._set_status(SearchStatus.failed(exc.user_message), query_text)

    def _set_status(self, status: SearchStatus, query_text: str, **extra) -> None:
        self.state.status = status
        logger.info(
            "search_status_changed",
            phase=status.phase,
            message=status.message,
            query=query_text,
            **extra,
        )


def _validate(query_text: str) -> str:
    title = (query_text or "").strip()
    if not title:
        raise QueryValidationError()
    return title


__all__ = ["BookFinder", "FinderState", "RESULT_LIMIT", "TitleSearchClient"]
