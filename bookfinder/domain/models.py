"""Pydantic models shared across the search workflow and the bot layer."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

SearchPhase = Literal["idle", "loading", "succeeded", "failed"]


class BookDoc(BaseModel):
    """One matched work as returned in the search response `docs` list."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str = ""
    author_name: tuple[str, ...] | None = None
    cover_i: int | str | None = None
    first_publish_year: int | None = None
    publisher: tuple[str, ...] | None = None
    subject: tuple[str, ...] | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value):
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("author_name", "publisher", "subject", mode="before")
    @classmethod
    def _coerce_names(cls, value):
        if value is None:
            return None
        if isinstance(value, (str, int, float)):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return None
        return [str(item) for item in value if isinstance(item, (str, int, float))]

    @field_validator("first_publish_year", mode="before")
    @classmethod
    def _coerce_year(cls, value):
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return None

    @field_validator("cover_i", mode="before")
    @classmethod
    def _coerce_cover(cls, value):
        if isinstance(value, bool):
            return None
        return value if isinstance(value, (int, str)) else None


class SearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    docs: list[BookDoc] | None = None

    @field_validator("docs", mode="before")
    @classmethod
    def _drop_non_objects(cls, value):
        if isinstance(value, list):
            return [item for item in value if isinstance(item, (dict, BookDoc))]
        return value


class SearchStatus(BaseModel):
    """Current phase of the search workflow.

    ``message`` is only carried by the ``failed`` phase, so a ``loading``
    status can never show an error left over from a previous search.
    """

    model_config = ConfigDict(frozen=True)

    phase: SearchPhase = "idle"
    message: str | None = None

    @model_validator(mode="after")
    def _message_only_when_failed(self) -> "SearchStatus":
        if self.phase == "failed" and not self.message:
            raise ValueError("failed status requires a message")
        if self.phase != "failed" and self.message is not None:
            raise ValueError(f"{self.phase} status cannot carry a message")
        return self

    @classmethod
    def idle(cls) -> "SearchStatus":
        return cls(phase="idle")

    @classmethod
    def loading(cls) -> "SearchStatus":
        return cls(phase="loading")

    @classmethod
    def succeeded(cls) -> "SearchStatus":
        return cls(phase="succeeded")

    @classmethod
    def failed(cls, message: str) -> "SearchStatus":
        return cls(phase="failed", message=message)

    @property
    def is_loading(self) -> bool:
        return self.phase == "loading"


ResultSet = tuple[BookDoc, ...]


__all__ = [
    "BookDoc",
    "ResultSet",
    "SearchPhase",
    "SearchResponse",
    "SearchStatus",
]
