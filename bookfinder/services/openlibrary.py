"""Open Library search integration."""

from __future__ import annotations

from typing import Literal

import httpx
from pydantic import ValidationError

from bookfinder.config import OpenLibrarySettings
from bookfinder.domain.models import BookDoc, SearchResponse
from bookfinder.logging import logger
from bookfinder.services.exceptions import SearchTransportError

CoverSize = Literal["S", "M", "L"]


class OpenLibraryClient:
    """Issues title searches against the Open Library search endpoint.

    One call is one GET request: no retries, no caching. The title goes
    through httpx query params, which percent-encodes reserved characters.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: OpenLibrarySettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or OpenLibrarySettings()

    @property
    def settings(self) -> OpenLibrarySettings:
        return self._settings

    async def search_by_title(self, title: str) -> list[BookDoc]:
        url = str(self._settings.search_url)
        try:
            response = await self._client.get(
                url,
                params={"title": title},
                headers={"Accept": "application/json", "User-Agent": self._settings.user_agent},
            )
            response.raise_for_status()
            payload = SearchResponse.model_validate(response.json())
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code if exc.response is not None else "unknown"
            logger.warning("openlibrary_search_failed", title=title, status_code=status_code)
            raise SearchTransportError(f"Open Library returned HTTP {status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("openlibrary_search_failed", title=title, error=repr(exc))
            raise SearchTransportError(f"Open Library request failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            logger.warning("openlibrary_search_undecodable", title=title, error=str(exc)[:500])
            raise SearchTransportError("Open Library returned an undecodable body") from exc

        docs = payload.docs or []
        logger.info("openlibrary_search_completed", title=title, matches=len(docs))
        return docs

    def cover_url(self, doc: BookDoc, size: CoverSize = "M") -> str:
        if not doc.cover_i:
            return self._settings.placeholder_cover_url
        base = str(self._settings.covers_base_url).rstrip("/")
        return f"{base}/{doc.cover_i}-{size}.jpg"


__all__ = ["CoverSize", "OpenLibraryClient"]
