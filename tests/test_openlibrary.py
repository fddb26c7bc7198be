"""Tests for the Open Library client against a mocked transport."""

from __future__ import annotations

import httpx
import pytest

from bookfinder.config import OpenLibrarySettings
from bookfinder.domain.models import BookDoc
from bookfinder.services.exceptions import NETWORK_ERROR_MESSAGE, SearchTransportError
from bookfinder.services.openlibrary import OpenLibraryClient


@pytest.mark.asyncio
async def test_search_by_title_maps_docs():
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.host == "openlibrary.org"
        assert request.url.path == "/search.json"
        assert request.url.params["title"] == "Dune"
        assert "authorization" not in request.headers
        return httpx.Response(
            200,
            json={
                "numFound": 2,
                "start": 0,
                "docs": [
                    {
                        "title": "Dune",
                        "author_name": ["Frank Herbert"],
                        "cover_i": 11481354,
                        "first_publish_year": 1965,
                        "key": "/works/OL893415W",
                    },
                    {"title": "Dune Messiah", "publisher": ["Putnam", "Ace", "Gollancz"]},
                ],
            },
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        docs = await OpenLibraryClient(http_client).search_by_title("Dune")

    assert [doc.title for doc in docs] == ["Dune", "Dune Messiah"]
    assert docs[0].author_name == ("Frank Herbert",)
    assert docs[0].first_publish_year == 1965
    assert docs[0].cover_i == 11481354
    assert docs[1].author_name is None
    assert docs[1].publisher == ("Putnam", "Ace", "Gollancz")


@pytest.mark.asyncio
async def test_search_by_title_percent_encodes_reserved_characters():
    raw_queries: list[bytes] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        raw_queries.append(request.url.query)
        assert request.url.params["title"] == "Pride & Prejudice #1?"
        assert list(request.url.params.keys()) == ["title"]
        return httpx.Response(200, json={"docs": []})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        await OpenLibraryClient(http_client).search_by_title("Pride & Prejudice #1?")

    query = raw_queries[0].decode("ascii")
    assert "%26" in query
    assert "%23" in query
    assert "%3F" in query


@pytest.mark.asyncio
async def test_search_by_title_returns_empty_list_when_docs_missing():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"numFound": 0})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        docs = await OpenLibraryClient(http_client).search_by_title("Zzzxyqq")

    assert docs == []


@pytest.mark.asyncio
async def test_search_by_title_raises_on_http_error_status():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="upstream down")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        with pytest.raises(SearchTransportError) as excinfo:
            await OpenLibraryClient(http_client).search_by_title("Dune")

    assert excinfo.value.user_message == NETWORK_ERROR_MESSAGE
    assert "503" in str(excinfo.value)


@pytest.mark.asyncio
async def test_search_by_title_raises_on_connection_error():
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name resolution failed", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        with pytest.raises(SearchTransportError):
            await OpenLibraryClient(http_client).search_by_title("Dune")


@pytest.mark.asyncio
async def test_search_by_title_raises_on_undecodable_body():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        with pytest.raises(SearchTransportError):
            await OpenLibraryClient(http_client).search_by_title("Dune")


@pytest.mark.asyncio
async def test_search_by_title_raises_on_unexpected_shape():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"docs": "not-a-list"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        with pytest.raises(SearchTransportError):
            await OpenLibraryClient(http_client).search_by_title("Dune")



@pytest.mark.asyncio
async def test_search_by_title_keeps_page_with_irregular_docs():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "docs": [
                    {"title": "Dune", "publisher": ["Chilton", 1965, None], "first_publish_year": "1965"},
                    None,
                    {"title": 1984, "first_publish_year": "circa 1900", "cover_i": {"id": 1}},
                    {"title": "Emma", "author_name": "Jane Austen", "subject": [{"name": "x"}, "Courtship"]},
                ],
            },
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        docs = await OpenLibraryClient(http_client).search_by_title("Dune")

    assert [doc.title for doc in docs] == ["Dune", "1984", "Emma"]
    assert docs[0].publisher == ("Chilton", "1965")
    assert docs[0].first_publish_year == 1965
    assert docs[1].first_publish_year is None
    assert docs[1].cover_i is None
    assert docs[2].author_name == ("Jane Austen",)
    assert docs[2].subject == ("Courtship",)

@pytest.mark.asyncio
async def test_search_uses_configured_endpoint():
    hosts: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(f"{request.url.scheme}://{request.url.host}{request.url.path}")
        return httpx.Response(200, json={"docs": []})

    settings = OpenLibrarySettings(search_url="https://mirror.example/search.json")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        await OpenLibraryClient(http_client, settings).search_by_title("Dune")

    assert hosts == ["https://mirror.example/search.json"]


def test_cover_url_sizes_and_placeholder():
    client = OpenLibraryClient(httpx.AsyncClient())
    with_cover = BookDoc(title="Dune", cover_i=42)
    without_cover = BookDoc(title="Dune")

    assert client.cover_url(with_cover) == "https://covers.openlibrary.org/b/id/42-M.jpg"
    assert client.cover_url(with_cover, "L") == "https://covers.openlibrary.org/b/id/42-L.jpg"
    assert client.cover_url(without_cover, "L") == "https://via.placeholder.com/150x200?text=No+Cover"
