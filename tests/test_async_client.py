"""Tests for the async Google Books client."""
import asyncio

import httpx

from bookshelf.async_client import AsyncGoogleBooksClient


def _run(handler, term="dune"):
    async def go():
        async with AsyncGoogleBooksClient(transport=httpx.MockTransport(handler)) as client:
            return await client.search(term, max_results=5)
    
    return asyncio.run(go())


def test_async_search_success():
    seen = []
    
    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"items": [{"id": "1"}]})
    
    result = _run(handler, "dune+subject:Fiction")
    
    assert result == {"items": [{"id": "1"}]}
    assert seen[0].url.path == "/books/v1/volumes"
    assert b"q=dune+subject:Fiction" in seen[0].url.query


def test_async_search_bad_status():
    assert _run(lambda request: httpx.Response(500)) is None


def test_async_search_transport_error():
    def handler(request):
        raise httpx.ConnectError("down", request=request)
    
    assert _run(handler) is None


def test_async_search_invalid_json():
    assert _run(lambda request: httpx.Response(200, content=b"<html>")) is None
