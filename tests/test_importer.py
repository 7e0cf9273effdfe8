"""Tests for import payload parsing and the HTTP import source."""

import httpx
import pytest

from expense_notes.models.expense import ImportItem
from expense_notes.services.importer import (
    HttpImportSource,
    ImportFetchError,
    MalformedImportSource,
    extract_import_items,
)


IMPORT_URL = "https://example.test/products"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestExtractImportItems:

    def test_products_wrapper(self):
        items = extract_import_items(
            {"products": [{"title": "Lamp", "price": 20, "category": "home"}], "total": 1}
        )
        assert items == [ImportItem(title="Lamp", price=20, category="home")]

    def test_bare_array(self):
        items = extract_import_items([{"title": "Lamp", "price": 20}])
        assert [i.title for i in items] == ["Lamp"]

    def test_empty_list(self):
        assert extract_import_items([]) == []
        assert extract_import_items({"products": []}) == []

    def test_accepts_import_items(self):
        item = ImportItem(title="Lamp", price=20)
        assert extract_import_items([item]) == [item]

    @pytest.mark.parametrize("payload", [None, 1, "text", {"data": []}, {"products": {}}])
    def test_unrecognized_shape(self, payload):
        with pytest.raises(MalformedImportSource):
            extract_import_items(payload)

    def test_invalid_item_rejects_whole_batch(self):
        with pytest.raises(MalformedImportSource, match="Item 1"):
            extract_import_items([{"title": "Lamp", "price": 20}, {"title": "", "price": 5}])

    def test_non_object_item(self):
        with pytest.raises(MalformedImportSource, match="Item 0"):
            extract_import_items(["Lamp"])


class TestHttpImportSource:

    @pytest.mark.asyncio
    async def test_fetch_returns_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == IMPORT_URL
            return httpx.Response(200, json={"products": [{"title": "Lamp", "price": 20}]})

        async with _client(handler) as client:
            source = HttpImportSource(IMPORT_URL, client=client)
            payload = await source.fetch()

        assert payload == {"products": [{"title": "Lamp", "price": 20}]}

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        async with _client(lambda request: httpx.Response(503)) as client:
            source = HttpImportSource(IMPORT_URL, client=client)
            with pytest.raises(ImportFetchError):
                await source.fetch()

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        async with _client(lambda request: httpx.Response(200, text="<html>")) as client:
            source = HttpImportSource(IMPORT_URL, client=client)
            with pytest.raises(ImportFetchError, match="not JSON"):
                await source.fetch()
