"""Tests for key-value storage adapters."""

import json
from unittest.mock import MagicMock

import pytest

from expense_notes.services.storage import (
    GoogleSheetsKeyValueAdapter,
    InMemoryKeyValueAdapter,
    JsonFileKeyValueAdapter,
    StorageUnavailable,
)
from expense_notes.store import ExpenseStore


class TestInMemoryAdapter:

    @pytest.mark.asyncio
    async def test_get_set_remove(self):
        adapter = InMemoryKeyValueAdapter()
        assert await adapter.get("k") is None

        await adapter.set("k", "v")
        assert await adapter.get("k") == "v"

        await adapter.remove_all(["k", "missing"])
        assert await adapter.get("k") is None

    def test_initial_data_is_copied(self):
        initial = {"k": "v"}
        adapter = InMemoryKeyValueAdapter(initial)
        initial["k"] = "changed"
        assert adapter.snapshot() == {"k": "v"}


class TestJsonFileAdapter:

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path):
        adapter = JsonFileKeyValueAdapter(tmp_path / "expenses.json")
        assert await adapter.get("expenses") is None

    @pytest.mark.asyncio
    async def test_set_writes_json_object(self, tmp_path):
        path = tmp_path / "nested" / "expenses.json"
        adapter = JsonFileKeyValueAdapter(path)

        await adapter.set("a", "1")
        await adapter.set("b", "Cà phê")

        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1", "b": "Cà phê"}
        assert await adapter.get("b") == "Cà phê"

    @pytest.mark.asyncio
    async def test_no_temp_files_left_behind(self, tmp_path):
        adapter = JsonFileKeyValueAdapter(tmp_path / "expenses.json")
        await adapter.set("a", "1")
        await adapter.set("a", "2")
        assert [p.name for p in tmp_path.iterdir()] == ["expenses.json"]

    @pytest.mark.asyncio
    async def test_remove_all(self, tmp_path):
        adapter = JsonFileKeyValueAdapter(tmp_path / "expenses.json")
        await adapter.set("a", "1")
        await adapter.set("b", "2")

        await adapter.remove_all(["a", "zzz"])

        assert await adapter.get("a") is None
        assert await adapter.get("b") == "2"

    @pytest.mark.asyncio
    async def test_corrupt_file(self, tmp_path):
        path = tmp_path / "expenses.json"
        path.write_text("{broken", encoding="utf-8")
        adapter = JsonFileKeyValueAdapter(path)
        with pytest.raises(StorageUnavailable):
            await adapter.get("expenses")

    @pytest.mark.asyncio
    async def test_non_string_values_are_corrupt(self, tmp_path):
        path = tmp_path / "expenses.json"
        path.write_text(json.dumps({"expenses": [1, 2]}), encoding="utf-8")
        with pytest.raises(StorageUnavailable):
            await JsonFileKeyValueAdapter(path).get("expenses")

    @pytest.mark.asyncio
    async def test_store_round_trip_through_file(self, tmp_path):
        path = tmp_path / "expenses.json"

        first = ExpenseStore(JsonFileKeyValueAdapter(path))
        await first.open()
        await first.seed()
        expense_id = await first.insert("Bánh mì", 25000, "Ăn uống")
        before = first.list_expenses()

        second = ExpenseStore(JsonFileKeyValueAdapter(path))
        await second.open()
        assert second.list_expenses() == before
        assert second.get(expense_id).title == "Bánh mì"
        assert second.first_run is False


class TestGoogleSheetsAdapter:
    """Sheets adapter against a mocked worksheet."""

    def _adapter(self, rows):
        sheet = MagicMock()
        sheet.get_all_values.return_value = [["key", "value"], *rows]
        client = MagicMock()
        client.get_kv_sheet.return_value = sheet
        return GoogleSheetsKeyValueAdapter(client), sheet

    @pytest.mark.asyncio
    async def test_get(self):
        adapter, _ = self._adapter([["expenses", "[]"], ["expenses_initialized", "true"]])
        assert await adapter.get("expenses_initialized") == "true"
        assert await adapter.get("missing") is None

    @pytest.mark.asyncio
    async def test_set_updates_existing_row(self):
        adapter, sheet = self._adapter([["expenses", "[]"]])
        await adapter.set("expenses", "[1]")
        sheet.update.assert_called_once_with(
            range_name="B2", values=[["[1]"]], value_input_option="RAW"
        )
        sheet.update_cell.assert_not_called()
        sheet.append_row.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_appends_new_key(self):
        adapter, sheet = self._adapter([])
        await adapter.set("expenses", "[]")
        sheet.append_row.assert_called_once_with(["expenses", "[]"], value_input_option="RAW")

    @pytest.mark.asyncio
    async def test_remove_all_deletes_bottom_up(self):
        adapter, sheet = self._adapter([["a", "1"], ["b", "2"], ["c", "3"]])
        await adapter.remove_all(["a", "c"])
        assert [call.args[0] for call in sheet.delete_rows.call_args_list] == [4, 2]

    @pytest.mark.asyncio
    async def test_read_failure_is_unavailable(self):
        adapter, sheet = self._adapter([])
        sheet.get_all_values.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(StorageUnavailable):
            await adapter.get("expenses")
