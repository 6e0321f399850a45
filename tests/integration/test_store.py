"""Tests for the schema store on DuckDB."""

from contentstore.errors import is_error
from contentstore.models.schema import ColumnDefinition, parse_schema

SCHEMA = parse_schema({"name": {"kind": "string", "length": 50}, "age": {"kind": "int", "required": True}})


class TestSchemaStore:
    async def test_missing(self, store):
        result = await store.get("nope")
        assert is_error(result)
        assert result.message == "Table does not exist."
        assert await store.find("nope") is None
        assert not await store.exists("nope")

    async def test_put_get(self, store):
        assert await store.put("people", SCHEMA) is True
        assert await store.get("people") == SCHEMA
        assert await store.tables() == ["people"]

    async def test_get_returns_copy(self, store):
        await store.put("people", SCHEMA)
        first = await store.get("people")
        first["extra"] = ColumnDefinition(kind="int")
        assert "extra" not in await store.get("people")

    async def test_update_invalidates(self, store):
        await store.put("people", SCHEMA)
        await store.get("people")
        changed = {**SCHEMA, "email": ColumnDefinition(kind="string")}
        assert await store.update("people", changed) is True
        assert "email" in await store.get("people")

    async def test_rename(self, store):
        await store.put("people", SCHEMA)
        await store.get("people")
        assert await store.update("persons", SCHEMA, rename_from="people") is True
        assert await store.find("people") is None
        assert await store.get("persons") == SCHEMA

    async def test_drop(self, store):
        await store.put("people", SCHEMA)
        await store.get("people")
        assert await store.drop("people") is True
        assert await store.find("people") is None
        assert await store.tables() == []

    async def test_record_is_camel_case_json(self, store, container):
        await store.put("ids", parse_schema({"ID": {"kind": "bigint", "primary": True, "autoIncrement": True}}))
        rows = await container.db.query('SELECT "columns" FROM "table_structure" WHERE "table" = ?', ["ids"])
        assert '"autoIncrement": true' in rows[0]["columns"]
