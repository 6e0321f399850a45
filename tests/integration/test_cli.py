"""Tests for the admin CLI."""

import asyncio
import json

import pytest

from contentstore.cli import main
from contentstore.container import Container


@pytest.fixture
def db_file(tmp_path):
    return str(tmp_path / "store.duckdb")


def make_table(path: str) -> None:
    async def create():
        container = Container(path, "")
        await container.install()
        await container.migrator.create_table("notes", {"body": {"kind": "string", "required": True}})
        container.close()

    asyncio.run(create())


class TestCli:
    def test_install(self, db_file, capsys):
        assert main(["--db", db_file, "install"]) == 0
        assert "Installed" in capsys.readouterr().out

    def test_tables(self, db_file, capsys):
        make_table(db_file)
        assert main(["--db", db_file, "tables"]) == 0
        assert capsys.readouterr().out.split() == ["notes"]

    def test_describe(self, db_file, capsys):
        make_table(db_file)
        assert main(["--db", db_file, "describe", "notes"]) == 0
        assert json.loads(capsys.readouterr().out) == {"body": {"kind": "string", "required": True}}

    def test_describe_unknown(self, db_file, capsys):
        assert main(["--db", db_file, "describe", "ghost"]) == 1
        assert "Table does not exist." in capsys.readouterr().err

    def test_drop(self, db_file, capsys):
        make_table(db_file)
        assert main(["--db", db_file, "drop", "notes"]) == 0
        assert "Dropped: notes" in capsys.readouterr().out
        assert main(["--db", db_file, "tables"]) == 0
        assert capsys.readouterr().out == ""
