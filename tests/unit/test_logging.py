"""Tests for log routing."""

import sys

import pytest
from loguru import logger

from contentstore.settings.logging import setup_logging


@pytest.fixture
def lines():
    captured: list[str] = []
    yield captured
    logger.remove()
    logger.add(sys.stderr)


class TestSetupLogging:
    def test_sql_hidden_by_default(self, lines):
        setup_logging(level="DEBUG", sink=lines.append)
        logger.bind(sql=True).debug("SQL: SELECT 1")
        logger.debug("Table created: notes")

        assert len(lines) == 1
        assert "Table created: notes" in lines[0]

    def test_sql_shown_on_request(self, lines):
        setup_logging(level="DEBUG", sql=True, sink=lines.append)
        logger.bind(sql=True).debug("SQL: SELECT 1")
        assert "SELECT 1" in lines[0]

    def test_level_threshold(self, lines):
        setup_logging(level="info", sink=lines.append)
        logger.debug("quiet")
        logger.warning("loud")
        assert [line.strip().endswith("loud") for line in lines] == [True]

    def test_daily_file(self, lines, tmp_path):
        setup_logging(level="WARNING", log_dir=tmp_path / "logs", sink=lines.append)
        logger.debug("Table dropped: notes")
        logger.remove()

        [path] = (tmp_path / "logs").glob("contentstore_*.log")
        assert "Table dropped: notes" in path.read_text()
        assert lines == []
