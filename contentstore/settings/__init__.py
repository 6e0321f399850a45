"""Application settings."""

import os
from pathlib import Path

# Database
DB_PATH = os.getenv("CONTENTSTORE_DB_PATH", "contentstore.duckdb")
TABLE_PREFIX = os.getenv("CONTENTSTORE_TABLE_PREFIX", "")

# Table holding one schema record per managed table
STRUCTURE_TABLE = "table_structure"

# Logging
LOG_DIR = Path(os.getenv("CONTENTSTORE_LOG_DIR", "logs"))
LOG_LEVEL = os.getenv("CONTENTSTORE_LOG_LEVEL", "INFO")
