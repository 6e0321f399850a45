"""Schema record table - one row per managed table."""

STRUCTURE_DDL = """
CREATE TABLE IF NOT EXISTS {table} (
    "table" VARCHAR NOT NULL PRIMARY KEY,
    "columns" TEXT
)
"""
