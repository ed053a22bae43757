"""
Database Schema Definitions

Contains the table structure used by the key-value store.
"""

from __future__ import annotations

# Table structure SQL statements
TABLE_STATEMENTS = [
    # App state (key-value storage)
    """
    CREATE TABLE IF NOT EXISTS app_state (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
]


def get_all_schema_statements() -> list[str]:
    """Get all schema statements in creation order"""
    return list(TABLE_STATEMENTS)
