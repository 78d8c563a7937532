"""Database schema for the SQLite key-value backend (SQLAlchemy Core).

Table: kv_entries
    One row per storage key; the value is an opaque serialized blob.
"""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, MetaData, String, Table, Text, text

metadata = MetaData()

kv_entries_table = Table(
    "kv_entries",
    metadata,
    Column("key", String(200), primary_key=True),
    Column("value", Text, nullable=False),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("CURRENT_TIMESTAMP"),
    ),
)
