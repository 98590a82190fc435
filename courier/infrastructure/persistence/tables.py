"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
)

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# EVENT PUBLICATIONS TABLE (one row per occurrence x interested handler)
# ============================================================================
publications_table = Table(
    "event_publications",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("handler_id", String(512), nullable=False),
    Column("occurrence_type", String(512), nullable=False),
    Column("occurrence_payload", Text, nullable=False),
    Column("fingerprint", String(64), nullable=False),
    Column("published_at", DateTime(timezone=True), nullable=False),
    Column("completed_at", DateTime(timezone=True), nullable=True),  # NULL = pending
)

# Incomplete lookups and pruning both filter on completion date
Index("idx_event_publications_completed_at", publications_table.c.completed_at)

# Age-based resubmission
Index("idx_event_publications_published_at", publications_table.c.published_at)

# Completion by (occurrence, handler) fingerprint
Index(
    "idx_event_publications_fingerprint",
    publications_table.c.fingerprint,
    publications_table.c.handler_id,
)
