"""create_event_publications

Create the event_publications table: one row per occurrence and
interested handler, pending until completed_at is set.

Revision ID: create_event_publications
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "create_event_publications"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create event_publications and its lookup indexes."""
    op.create_table(
        "event_publications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("handler_id", sa.String(512), nullable=False),
        sa.Column("occurrence_type", sa.String(512), nullable=False),
        sa.Column("occurrence_payload", sa.Text(), nullable=False),
        sa.Column("fingerprint", sa.String(64), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_index(
        "idx_event_publications_completed_at", "event_publications", ["completed_at"]
    )
    op.create_index(
        "idx_event_publications_published_at", "event_publications", ["published_at"]
    )
    op.create_index(
        "idx_event_publications_fingerprint",
        "event_publications",
        ["fingerprint", "handler_id"],
    )


def downgrade() -> None:
    """Drop event_publications."""
    op.drop_index("idx_event_publications_fingerprint", table_name="event_publications")
    op.drop_index("idx_event_publications_published_at", table_name="event_publications")
    op.drop_index("idx_event_publications_completed_at", table_name="event_publications")
    op.drop_table("event_publications")
