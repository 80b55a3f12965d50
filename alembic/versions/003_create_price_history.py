"""003: create price_history table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE price_history (
            id              BIGSERIAL       PRIMARY KEY,
            listing_id      VARCHAR(64)     NOT NULL REFERENCES listings (id) ON DELETE CASCADE,
            price_cents     BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_price_history_price CHECK (price_cents >= 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_price_history_listing ON price_history (listing_id, created_at DESC);"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS price_history;")
