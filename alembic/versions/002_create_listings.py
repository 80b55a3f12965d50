"""002: create listings table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            id                  VARCHAR(64)     PRIMARY KEY,
            item_id             VARCHAR(64)     NOT NULL,
            title               VARCHAR(255)    NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'active',
            list_price_cents    BIGINT          NOT NULL,
            price_cents         BIGINT          NOT NULL,
            reserve_price_cents BIGINT,
            discount_schedule   VARCHAR(32),
            delivery_category   VARCHAR(10)     NOT NULL DEFAULT 'NORMAL',
            is_held             BOOLEAN         NOT NULL DEFAULT FALSE,
            held_until          TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_status          CHECK (
                status IN ('active', 'processing', 'sold', 'inactive')
            ),
            CONSTRAINT ck_listings_list_price      CHECK (list_price_cents >= 0),
            CONSTRAINT ck_listings_price           CHECK (price_cents >= 0),
            CONSTRAINT ck_listings_reserve         CHECK (
                reserve_price_cents IS NULL OR reserve_price_cents >= 0
            ),
            CONSTRAINT ck_listings_schedule        CHECK (
                discount_schedule IS NULL OR discount_schedule IN ('Turbo-30', 'Classic-60')
            ),
            CONSTRAINT ck_listings_delivery_cat    CHECK (delivery_category IN ('NORMAL', 'BULK'))
        );
    """)
    op.execute("""
        CREATE INDEX idx_listings_scheduled_active
        ON listings (created_at, id)
        WHERE status = 'active' AND discount_schedule IS NOT NULL;
    """)
    op.execute("""
        CREATE INDEX idx_listings_held
        ON listings (held_until)
        WHERE is_held = TRUE;
    """)
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
