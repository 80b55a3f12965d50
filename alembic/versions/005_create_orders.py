"""005: create orders and order_items tables

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                      VARCHAR(64)     PRIMARY KEY,
            buyer_id                VARCHAR(64)     NOT NULL,
            status                  VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            delivery_method         VARCHAR(20)     NOT NULL,
            subtotal_cents          BIGINT          NOT NULL,
            delivery_fee_cents      BIGINT          NOT NULL,
            tax_cents               BIGINT          NOT NULL,
            tax_rate_bps            INT             NOT NULL,
            promo_code              VARCHAR(64),
            promo_discount_cents    BIGINT          NOT NULL DEFAULT 0,
            total_cents             BIGINT          NOT NULL,
            checkout_expires_at     TIMESTAMPTZ     NOT NULL,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_status         CHECK (
                status IN ('PENDING', 'PAID', 'CANCELLED', 'EXPIRED')
            ),
            CONSTRAINT ck_orders_delivery       CHECK (delivery_method IN ('delivery', 'pickup')),
            CONSTRAINT ck_orders_amounts        CHECK (
                subtotal_cents >= 0 AND delivery_fee_cents >= 0 AND tax_cents >= 0
                AND promo_discount_cents >= 0 AND total_cents >= 0
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_buyer ON orders (buyer_id, created_at DESC);")
    op.execute("""
        CREATE INDEX idx_orders_pending_expiry
        ON orders (checkout_expires_at)
        WHERE status = 'PENDING';
    """)
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE order_items (
            id                  VARCHAR(64)     PRIMARY KEY,
            order_id            VARCHAR(64)     NOT NULL REFERENCES orders (id) ON DELETE CASCADE,
            listing_id          VARCHAR(64)     NOT NULL REFERENCES listings (id),
            unit_price_cents    BIGINT          NOT NULL,
            quantity            INT             NOT NULL,
            is_bulk             BOOLEAN         NOT NULL DEFAULT FALSE,
            CONSTRAINT ck_order_items_price     CHECK (unit_price_cents >= 0),
            CONSTRAINT ck_order_items_quantity  CHECK (quantity > 0)
        );
    """)
    op.execute("CREATE INDEX idx_order_items_order ON order_items (order_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS order_items;")
    op.execute("DROP TABLE IF EXISTS orders;")
