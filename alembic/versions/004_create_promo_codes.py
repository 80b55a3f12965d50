"""004: create promo_codes table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE promo_codes (
            id              VARCHAR(64)     PRIMARY KEY,
            code            VARCHAR(64)     NOT NULL,
            name            VARCHAR(255)    NOT NULL,
            description     TEXT,
            type            VARCHAR(20)     NOT NULL,
            value           BIGINT          NOT NULL DEFAULT 0,
            is_active       BOOLEAN         NOT NULL DEFAULT TRUE,
            start_date      TIMESTAMPTZ,
            end_date        TIMESTAMPTZ,
            usage_limit     INT,
            usage_count     INT             NOT NULL DEFAULT 0,
            created_by      VARCHAR(64),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_promo_codes_code          UNIQUE (code),
            CONSTRAINT ck_promo_codes_code_format   CHECK (code ~ '^[A-Z0-9]+$'),
            CONSTRAINT ck_promo_codes_type          CHECK (
                type IN ('percentage', 'fixed_amount', 'free_shipping')
            ),
            CONSTRAINT ck_promo_codes_value         CHECK (value >= 0),
            CONSTRAINT ck_promo_codes_percentage    CHECK (type <> 'percentage' OR value <= 100),
            CONSTRAINT ck_promo_codes_window        CHECK (
                start_date IS NULL OR end_date IS NULL OR start_date < end_date
            ),
            CONSTRAINT ck_promo_codes_usage_limit   CHECK (usage_limit IS NULL OR usage_limit >= 0),
            CONSTRAINT ck_promo_codes_usage_count   CHECK (usage_count >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_promo_codes_updated_at
            BEFORE UPDATE ON promo_codes
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS promo_codes;")
