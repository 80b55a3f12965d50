"""PromoRepository — concrete implementation of PromoRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Redemption is a single conditional UPDATE ... RETURNING. Zero rows means the
code is missing or no longer eligible; concurrent checkouts can never push
usage_count past usage_limit.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.th_promo.domain.models import PromoCode

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, code, name, description, type, value, is_active,
    start_date, end_date, usage_limit, usage_count,
    created_by, created_at, updated_at
"""

_GET_BY_CODE_SQL = text(f"SELECT {_COLUMNS} FROM promo_codes WHERE code = :code")

_GET_BY_ID_SQL = text(f"SELECT {_COLUMNS} FROM promo_codes WHERE id = :promo_id")

_REDEEM_SQL = text(f"""
    UPDATE promo_codes
    SET usage_count = usage_count + 1,
        updated_at = NOW()
    WHERE code = :code
      AND is_active
      AND (start_date IS NULL OR start_date <= CAST(:now AS TIMESTAMPTZ))
      AND (end_date IS NULL OR end_date >= CAST(:now AS TIMESTAMPTZ))
      AND (usage_limit IS NULL OR usage_count < usage_limit)
    RETURNING {_COLUMNS}
""")

_FILTER = """
    WHERE
        (
            CAST(:status AS TEXT) IS NULL
            OR (CAST(:status AS TEXT) = 'active' AND is_active
                AND (end_date IS NULL OR end_date >= CAST(:now AS TIMESTAMPTZ)))
            OR (CAST(:status AS TEXT) = 'expired' AND end_date < CAST(:now AS TIMESTAMPTZ))
            OR (CAST(:status AS TEXT) = 'inactive' AND NOT is_active)
        )
        AND (
            CAST(:pattern AS TEXT) IS NULL
            OR code ILIKE CAST(:pattern AS TEXT)
            OR name ILIKE CAST(:pattern AS TEXT)
            OR description ILIKE CAST(:pattern AS TEXT)
        )
"""

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM promo_codes
    {_FILTER}
    ORDER BY created_at DESC, id DESC
    LIMIT :limit OFFSET :offset
""")

_COUNT_SQL = text(f"SELECT COUNT(*) FROM promo_codes {_FILTER}")

_INSERT_SQL = text(f"""
    INSERT INTO promo_codes
        (id, code, name, description, type, value, is_active,
         start_date, end_date, usage_limit, usage_count, created_by)
    VALUES
        (:id, :code, :name, :description, :type, :value, :is_active,
         :start_date, :end_date, :usage_limit, 0, :created_by)
    RETURNING {_COLUMNS}
""")

_DELETE_SQL = text("DELETE FROM promo_codes WHERE id = :promo_id RETURNING id")

UPDATABLE_COLUMNS = (
    "code", "name", "description", "type", "value",
    "is_active", "start_date", "end_date", "usage_limit",
)

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_promo(row: object) -> PromoCode:
    return PromoCode(
        id=row.id,  # type: ignore[attr-defined]
        code=row.code,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        value=row.value,  # type: ignore[attr-defined]
        is_active=row.is_active,  # type: ignore[attr-defined]
        start_date=row.start_date,  # type: ignore[attr-defined]
        end_date=row.end_date,  # type: ignore[attr-defined]
        usage_limit=row.usage_limit,  # type: ignore[attr-defined]
        usage_count=row.usage_count,  # type: ignore[attr-defined]
        created_by=row.created_by,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _filter_params(status: str | None, search: str | None, now: datetime) -> dict[str, Any]:
    return {
        "status": status,
        "pattern": f"%{search}%" if search else None,
        "now": now,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class PromoRepository:
    async def get_by_code(self, db: AsyncSession, code: str) -> PromoCode | None:
        result = await db.execute(_GET_BY_CODE_SQL, {"code": code})
        row = result.fetchone()
        return _row_to_promo(row) if row else None

    async def get_by_id(self, db: AsyncSession, promo_id: str) -> PromoCode | None:
        result = await db.execute(_GET_BY_ID_SQL, {"promo_id": promo_id})
        row = result.fetchone()
        return _row_to_promo(row) if row else None

    async def redeem(
        self, db: AsyncSession, code: str, now: datetime
    ) -> PromoCode | None:
        result = await db.execute(_REDEEM_SQL, {"code": code, "now": now})
        row = result.fetchone()
        return _row_to_promo(row) if row else None

    async def list_promos(
        self,
        db: AsyncSession,
        status: str | None,
        search: str | None,
        now: datetime,
        limit: int,
        offset: int,
    ) -> list[PromoCode]:
        params = _filter_params(status, search, now) | {"limit": limit, "offset": offset}
        result = await db.execute(_LIST_SQL, params)
        return [_row_to_promo(row) for row in result.fetchall()]

    async def count_promos(
        self,
        db: AsyncSession,
        status: str | None,
        search: str | None,
        now: datetime,
    ) -> int:
        result = await db.execute(_COUNT_SQL, _filter_params(status, search, now))
        return int(result.scalar_one())

    async def create(self, db: AsyncSession, promo: PromoCode) -> PromoCode:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": promo.id,
                "code": promo.code,
                "name": promo.name,
                "description": promo.description,
                "type": promo.type,
                "value": promo.value,
                "is_active": promo.is_active,
                "start_date": promo.start_date,
                "end_date": promo.end_date,
                "usage_limit": promo.usage_limit,
                "created_by": promo.created_by,
            },
        )
        return _row_to_promo(result.fetchone())

    async def update(
        self, db: AsyncSession, promo_id: str, fields: dict[str, Any]
    ) -> PromoCode | None:
        unknown = set(fields) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Not updatable: {sorted(unknown)}")
        if not fields:
            return await self.get_by_id(db, promo_id)

        # Column names come from the whitelist above, never from user input
        assignments = ", ".join(f"{col} = :{col}" for col in fields)
        sql = text(f"""
            UPDATE promo_codes
            SET {assignments}, updated_at = NOW()
            WHERE id = :promo_id
            RETURNING {_COLUMNS}
        """)
        result = await db.execute(sql, {**fields, "promo_id": promo_id})
        row = result.fetchone()
        return _row_to_promo(row) if row else None

    async def delete(self, db: AsyncSession, promo_id: str) -> bool:
        result = await db.execute(_DELETE_SQL, {"promo_id": promo_id})
        return result.fetchone() is not None
