from typing import Optional
from asyncpg import Connection, UniqueViolationError


class LocationCodeRepository:

    def __init__(self, conn: Connection):
        self.conn = conn

    async def get_active(self, code: str) -> dict | None:
        sql = "SELECT * FROM location_codes WHERE code = $1 AND is_active = TRUE;"
        record = await self.conn.fetchrow(sql, code)
        return dict(record) if record else None

    async def list_active(self) -> list[dict]:
        sql = "SELECT * FROM location_codes WHERE is_active = TRUE ORDER BY code;"
        records = await self.conn.fetch(sql)
        return [dict(record) for record in records]

    async def create(self, code: str, location_name: str, description: Optional[str] = None,
                     is_active: bool = True) -> dict:
        sql = """
            INSERT INTO location_codes (code, location_name, description, is_active)
            VALUES ($1, $2, $3, $4)
            RETURNING *;
        """
        try:
            record = await self.conn.fetchrow(sql, code, location_name, description, is_active)
        except UniqueViolationError:
            raise ValueError(f"Location code {code} already exists")
        return dict(record)
