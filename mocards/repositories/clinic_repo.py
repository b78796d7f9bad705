from datetime import datetime
from asyncpg import Connection, UniqueViolationError


class ClinicRepository:

    def __init__(self, conn: Connection):
        self.conn = conn

    async def get_by_id(self, clinic_id: int) -> dict | None:
        sql = "SELECT * FROM clinics WHERE id = $1;"
        record = await self.conn.fetchrow(sql, clinic_id)
        return dict(record) if record else None

    async def get_by_code(self, clinic_code: str) -> dict | None:
        sql = "SELECT * FROM clinics WHERE clinic_code = $1;"
        record = await self.conn.fetchrow(sql, clinic_code)
        return dict(record) if record else None

    async def list_all(self, active_only: bool = False) -> list[dict]:
        if active_only:
            sql = "SELECT * FROM clinics WHERE status = 'active' ORDER BY clinic_name;"
        else:
            sql = "SELECT * FROM clinics ORDER BY clinic_name;"
        records = await self.conn.fetch(sql)
        return [dict(record) for record in records]

    async def count(self) -> int:
        return int(await self.conn.fetchval("SELECT COUNT(*) FROM clinics;"))

    async def create(self, clinic_in: dict) -> dict:
        sql = """
            INSERT INTO clinics (clinic_code, clinic_name, contact_email, contact_phone, address, status, password_hash)
            VALUES ($1, $2, $3, $4, $5, 'active', $6)
            RETURNING *;
        """
        try:
            record = await self.conn.fetchrow(
                sql,
                clinic_in["clinic_code"],
                clinic_in["clinic_name"],
                clinic_in.get("contact_email"),
                clinic_in.get("contact_phone"),
                clinic_in.get("address"),
                clinic_in["password_hash"],
            )
        except UniqueViolationError:
            raise ValueError(f"Clinic code {clinic_in['clinic_code']} already exists")
        return dict(record)

    async def update_password(self, clinic_id: int, password_hash: str, changed_at: datetime) -> dict | None:
        sql = """
            UPDATE clinics
            SET password_hash = $2, last_password_change = $3, updated_at = $3
            WHERE id = $1
            RETURNING *;
        """
        record = await self.conn.fetchrow(sql, clinic_id, password_hash, changed_at)
        return dict(record) if record else None
