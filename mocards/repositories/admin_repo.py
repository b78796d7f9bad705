from typing import Optional
from asyncpg import Connection


class AdminRepository:

    def __init__(self, conn: Connection):
        self.conn = conn

    async def get_by_username(self, username: str) -> Optional[dict]:
        sql = "SELECT * FROM admin_accounts WHERE username = $1;"
        record = await self.conn.fetchrow(sql, username)
        return dict(record) if record else None

    async def get_by_id(self, admin_id: int) -> Optional[dict]:
        sql = "SELECT * FROM admin_accounts WHERE id = $1;"
        record = await self.conn.fetchrow(sql, admin_id)
        return dict(record) if record else None

    async def create(self, admin_in: dict) -> dict:
        sql = """
            INSERT INTO admin_accounts (username, password_hash, full_name, role, is_active)
            VALUES ($1, $2, $3, $4, TRUE)
            RETURNING *;
        """
        record = await self.conn.fetchrow(
            sql,
            admin_in["username"],
            admin_in["password_hash"],
            admin_in.get("full_name"),
            admin_in.get("role", "admin"),
        )
        return dict(record)
