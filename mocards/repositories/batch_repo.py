from typing import Optional
from asyncpg import Connection, UniqueViolationError


class BatchRepository:

    def __init__(self, conn: Connection):
        self.conn = conn

    async def get_by_id(self, batch_id: int) -> dict | None:
        sql = "SELECT * FROM card_batches WHERE id = $1;"
        record = await self.conn.fetchrow(sql, batch_id)
        return dict(record) if record else None

    async def list_all(self) -> list[dict]:
        sql = "SELECT * FROM card_batches ORDER BY created_at DESC, id DESC;"
        records = await self.conn.fetch(sql)
        return [dict(record) for record in records]

    async def count(self) -> int:
        return int(await self.conn.fetchval("SELECT COUNT(*) FROM card_batches;"))

    async def max_sequence(self) -> int:
        """Highest N among batch numbers shaped BATCH-NNN, 0 if there are none."""
        sql = """
            SELECT COALESCE(MAX(CAST(SUBSTRING(batch_number FROM 7) AS INTEGER)), 0)
            FROM card_batches
            WHERE batch_number ~ '^BATCH-[0-9]{3}$';
        """
        return int(await self.conn.fetchval(sql))

    async def create(self, batch_number: str, total_cards: int, created_by: str,
                     notes: Optional[str] = None) -> dict:
        sql = """
            INSERT INTO card_batches (batch_number, total_cards, cards_assigned, status, created_by, notes)
            VALUES ($1, $2, 0, 'active', $3, $4)
            RETURNING *;
        """
        try:
            record = await self.conn.fetchrow(sql, batch_number, total_cards, created_by, notes)
            return dict(record)
        except UniqueViolationError:
            raise ValueError(f"Batch number {batch_number} already exists")

    async def increment_assigned(self, batch_id: int, amount: int) -> None:
        sql = "UPDATE card_batches SET cards_assigned = cards_assigned + $2 WHERE id = $1;"
        await self.conn.execute(sql, batch_id, amount)

    async def set_status(self, batch_id: int, status: str) -> dict | None:
        sql = "UPDATE card_batches SET status = $2::batchstatus WHERE id = $1 RETURNING *;"
        record = await self.conn.fetchrow(sql, batch_id, status)
        return dict(record) if record else None
