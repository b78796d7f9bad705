from typing import Optional, Any
from asyncpg import Connection


class CardTransactionRepository:
    """Append-only audit trail of card state changes."""

    def __init__(self, conn: Connection):
        self.conn = conn

    async def log(
        self,
        card_id: int,
        transaction_type: str,
        performed_by: str,
        performed_by_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> dict:
        sql = """
            INSERT INTO card_transactions (card_id, transaction_type, performed_by, performed_by_id, details)
            VALUES ($1, $2::cardtransactiontype, $3::performedby, $4, $5::jsonb)
            RETURNING *;
        """
        record = await self.conn.fetchrow(
            sql, card_id, transaction_type, performed_by, performed_by_id, details or {}
        )
        if not record:
            raise RuntimeError("Failed to insert card transaction.")
        return dict(record)

    async def log_many(
        self,
        card_ids: list[int],
        transaction_type: str,
        performed_by: str,
        performed_by_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        if not card_ids:
            return
        sql = """
            INSERT INTO card_transactions (card_id, transaction_type, performed_by, performed_by_id, details)
            VALUES ($1, $2::cardtransactiontype, $3::performedby, $4, $5::jsonb);
        """
        await self.conn.executemany(
            sql,
            [(card_id, transaction_type, performed_by, performed_by_id, details or {}) for card_id in card_ids],
        )

    async def list_by_card(self, card_id: int) -> list[dict]:
        sql = "SELECT * FROM card_transactions WHERE card_id = $1 ORDER BY created_at, id;"
        records = await self.conn.fetch(sql, card_id)
        return [dict(record) for record in records]
