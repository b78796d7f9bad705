from datetime import datetime
from decimal import Decimal
from asyncpg import Connection


class PerkRepository:
    """Repository for perks bundled with a card."""

    def __init__(self, conn: Connection):
        self.conn = conn

    async def create_many(self, card_id: int, perks: list[tuple[str, Decimal]], expires_at: datetime) -> list[dict]:
        sql = """
            INSERT INTO card_perks (card_id, perk_type, perk_value, claimed, expires_at)
            SELECT $1, p.perk_type::perktype, p.perk_value, FALSE, $4
            FROM unnest($2::text[], $3::numeric[]) AS p(perk_type, perk_value)
            RETURNING *;
        """
        perk_types = [perk_type for perk_type, _ in perks]
        values = [value for _, value in perks]
        records = await self.conn.fetch(sql, card_id, perk_types, values, expires_at)
        return [dict(record) for record in records]

    async def list_by_card(self, card_id: int) -> list[dict]:
        sql = "SELECT * FROM card_perks WHERE card_id = $1 ORDER BY id;"
        records = await self.conn.fetch(sql, card_id)
        return [dict(record) for record in records]

    async def claim(self, card_id: int, perk_type: str, clinic_id: int, claimed_at: datetime) -> dict | None:
        sql = """
            UPDATE card_perks
            SET claimed = TRUE, claimed_at = $4, claimed_by_clinic_id = $3
            WHERE card_id = $1 AND perk_type = $2::perktype AND claimed = FALSE
              AND (expires_at IS NULL OR expires_at > $4)
            RETURNING *;
        """
        record = await self.conn.fetchrow(sql, card_id, perk_type, clinic_id, claimed_at)
        return dict(record) if record else None
