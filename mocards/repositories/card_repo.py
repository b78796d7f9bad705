from datetime import datetime
from typing import Iterable, Optional
from asyncpg import Connection, UniqueViolationError


class DuplicateCode(ValueError):
    """A control number or passcode hit a unique constraint."""


class CardRepository:
    """Repository for card rows, backed by asyncpg."""

    def __init__(self, conn: Connection):
        self.conn = conn

    # ------------------ Retrieval Methods ------------------ #

    async def get_by_id(self, card_id: int) -> dict | None:
        sql = "SELECT * FROM cards WHERE id = $1;"
        record = await self.conn.fetchrow(sql, card_id)
        return dict(record) if record else None

    async def get_by_codes(self, control_number: str, passcode: str) -> dict | None:
        sql = """
            SELECT c.*, cl.clinic_name, b.batch_number
            FROM cards c
            LEFT JOIN clinics cl ON cl.id = c.clinic_id
            LEFT JOIN card_batches b ON b.id = c.batch_id
            WHERE (c.control_number = $1 OR c.control_number_v2 = $1)
              AND c.passcode = $2;
        """
        record = await self.conn.fetchrow(sql, control_number, passcode)
        return dict(record) if record else None

    async def control_number_exists(self, control_number: str) -> bool:
        sql = "SELECT EXISTS(SELECT 1 FROM cards WHERE control_number = $1);"
        return bool(await self.conn.fetchval(sql, control_number))

    async def passcode_exists(self, passcode: str) -> bool:
        sql = "SELECT EXISTS(SELECT 1 FROM cards WHERE passcode = $1);"
        return bool(await self.conn.fetchval(sql, passcode))

    async def list_by_clinic(self, clinic_id: int) -> list[dict]:
        sql = """
            SELECT * FROM cards
            WHERE clinic_id = $1
            ORDER BY assigned_at DESC NULLS LAST, id;
        """
        records = await self.conn.fetch(sql, clinic_id)
        return [dict(record) for record in records]

    async def list_unassigned(self, limit: int = 100) -> list[dict]:
        sql = "SELECT * FROM cards WHERE status = 'unassigned' ORDER BY id LIMIT $1;"
        records = await self.conn.fetch(sql, limit)
        return [dict(record) for record in records]

    async def list_by_batch(self, batch_id: int) -> list[dict]:
        sql = "SELECT * FROM cards WHERE batch_id = $1 ORDER BY id;"
        records = await self.conn.fetch(sql, batch_id)
        return [dict(record) for record in records]

    # ------------------ Creation ------------------ #

    async def bulk_create(
        self,
        batch_id: int,
        location_code: str,
        codes: list[tuple[str, str]],
        status: str,
        generation_method: str,
    ) -> list[dict]:
        """Insert one card per (control_number, passcode) pair in a single statement."""
        sql = """
            INSERT INTO cards (batch_id, control_number, passcode, location_code, status, generation_method)
            SELECT $1, c.control_number, c.passcode, $4, $5::cardstatus, $6::generationmethod
            FROM unnest($2::text[], $3::text[]) AS c(control_number, passcode)
            RETURNING *;
        """
        control_numbers = [control_number for control_number, _ in codes]
        passcodes = [passcode for _, passcode in codes]
        try:
            records = await self.conn.fetch(
                sql, batch_id, control_numbers, passcodes, location_code, status, generation_method
            )
        except UniqueViolationError as e:
            raise DuplicateCode(str(e))
        return [dict(record) for record in records]

    # ------------------ Status Transitions ------------------ #

    async def assign_unassigned(self, card_ids: Iterable[int], clinic_id: int, assigned_at: datetime) -> list[dict]:
        sql = """
            UPDATE cards
            SET status = 'assigned', clinic_id = $2, assigned_at = $3, updated_at = $3
            WHERE id = ANY($1::int[]) AND status = 'unassigned'
            RETURNING *;
        """
        records = await self.conn.fetch(sql, list(card_ids), clinic_id, assigned_at)
        return [dict(record) for record in records]

    async def reassign(self, card_id: int, clinic_id: int, assigned_at: datetime) -> dict | None:
        sql = """
            UPDATE cards
            SET clinic_id = $2, assigned_at = $3, updated_at = $3
            WHERE id = $1 AND status = 'assigned' AND clinic_id <> $2
            RETURNING *;
        """
        record = await self.conn.fetchrow(sql, card_id, clinic_id, assigned_at)
        return dict(record) if record else None

    async def activate(
        self,
        card_id: int,
        clinic_id: int,
        activated_at: datetime,
        expires_at: datetime,
        control_number_v2: Optional[str] = None,
    ) -> dict | None:
        sql = """
            UPDATE cards
            SET status = 'activated', activated_at = $3, expires_at = $4,
                control_number_v2 = COALESCE($5, control_number_v2), updated_at = $3
            WHERE id = $1 AND clinic_id = $2 AND status = 'assigned'
            RETURNING *;
        """
        try:
            record = await self.conn.fetchrow(sql, card_id, clinic_id, activated_at, expires_at, control_number_v2)
        except UniqueViolationError as e:
            raise DuplicateCode(str(e))
        return dict(record) if record else None

    async def suspend(self, card_id: int, from_statuses: list[str], suspended_at: datetime) -> dict | None:
        sql = """
            UPDATE cards
            SET status = 'suspended', updated_at = $3
            WHERE id = $1 AND status = ANY($2::cardstatus[])
            RETURNING *;
        """
        record = await self.conn.fetchrow(sql, card_id, from_statuses, suspended_at)
        return dict(record) if record else None

    async def expire_overdue(self, now: datetime) -> list[dict]:
        sql = """
            UPDATE cards
            SET status = 'expired', updated_at = $1
            WHERE status = 'activated' AND expires_at < $1
            RETURNING *;
        """
        records = await self.conn.fetch(sql, now)
        return [dict(record) for record in records]

    # ------------------ Aggregation Methods ------------------ #

    async def count_by_status(self, batch_id: Optional[int] = None) -> dict[str, int]:
        if batch_id is None:
            sql = "SELECT status::text AS status, COUNT(*) AS total FROM cards GROUP BY status;"
            records = await self.conn.fetch(sql)
        else:
            sql = """
                SELECT status::text AS status, COUNT(*) AS total
                FROM cards WHERE batch_id = $1 GROUP BY status;
            """
            records = await self.conn.fetch(sql, batch_id)
        return {record["status"]: int(record["total"]) for record in records}
