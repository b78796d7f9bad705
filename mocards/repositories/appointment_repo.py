from datetime import datetime
from typing import Optional
from asyncpg import Connection


class AppointmentRepository:

    def __init__(self, conn: Connection):
        self.conn = conn

    async def create(self, appointment_in: dict) -> dict:
        sql = """
            INSERT INTO appointments
            (card_id, clinic_id, patient_name, patient_phone, patient_email,
             appointment_date, appointment_time, service_type, status, notes)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, 'scheduled', $9)
            RETURNING *;
        """
        record = await self.conn.fetchrow(
            sql,
            appointment_in["card_id"],
            appointment_in["clinic_id"],
            appointment_in["patient_name"],
            appointment_in.get("patient_phone"),
            appointment_in.get("patient_email"),
            appointment_in["appointment_date"],
            appointment_in["appointment_time"],
            appointment_in["service_type"],
            appointment_in.get("notes"),
        )
        return dict(record)

    async def get_by_id(self, appointment_id: int) -> dict | None:
        sql = "SELECT * FROM appointments WHERE id = $1;"
        record = await self.conn.fetchrow(sql, appointment_id)
        return dict(record) if record else None

    async def list_by_clinic(self, clinic_id: int, status: Optional[str] = None) -> list[dict]:
        clauses = ["clinic_id = $1"]
        args: list = [clinic_id]
        if status:
            clauses.append(f"status = ${len(args)+1}::appointmentstatus")
            args.append(status)
        sql = (
            f"SELECT * FROM appointments WHERE {' AND '.join(clauses)} "
            f"ORDER BY appointment_date, appointment_time;"
        )
        records = await self.conn.fetch(sql, *args)
        return [dict(record) for record in records]

    async def update_status(self, appointment_id: int, from_statuses: list[str], to_status: str,
                            updated_at: datetime) -> dict | None:
        sql = """
            UPDATE appointments
            SET status = $3::appointmentstatus, updated_at = $4
            WHERE id = $1 AND status = ANY($2::appointmentstatus[])
            RETURNING *;
        """
        record = await self.conn.fetchrow(sql, appointment_id, from_statuses, to_status, updated_at)
        return dict(record) if record else None
