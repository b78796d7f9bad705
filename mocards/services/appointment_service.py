from datetime import datetime, timezone

from mocards.core import codes
from mocards.db.models.appointment_model import AppointmentStatus
from mocards.db.models.card_model import CardStatus
from mocards.repositories.appointment_repo import AppointmentRepository
from mocards.repositories.card_repo import CardRepository
from mocards.schemas.appointment_schema import AppointmentRequest


class AppointmentError(Exception): pass
class AppointmentNotFound(Exception): pass


# target status -> statuses it may be reached from
APPOINTMENT_TRANSITIONS: dict[AppointmentStatus, set[AppointmentStatus]] = {
    AppointmentStatus.CONFIRMED: {AppointmentStatus.SCHEDULED},
    AppointmentStatus.COMPLETED: {AppointmentStatus.CONFIRMED},
    AppointmentStatus.NO_SHOW: {AppointmentStatus.CONFIRMED},
    AppointmentStatus.CANCELLED: {AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED},
}


class AppointmentService:
    def __init__(self, appointment_repo: AppointmentRepository, card_repo: CardRepository):
        self.appointment_repo = appointment_repo
        self.card_repo = card_repo

    async def request_appointment(self, request: AppointmentRequest) -> dict:
        card = await self.card_repo.get_by_codes(
            codes.normalize_control_number(request.control_number),
            codes.normalize_passcode(request.passcode),
        )
        if card is None:
            raise AppointmentError("No card matches this control number and passcode.")
        if card["status"] != CardStatus.ACTIVATED.value or card["clinic_id"] is None:
            raise AppointmentError("Appointments can only be booked with an activated card.")

        return await self.appointment_repo.create({
            "card_id": card["id"],
            "clinic_id": card["clinic_id"],
            "patient_name": request.patient_name,
            "patient_phone": request.patient_phone,
            "patient_email": request.patient_email,
            "appointment_date": request.appointment_date,
            "appointment_time": request.appointment_time,
            "service_type": request.service_type,
            "notes": request.notes,
        })

    async def list_for_clinic(self, clinic_id: int, status: AppointmentStatus | None = None) -> list[dict]:
        return await self.appointment_repo.list_by_clinic(clinic_id, status.value if status else None)

    async def change_status(self, appointment_id: int, clinic_id: int, new_status: AppointmentStatus) -> dict:
        appointment = await self.appointment_repo.get_by_id(appointment_id)
        if appointment is None or appointment["clinic_id"] != clinic_id:
            raise AppointmentNotFound(f"Appointment {appointment_id} not found.")

        sources = APPOINTMENT_TRANSITIONS.get(new_status)
        if not sources or AppointmentStatus(appointment["status"]) not in sources:
            raise AppointmentError(
                f"Cannot move appointment from {appointment['status']} to {new_status.value}."
            )
        updated = await self.appointment_repo.update_status(
            appointment_id,
            sorted(s.value for s in sources),
            new_status.value,
            datetime.now(timezone.utc),
        )
        if updated is None:
            raise AppointmentError(f"Appointment {appointment_id} changed while being updated.")
        return updated
