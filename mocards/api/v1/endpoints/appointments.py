from typing import List, Dict, Any, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query

from mocards.api.v1.deps import get_appointment_service, get_current_clinic
from mocards.db.models.appointment_model import AppointmentStatus
from mocards.schemas.appointment_schema import AppointmentRequest, AppointmentStatusIn, AppointmentOut
from mocards.services.appointment_service import AppointmentService, AppointmentError, AppointmentNotFound

router = APIRouter(prefix="/api/v1/appointments", tags=["appointments"])


@router.post("/", response_model=AppointmentOut, status_code=status.HTTP_201_CREATED)
async def request_appointment(
        body: AppointmentRequest,
        appointment_service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await appointment_service.request_appointment(body)
    except AppointmentError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[AppointmentOut])
async def list_clinic_appointments(
        status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
        clinic: Dict[str, Any] = Depends(get_current_clinic),
        appointment_service: AppointmentService = Depends(get_appointment_service),
):
    return await appointment_service.list_for_clinic(clinic["id"], status_filter)


@router.patch("/{appointment_id}/status", response_model=AppointmentOut)
async def change_appointment_status(
        appointment_id: int,
        body: AppointmentStatusIn,
        clinic: Dict[str, Any] = Depends(get_current_clinic),
        appointment_service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await appointment_service.change_status(appointment_id, clinic["id"], body.status)
    except AppointmentNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AppointmentError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
