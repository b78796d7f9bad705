from typing import List, Dict, Any

from fastapi import APIRouter, Depends, HTTPException, status, Query

from mocards.api.v1.deps import get_clinic_service, get_current_admin
from mocards.schemas.clinic_schema import ClinicCreate, ClinicOut
from mocards.schemas.location_code_schema import LocationCodeCreate, LocationCodeOut
from mocards.services.clinic_service import ClinicService

router = APIRouter(prefix="/api/v1", tags=["clinics"])


@router.post("/clinics", response_model=ClinicOut, status_code=status.HTTP_201_CREATED)
async def create_clinic(
        body: ClinicCreate,
        admin: Dict[str, Any] = Depends(get_current_admin),
        clinic_service: ClinicService = Depends(get_clinic_service),
):
    return await clinic_service.register_clinic(body)


@router.get("/clinics", response_model=List[ClinicOut])
async def list_clinics(
        active_only: bool = Query(False),
        admin: Dict[str, Any] = Depends(get_current_admin),
        clinic_service: ClinicService = Depends(get_clinic_service),
):
    clinics = await clinic_service.list_clinics(active_only=active_only)
    return [ClinicOut(**clinic) for clinic in clinics]


@router.get("/clinics/{clinic_code}", response_model=ClinicOut)
async def get_clinic(
        clinic_code: str,
        admin: Dict[str, Any] = Depends(get_current_admin),
        clinic_service: ClinicService = Depends(get_clinic_service),
):
    clinic = await clinic_service.get_by_code(clinic_code)
    if clinic is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                            detail=f"Clinic {clinic_code} not found.")
    return ClinicOut(**clinic)


@router.get("/location-codes", response_model=List[LocationCodeOut])
async def list_location_codes(clinic_service: ClinicService = Depends(get_clinic_service)):
    return await clinic_service.list_location_codes()


@router.post("/location-codes", response_model=LocationCodeOut, status_code=status.HTTP_201_CREATED)
async def create_location_code(
        body: LocationCodeCreate,
        admin: Dict[str, Any] = Depends(get_current_admin),
        clinic_service: ClinicService = Depends(get_clinic_service),
):
    try:
        return await clinic_service.create_location_code(body)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
