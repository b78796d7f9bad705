import logging
import traceback
from typing import List, Dict, Any

from fastapi import APIRouter, Depends, HTTPException, status

from mocards.api.v1.deps import get_batch_service, get_current_admin
from mocards.schemas.batch_schema import (
    BatchCreate,
    BatchOut,
    BatchGenerationOut,
    BatchStatsOut,
    DashboardStatsOut,
)
from mocards.services.batch_service import BatchService, BatchNotFound
from mocards.services.card_service import InvalidCardCount, InvalidLocationCode
from mocards.services.code_generator import GenerationExhausted

router = APIRouter(prefix="/api/v1/batches", tags=["batches"])


@router.post("/", response_model=BatchGenerationOut, status_code=status.HTTP_201_CREATED)
async def create_batch(
        body: BatchCreate,
        admin: Dict[str, Any] = Depends(get_current_admin),
        batch_service: BatchService = Depends(get_batch_service),
):
    try:
        return await batch_service.create_batch(
            total_cards=body.total_cards,
            location_code=body.location_code.upper(),
            created_by=admin["username"],
            notes=body.notes,
            batch_number=body.batch_number.upper() if body.batch_number else None,
        )

    except (InvalidCardCount, InvalidLocationCode, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except GenerationExhausted as e:
        logging.warning(f"Batch generation exhausted: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    except Exception as e:
        logging.error(f"Internal Server Error in create_batch: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="An unknown error occurred.")


@router.get("/", response_model=List[BatchOut])
async def list_batches(
        admin: Dict[str, Any] = Depends(get_current_admin),
        batch_service: BatchService = Depends(get_batch_service),
):
    return await batch_service.list_batches()


@router.get("/dashboard", response_model=DashboardStatsOut)
async def dashboard_stats(
        admin: Dict[str, Any] = Depends(get_current_admin),
        batch_service: BatchService = Depends(get_batch_service),
):
    return await batch_service.dashboard_stats()


@router.get("/{batch_id}", response_model=BatchOut)
async def get_batch(
        batch_id: int,
        admin: Dict[str, Any] = Depends(get_current_admin),
        batch_service: BatchService = Depends(get_batch_service),
):
    try:
        return await batch_service.get_batch(batch_id)
    except BatchNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{batch_id}/stats", response_model=BatchStatsOut)
async def batch_stats(
        batch_id: int,
        admin: Dict[str, Any] = Depends(get_current_admin),
        batch_service: BatchService = Depends(get_batch_service),
):
    try:
        return await batch_service.batch_statistics(batch_id)
    except BatchNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{batch_id}/archive", response_model=BatchOut)
async def archive_batch(
        batch_id: int,
        admin: Dict[str, Any] = Depends(get_current_admin),
        batch_service: BatchService = Depends(get_batch_service),
):
    try:
        return await batch_service.archive_batch(batch_id)
    except BatchNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
