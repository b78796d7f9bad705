import logging
import traceback

from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Dict, Any

from mocards.api.v1.deps import (
    get_card_service,
    get_card_repo,
    get_current_admin,
    get_current_clinic,
)
from mocards.repositories.card_repo import CardRepository
from mocards.schemas.card_schema import (
    CardOut,
    CardDetailOut,
    CardLookupIn,
    AssignCardsIn,
    AssignCardsOut,
    ReassignCardIn,
    ActivateCardIn,
    SuspendCardIn,
    ClaimPerkIn,
    PerkOut,
    CardTransactionOut,
)
from mocards.services.card_lifecycle import InvalidCardTransition
from mocards.services.card_service import (
    CardService,
    CardNotFound,
    ClinicNotFound,
    NotAssignedToClinic,
    PerkUnavailable,
)

router = APIRouter(prefix="/api/v1/cards", tags=["cards"])


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, (CardNotFound, ClinicNotFound)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, NotAssignedToClinic):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if isinstance(e, (InvalidCardTransition, PerkUnavailable)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


KNOWN_ERRORS = (CardNotFound, ClinicNotFound, NotAssignedToClinic, InvalidCardTransition, PerkUnavailable, ValueError)


@router.post("/lookup", response_model=CardDetailOut)
async def lookup_card(body: CardLookupIn, card_service: CardService = Depends(get_card_service)):
    try:
        return await card_service.lookup_card(body.control_number, body.passcode)
    except CardNotFound as e:
        raise _http_error(e)


@router.get("/unassigned", response_model=List[CardOut])
async def list_unassigned_cards(
        limit: int = Query(100, gt=0, le=1000),
        admin: Dict[str, Any] = Depends(get_current_admin),
        card_repo: CardRepository = Depends(get_card_repo),
):
    return await card_repo.list_unassigned(limit=limit)


@router.get("/clinic", response_model=List[CardOut])
async def list_clinic_cards(
        clinic: Dict[str, Any] = Depends(get_current_clinic),
        card_repo: CardRepository = Depends(get_card_repo),
):
    cards = await card_repo.list_by_clinic(clinic["id"])
    return [CardOut(**card) for card in cards]


@router.post("/assign", response_model=AssignCardsOut)
async def assign_cards(
        body: AssignCardsIn,
        admin: Dict[str, Any] = Depends(get_current_admin),
        card_service: CardService = Depends(get_card_service),
):
    try:
        assigned = await card_service.assign_cards_to_clinic(body.card_ids, body.clinic_id, str(admin["id"]))
    except KNOWN_ERRORS as e:
        raise _http_error(e)
    except Exception as e:
        logging.error(f"Internal Server Error in assign_cards: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="An unknown error occurred.")
    assigned_ids = {card["id"] for card in assigned}
    requested = sorted(set(body.card_ids))
    return AssignCardsOut(
        requested=len(requested),
        assigned=[CardOut(**card) for card in assigned],
        skipped_card_ids=[card_id for card_id in requested if card_id not in assigned_ids],
    )


@router.post("/expire-overdue", response_model=List[CardOut])
async def expire_overdue_cards(
        admin: Dict[str, Any] = Depends(get_current_admin),
        card_service: CardService = Depends(get_card_service),
):
    return await card_service.expire_overdue_cards()


@router.post("/{card_id}/activate", response_model=CardOut)
async def activate_card(
        card_id: int,
        body: ActivateCardIn,
        clinic: Dict[str, Any] = Depends(get_current_clinic),
        card_service: CardService = Depends(get_card_service),
):
    try:
        return await card_service.activate_card(
            card_id,
            clinic["id"],
            activated_by=str(clinic["id"]),
            activated_by_name=clinic["clinic_name"],
            location_number=body.location_number,
            patient_name=body.patient_name,
        )
    except KNOWN_ERRORS as e:
        raise _http_error(e)
    except Exception as e:
        logging.error(f"Internal Server Error in activate_card: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="An unknown error occurred.")


@router.patch("/{card_id}/clinic", response_model=CardOut)
async def reassign_card(
        card_id: int,
        body: ReassignCardIn,
        admin: Dict[str, Any] = Depends(get_current_admin),
        card_service: CardService = Depends(get_card_service),
):
    try:
        return await card_service.reassign_card(card_id, body.clinic_id, str(admin["id"]))
    except KNOWN_ERRORS as e:
        raise _http_error(e)


@router.post("/{card_id}/suspend", response_model=CardOut)
async def suspend_card(
        card_id: int,
        body: SuspendCardIn,
        admin: Dict[str, Any] = Depends(get_current_admin),
        card_service: CardService = Depends(get_card_service),
):
    try:
        return await card_service.suspend_card(card_id, str(admin["id"]), body.reason)
    except KNOWN_ERRORS as e:
        raise _http_error(e)


@router.post("/{card_id}/perks/claim", response_model=PerkOut)
async def claim_perk(
        card_id: int,
        body: ClaimPerkIn,
        clinic: Dict[str, Any] = Depends(get_current_clinic),
        card_service: CardService = Depends(get_card_service),
):
    try:
        return await card_service.claim_perk(card_id, body.perk_type.value, clinic["id"], clinic["clinic_name"])
    except KNOWN_ERRORS as e:
        raise _http_error(e)
    except Exception as e:
        logging.error(f"Internal Server Error in claim_perk: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="An unknown error occurred.")


@router.get("/{card_id}/transactions", response_model=List[CardTransactionOut])
async def list_card_transactions(
        card_id: int,
        admin: Dict[str, Any] = Depends(get_current_admin),
        card_service: CardService = Depends(get_card_service),
):
    try:
        return await card_service.list_transactions(card_id)
    except CardNotFound as e:
        raise _http_error(e)
