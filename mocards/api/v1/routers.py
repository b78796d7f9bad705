# mocards/api/v1/routers.py
from fastapi import APIRouter
from mocards.api.v1.endpoints import auth, batches, cards, clinics, appointments

router = APIRouter()

router.include_router(auth.router)
router.include_router(batches.router)
router.include_router(cards.router)
router.include_router(clinics.router)
router.include_router(appointments.router)
