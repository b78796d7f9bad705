from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from asyncpg import Connection

from mocards.core.exceptions import TokenInvalidException, RoleForbiddenException
from mocards.core.security import decode_access_token, ROLE_ADMIN, ROLE_CLINIC
from mocards.db.session import get_db_connection
from mocards.repositories.admin_repo import AdminRepository
from mocards.repositories.appointment_repo import AppointmentRepository
from mocards.repositories.batch_repo import BatchRepository
from mocards.repositories.card_repo import CardRepository
from mocards.repositories.card_transaction_repo import CardTransactionRepository
from mocards.repositories.clinic_repo import ClinicRepository
from mocards.repositories.location_code_repo import LocationCodeRepository
from mocards.repositories.perk_repo import PerkRepository
from mocards.schemas.auth_schema import TokenPayload
from mocards.services.appointment_service import AppointmentService
from mocards.services.auth_services import AuthService
from mocards.services.batch_service import BatchService
from mocards.services.card_service import CardService
from mocards.services.clinic_service import ClinicService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/admin/token")


# ------------------ Repositories ------------------ #

def get_card_repo(conn: Connection = Depends(get_db_connection)) -> CardRepository:
    return CardRepository(conn)

def get_perk_repo(conn: Connection = Depends(get_db_connection)) -> PerkRepository:
    return PerkRepository(conn)

def get_batch_repo(conn: Connection = Depends(get_db_connection)) -> BatchRepository:
    return BatchRepository(conn)

def get_clinic_repo(conn: Connection = Depends(get_db_connection)) -> ClinicRepository:
    return ClinicRepository(conn)

def get_location_repo(conn: Connection = Depends(get_db_connection)) -> LocationCodeRepository:
    return LocationCodeRepository(conn)

def get_card_transaction_repo(conn: Connection = Depends(get_db_connection)) -> CardTransactionRepository:
    return CardTransactionRepository(conn)

def get_appointment_repo(conn: Connection = Depends(get_db_connection)) -> AppointmentRepository:
    return AppointmentRepository(conn)

def get_admin_repo(conn: Connection = Depends(get_db_connection)) -> AdminRepository:
    return AdminRepository(conn)


# ------------------ Services ------------------ #

def get_card_service(
        conn: Connection = Depends(get_db_connection),
        card_repo: CardRepository = Depends(get_card_repo),
        perk_repo: PerkRepository = Depends(get_perk_repo),
        batch_repo: BatchRepository = Depends(get_batch_repo),
        clinic_repo: ClinicRepository = Depends(get_clinic_repo),
        location_repo: LocationCodeRepository = Depends(get_location_repo),
        tx_repo: CardTransactionRepository = Depends(get_card_transaction_repo),
) -> CardService:
    return CardService(conn, card_repo, perk_repo, batch_repo, clinic_repo, location_repo, tx_repo)

def get_batch_service(
        conn: Connection = Depends(get_db_connection),
        batch_repo: BatchRepository = Depends(get_batch_repo),
        card_repo: CardRepository = Depends(get_card_repo),
        clinic_repo: ClinicRepository = Depends(get_clinic_repo),
        card_service: CardService = Depends(get_card_service),
) -> BatchService:
    return BatchService(conn, batch_repo, card_repo, clinic_repo, card_service)

def get_clinic_service(
        clinic_repo: ClinicRepository = Depends(get_clinic_repo),
        location_repo: LocationCodeRepository = Depends(get_location_repo),
) -> ClinicService:
    return ClinicService(clinic_repo, location_repo)

def get_auth_service(
        admin_repo: AdminRepository = Depends(get_admin_repo),
        clinic_repo: ClinicRepository = Depends(get_clinic_repo),
) -> AuthService:
    return AuthService(admin_repo, clinic_repo)

def get_appointment_service(
        appointment_repo: AppointmentRepository = Depends(get_appointment_repo),
        card_repo: CardRepository = Depends(get_card_repo),
) -> AppointmentService:
    return AppointmentService(appointment_repo, card_repo)


# ------------------ Current Principal ------------------ #

def get_token_payload(token: str = Depends(oauth2_scheme)) -> TokenPayload:
    try:
        payload = decode_access_token(token)
        token_data = TokenPayload(**payload)
    except JWTError:
        raise TokenInvalidException()
    if token_data.sub is None or token_data.role is None:
        raise TokenInvalidException()
    return token_data


async def get_current_admin(
        token_data: TokenPayload = Depends(get_token_payload),
        admin_repo: AdminRepository = Depends(get_admin_repo),
) -> dict:
    if token_data.role != ROLE_ADMIN:
        raise RoleForbiddenException(ROLE_ADMIN)
    admin = await admin_repo.get_by_id(int(token_data.sub))
    if admin is None or not admin.get("is_active", False):
        raise TokenInvalidException()
    return admin


async def get_current_clinic(
        token_data: TokenPayload = Depends(get_token_payload),
        clinic_repo: ClinicRepository = Depends(get_clinic_repo),
) -> dict:
    if token_data.role != ROLE_CLINIC:
        raise RoleForbiddenException(ROLE_CLINIC)
    clinic = await clinic_repo.get_by_id(int(token_data.sub))
    if clinic is None or clinic.get("status") != "active":
        raise TokenInvalidException()
    return clinic


async def get_current_principal(
        token_data: TokenPayload = Depends(get_token_payload),
        admin_repo: AdminRepository = Depends(get_admin_repo),
        clinic_repo: ClinicRepository = Depends(get_clinic_repo),
) -> dict:
    if token_data.role == ROLE_ADMIN:
        admin = await get_current_admin(token_data, admin_repo)
        return {"id": admin["id"], "role": ROLE_ADMIN, "name": admin.get("full_name") or admin["username"]}
    if token_data.role == ROLE_CLINIC:
        clinic = await get_current_clinic(token_data, clinic_repo)
        return {"id": clinic["id"], "role": ROLE_CLINIC, "name": clinic["clinic_name"]}
    raise TokenInvalidException()
