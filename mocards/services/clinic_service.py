from mocards.core.exceptions import ClinicAlreadyExistsException
from mocards.core.security import hash_password
from mocards.repositories.clinic_repo import ClinicRepository
from mocards.repositories.location_code_repo import LocationCodeRepository
from mocards.schemas.clinic_schema import ClinicCreate
from mocards.schemas.location_code_schema import LocationCodeCreate


class ClinicService:
    def __init__(self, clinic_repo: ClinicRepository, location_repo: LocationCodeRepository):
        self.clinic_repo = clinic_repo
        self.location_repo = location_repo

    async def register_clinic(self, clinic_in: ClinicCreate) -> dict:
        clinic_code = clinic_in.clinic_code.upper()
        if await self.clinic_repo.get_by_code(clinic_code):
            raise ClinicAlreadyExistsException(clinic_code)

        clinic_data = {
            "clinic_code": clinic_code,
            "clinic_name": clinic_in.clinic_name,
            "contact_email": clinic_in.contact_email,
            "contact_phone": clinic_in.contact_phone,
            "address": clinic_in.address,
            "password_hash": hash_password(clinic_in.password),
        }
        try:
            return await self.clinic_repo.create(clinic_data)
        except ValueError:
            raise ClinicAlreadyExistsException(clinic_code)

    async def list_clinics(self, active_only: bool = False) -> list[dict]:
        return await self.clinic_repo.list_all(active_only=active_only)

    async def get_by_code(self, clinic_code: str) -> dict | None:
        return await self.clinic_repo.get_by_code(clinic_code.upper())

    async def list_location_codes(self) -> list[dict]:
        return await self.location_repo.list_active()

    async def create_location_code(self, location_in: LocationCodeCreate) -> dict:
        return await self.location_repo.create(
            location_in.code.upper(),
            location_in.location_name,
            location_in.description,
            location_in.is_active,
        )
