from datetime import datetime, timedelta, timezone
from typing import Optional
from mocards.repositories.admin_repo import AdminRepository
from mocards.repositories.clinic_repo import ClinicRepository
from mocards.core.security import verify_password, hash_password, create_access_token, ROLE_ADMIN, ROLE_CLINIC
from mocards.core.config import settings
from mocards.db.models.clinic_model import ClinicStatus


class InvalidCurrentPassword(Exception): pass
class PasswordUnchanged(Exception): pass


class AuthService:
    def __init__(self, admin_repo: AdminRepository, clinic_repo: ClinicRepository):
        self.admin_repo = admin_repo
        self.clinic_repo = clinic_repo

    async def authenticate_admin(self, username: str, password: str) -> Optional[dict]:
        admin = await self.admin_repo.get_by_username(username)
        if not admin:
            return None
        if not verify_password(password, admin.get("password_hash", "")):
            return None
        return admin

    async def authenticate_clinic(self, clinic_code: str, password: str) -> Optional[dict]:
        clinic = await self.clinic_repo.get_by_code(clinic_code.upper())
        if not clinic:
            return None
        if not verify_password(password, clinic.get("password_hash", "")):
            return None
        return clinic

    @staticmethod
    def is_admin_active(admin: dict) -> bool:
        return bool(admin.get("is_active", False))

    @staticmethod
    def is_clinic_active(clinic: dict) -> bool:
        return clinic.get("status") == ClinicStatus.ACTIVE.value

    def create_token(self, subject_id: int, role: str) -> str:
        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        return create_access_token(subject=str(subject_id), role=role, expires_delta=access_token_expires)

    def create_token_for_admin(self, admin: dict) -> str:
        return self.create_token(admin["id"], ROLE_ADMIN)

    def create_token_for_clinic(self, clinic: dict) -> str:
        return self.create_token(clinic["id"], ROLE_CLINIC)

    async def change_clinic_password(self, clinic: dict, current_password: str, new_password: str) -> Optional[dict]:
        if not verify_password(current_password, clinic.get("password_hash", "")):
            raise InvalidCurrentPassword("Current password is incorrect.")
        if current_password == new_password:
            raise PasswordUnchanged("New password must be different from the current password.")

        return await self.clinic_repo.update_password(
            clinic["id"], hash_password(new_password), datetime.now(timezone.utc)
        )
