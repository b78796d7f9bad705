import logging
import traceback

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from mocards.api.v1.deps import get_auth_service, get_current_principal, get_current_clinic
from mocards.core.exceptions import InvalidCredentialsException, AccountInactiveException
from mocards.schemas.auth_schema import Token, PrincipalOut, ClinicPasswordChangeIn
from mocards.services.auth_services import AuthService, InvalidCurrentPassword, PasswordUnchanged

router = APIRouter(tags=["auth"], prefix="/api/v1/auth")


@router.post("/admin/token", response_model=Token)
async def admin_login(form_data: OAuth2PasswordRequestForm = Depends(),
                      auth_svc: AuthService = Depends(get_auth_service)):
    try:
        admin = await auth_svc.authenticate_admin(form_data.username, form_data.password)
    except Exception as e:
        logging.error(f"Admin authentication failed: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail={"error": "Authentication failed"})
    if not admin:
        raise InvalidCredentialsException()
    if not auth_svc.is_admin_active(admin):
        raise AccountInactiveException()
    return Token(access_token=auth_svc.create_token_for_admin(admin), token_type="bearer")


@router.post("/clinic/token", response_model=Token)
async def clinic_login(form_data: OAuth2PasswordRequestForm = Depends(),
                       auth_svc: AuthService = Depends(get_auth_service)):
    """Clinics sign in with their clinic code as the username."""
    try:
        clinic = await auth_svc.authenticate_clinic(form_data.username, form_data.password)
    except Exception as e:
        logging.error(f"Clinic authentication failed: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail={"error": "Authentication failed"})
    if not clinic:
        raise InvalidCredentialsException()
    if not auth_svc.is_clinic_active(clinic):
        raise AccountInactiveException()
    return Token(access_token=auth_svc.create_token_for_clinic(clinic), token_type="bearer")


@router.get("/me", response_model=PrincipalOut)
async def read_current_principal(principal: dict = Depends(get_current_principal)):
    return principal


@router.post("/clinic/password")
async def change_clinic_password(body: ClinicPasswordChangeIn,
                                 clinic: dict = Depends(get_current_clinic),
                                 auth_svc: AuthService = Depends(get_auth_service)):
    try:
        await auth_svc.change_clinic_password(clinic, body.current_password, body.new_password)
    except (InvalidCurrentPassword, PasswordUnchanged) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logging.info(f"Clinic {clinic['clinic_code']} changed its password.")
    return {"message": "Password updated."}
