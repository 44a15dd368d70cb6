"""
Account API endpoints.

Registration, login, password lifecycle, token refresh and the caller's
profile. Delegates to the configured identity provider (local or Cognito).
"""
from fastapi import APIRouter, Depends, HTTPException, status

from myumc.api.deps import get_current_user_context, get_identity_service, get_optional_user_context
from myumc.api.permissions import is_platform_admin
from myumc.db import schemas
from myumc.services.auth_service import AuthService
from myumc.utils.role_permissions import role_allows_self_registration

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _ok_or_raise(result: schemas.AuthResponse, status_code: int = status.HTTP_400_BAD_REQUEST) -> schemas.AuthResponse:
    if not result.success:
        raise HTTPException(status_code=status_code, detail=result.message)
    return result


@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: schemas.RegisterRequest,
    service: AuthService = Depends(get_identity_service),
    user_context=Depends(get_optional_user_context),
):
    _user, current_user = user_context
    if not role_allows_self_registration(payload.user_type.value) and not is_platform_admin(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only platform administrators can create privileged accounts")
    return _ok_or_raise(service.register(payload))


@router.post("/login", response_model=schemas.AuthResponse)
def login(payload: schemas.LoginRequest, service: AuthService = Depends(get_identity_service)):
    return _ok_or_raise(service.login(payload.email, payload.password), status.HTTP_401_UNAUTHORIZED)


@router.post("/confirm", response_model=schemas.AuthResponse)
def confirm_registration(payload: schemas.ConfirmRegistrationRequest, service: AuthService = Depends(get_identity_service)):
    return _ok_or_raise(service.confirm_registration(payload.email, payload.confirmation_code))


@router.post("/forgot-password", response_model=schemas.AuthResponse)
def forgot_password(payload: schemas.ForgotPasswordRequest, service: AuthService = Depends(get_identity_service)):
    return _ok_or_raise(service.forgot_password(payload.email))


@router.post("/reset-password", response_model=schemas.AuthResponse)
def reset_password(payload: schemas.ResetPasswordRequest, service: AuthService = Depends(get_identity_service)):
    return _ok_or_raise(service.reset_password(payload.email, payload.reset_code, payload.new_password))


@router.post("/refresh", response_model=schemas.AuthResponse)
def refresh_token(payload: schemas.RefreshTokenRequest, service: AuthService = Depends(get_identity_service)):
    return _ok_or_raise(service.refresh(payload.refresh_token), status.HTTP_401_UNAUTHORIZED)


@router.post("/change-password", response_model=schemas.AuthResponse)
def change_password(
    payload: schemas.ChangePasswordRequest,
    service: AuthService = Depends(get_identity_service),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    result = service.change_password(
        user, payload.current_password, payload.new_password, access_token=current_user.get("access_token")
    )
    return _ok_or_raise(result)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    service: AuthService = Depends(get_identity_service),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    service.sign_out(user, access_token=current_user.get("access_token"))


@router.get("/me", response_model=schemas.UserProfile)
def get_me(
    service: AuthService = Depends(get_identity_service),
    user_context=Depends(get_current_user_context),
):
    user, _ctx = user_context
    return service.get_profile(user.id)


@router.put("/me", response_model=schemas.UserProfile)
def update_me(
    payload: schemas.UserProfileUpdate,
    service: AuthService = Depends(get_identity_service),
    user_context=Depends(get_current_user_context),
):
    user, _ctx = user_context
    return service.update_profile(user.id, payload)
