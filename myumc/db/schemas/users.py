import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from myumc.utils.role_permissions import RoleEnum


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=256)
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=32)
    user_type: RoleEnum = RoleEnum.member
    organization_id: Optional[uuid.UUID] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class ConfirmRegistrationRequest(BaseModel):
    email: str
    confirmation_code: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    email: str
    reset_code: str
    new_password: str = Field(min_length=8, max_length=128)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=128)


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class AuthResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None


class UserProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=32)
    preferred_language: Optional[str] = Field(default=None, max_length=8)


class UserProfile(BaseModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    user_type: str
    organization_id: Optional[uuid.UUID] = None
    profile_picture_url: Optional[str] = None
    is_active: bool
    preferred_language: str
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
