"""
Local identity provider.

Passwords are Argon2id-hashed in ``users.password_hash``; sessions are HS256
JWT access tokens plus rotating refresh tokens (``rt_<id>_<secret>``) whose
secret is stored hashed on the user row.
"""
import logging
import os
import uuid
from datetime import datetime, timedelta
from typing import Optional, Tuple, Dict, Any

from jose import jwt, JWTError
from sqlalchemy.orm import Session

from myumc.db import models, schemas
from myumc.db.models import now_utc, ensure_aware
from myumc.db.repositories import users as user_repo
from myumc.services.errors import NotFoundError
from myumc.utils.runtime import sanitize_for_log
from myumc.utils.token_crypto import (
    generate_token,
    hash_secret,
    parse_token,
    verify_secret,
)

logger = logging.getLogger(__name__)

NOT_SUPPORTED = "Not supported by the local identity provider"


class JwtSettings:
    """JWT configuration from environment variables."""

    def __init__(self):
        self.secret_key = os.getenv("JWT_SECRET_KEY", "")
        self.algorithm = "HS256"
        self.issuer = os.getenv("JWT_ISSUER", "myumc")
        self.audience = os.getenv("JWT_AUDIENCE", "myumc-clients")
        self.expiry_minutes = int(os.getenv("JWT_EXPIRY_MINUTES", "60"))
        self.refresh_token_days = int(os.getenv("REFRESH_TOKEN_DAYS", "7"))

    def validate(self) -> None:
        if not self.secret_key:
            raise ValueError("JWT_SECRET_KEY is not configured")


def _failure(message: str) -> schemas.AuthResponse:
    return schemas.AuthResponse(success=False, message=message)


class AuthService:
    """Local username/password authentication with JWT sessions."""

    provider = "local"

    def __init__(self, db: Session, settings: Optional[JwtSettings] = None):
        self.db = db
        self.settings = settings or JwtSettings()
        self.settings.validate()

    # Tokens

    def create_access_token(self, user: models.User) -> Tuple[str, datetime]:
        now = now_utc()
        expires_at = now + timedelta(minutes=self.settings.expiry_minutes)
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.full_name,
            "role": user.user_type,
            "org": str(user.organization_id) if user.organization_id else None,
            "iss": self.settings.issuer,
            "aud": self.settings.audience,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self.settings.secret_key, algorithm=self.settings.algorithm)
        return token, expires_at

    def _issue_session(self, user: models.User, message: str) -> schemas.AuthResponse:
        access_token, expires_at = self.create_access_token(user)
        token_id, secret, refresh_token = generate_token()
        user_repo.store_refresh_token(
            self.db,
            user,
            token_id=token_id,
            token_hash=hash_secret(secret),
            expires_at=now_utc() + timedelta(days=self.settings.refresh_token_days),
        )
        return schemas.AuthResponse(
            success=True,
            message=message,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )

    def decode_access_token(self, token: str) -> Optional[Dict[str, Any]]:
        try:
            return jwt.decode(
                token,
                self.settings.secret_key,
                algorithms=[self.settings.algorithm],
                audience=self.settings.audience,
                issuer=self.settings.issuer,
            )
        except JWTError:
            return None

    def authenticate_token(self, token: str) -> Optional[models.User]:
        """Return the active user behind a bearer token, or None."""
        claims = self.decode_access_token(token)
        if not claims:
            return None
        try:
            user_id = uuid.UUID(claims.get("sub", ""))
        except ValueError:
            return None
        user = user_repo.get_user(self.db, user_id)
        if user is None or not user.is_active:
            return None
        return user

    # Account lifecycle

    def register(self, request: schemas.RegisterRequest) -> schemas.AuthResponse:
        if user_repo.get_user_by_email(self.db, request.email):
            return _failure("Email already registered")
        user = user_repo.create_user(
            self.db,
            email=request.email,
            password_hash=hash_secret(request.password),
            first_name=request.first_name,
            last_name=request.last_name,
            phone_number=request.phone_number,
            user_type=request.user_type.value,
            organization_id=request.organization_id,
            auth_provider=self.provider,
            is_active=True,
        )
        logger.info("Registered user %s", user.id)
        return self._issue_session(user, "Registration successful")

    def login(self, email: str, password: str) -> schemas.AuthResponse:
        user = user_repo.get_user_by_email(self.db, email)
        if user is None:
            logger.info("Login failed for unknown user %s", sanitize_for_log(email))
            return _failure("User not found")
        if not verify_secret(password, user.password_hash):
            logger.info("Login failed for user %s: invalid password", user.id)
            return _failure("Invalid password")
        if not user.is_active:
            return _failure("User account is not active")
        user.last_login_at = now_utc()
        return self._issue_session(user, "Login successful")

    def confirm_registration(self, email: str, code: str) -> schemas.AuthResponse:
        return _failure(NOT_SUPPORTED)

    def forgot_password(self, email: str) -> schemas.AuthResponse:
        return _failure(NOT_SUPPORTED)

    def reset_password(self, email: str, code: str, new_password: str) -> schemas.AuthResponse:
        return _failure(NOT_SUPPORTED)

    def change_password(self, user: models.User, current_password: str, new_password: str, access_token: Optional[str] = None) -> schemas.AuthResponse:
        if not verify_secret(current_password, user.password_hash):
            return _failure("Current password is incorrect")
        user_repo.update_user(self.db, user, password_hash=hash_secret(new_password))
        logger.info("Changed password for user %s", user.id)
        return schemas.AuthResponse(success=True, message="Password changed successfully")

    def refresh(self, refresh_token: str) -> schemas.AuthResponse:
        parsed = parse_token(refresh_token)
        if parsed is None:
            return _failure("Invalid refresh token")
        user = user_repo.get_user_by_refresh_token_id(self.db, parsed.token_id)
        if user is None or not verify_secret(parsed.secret, user.refresh_token_hash):
            return _failure("Invalid refresh token")
        expires_at = ensure_aware(user.refresh_token_expires_at)
        if expires_at is None or expires_at < now_utc():
            user_repo.clear_refresh_token(self.db, user)
            return _failure("Refresh token expired")
        if not user.is_active:
            return _failure("User account is not active")
        return self._issue_session(user, "Token refreshed")

    def sign_out(self, user: models.User, access_token: Optional[str] = None) -> None:
        user_repo.clear_refresh_token(self.db, user)
        logger.info("Signed out user %s", user.id)

    # Profile

    def get_profile(self, user_id: uuid.UUID) -> models.User:
        user = user_repo.get_user(self.db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: uuid.UUID, profile: schemas.UserProfileUpdate) -> models.User:
        user = self.get_profile(user_id)
        return user_repo.update_user(self.db, user, **profile.model_dump(exclude_unset=True, exclude_none=True))
