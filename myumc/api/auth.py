"""
Authentication helpers.

Chooses the identity provider, extracts bearer tokens and manages the
development user used when DEV_MODE is active.
"""
import logging
import os
from typing import Optional

from sqlalchemy.orm import Session

from myumc.db import models
from myumc.db.repositories import users as user_repo
from myumc.services.auth_service import AuthService
from myumc.services.cognito_auth_service import CognitoAuthService
from myumc.utils.role_permissions import ROLE_ADMINISTRATOR

logger = logging.getLogger("myumc.auth")

DEV_USER_EMAIL = "dev@localhost"


def auth_provider_name() -> str:
    return os.getenv("AUTH_PROVIDER", "local").strip().lower()


def get_auth_service(db: Session) -> AuthService:
    """Return the configured identity provider bound to `db`."""
    provider = auth_provider_name()
    if provider == "cognito":
        return CognitoAuthService(db)
    if provider != "local":
        raise ValueError(f"Unknown AUTH_PROVIDER '{provider}'")
    return AuthService(db)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_or_create_dev_user(db: Session) -> models.User:
    user = user_repo.get_user_by_email(db, DEV_USER_EMAIL)
    if user is None:
        user = user_repo.create_user(
            db,
            email=DEV_USER_EMAIL,
            first_name="Development",
            last_name="User",
            user_type=ROLE_ADMINISTRATOR,
            auth_provider="local",
            is_active=True,
        )
        logger.info("Created development user %s", user.id)
    return user
