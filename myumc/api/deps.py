"""
API dependency helpers.

Provides the authenticated user context, the identity provider and the
organization scope for list endpoints.
"""
import uuid
from typing import Optional, Tuple, Dict, Any

from fastapi import Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from myumc.api.auth import extract_bearer_token, get_auth_service, get_or_create_dev_user
from myumc.db import models
from myumc.db.database import get_db
from myumc.services.auth_service import AuthService
from myumc.utils.role_permissions import role_allows_manage, role_allows_platform
from myumc.utils.runtime import dev_mode_active


# Contract:
# Returns (sqlalchemy User model, current_user_context_dict)
# Raises 401 if identity cannot be resolved.


def get_identity_service(db: Session = Depends(get_db)) -> AuthService:
    return get_auth_service(db)


def build_user_context(user: models.User, access_token: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "role": user.user_type,
        "organization_id": user.organization_id,
        "is_manager": role_allows_manage(user.user_type),
        "is_platform_admin": role_allows_platform(user.user_type),
        "access_token": access_token,
    }


def _resolve_user(db: Session, authorization: Optional[str]) -> Tuple[Optional[models.User], Optional[str]]:
    if dev_mode_active():
        return get_or_create_dev_user(db), None
    token = extract_bearer_token(authorization)
    if not token:
        return None, None
    user = get_auth_service(db).authenticate_token(token)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    return user, token


def get_current_user_context(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None),
) -> Tuple[models.User, Dict[str, Any]]:
    user, token = _resolve_user(db, authorization)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user, build_user_context(user, token)


def get_optional_user_context(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None),
) -> Tuple[Optional[models.User], Optional[Dict[str, Any]]]:
    """Like get_current_user_context but anonymous callers get (None, None)."""
    user, token = _resolve_user(db, authorization)
    if user is None:
        return None, None
    return user, build_user_context(user, token)


def get_organization_scope(
    organization_id: Optional[uuid.UUID] = Query(default=None),
    x_organization_id: Optional[str] = Header(default=None),
) -> Optional[uuid.UUID]:
    """Organization filter from the query string, falling back to the X-Organization-Id header."""
    if organization_id is not None:
        return organization_id
    if not x_organization_id:
        return None
    try:
        return uuid.UUID(x_organization_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid X-Organization-Id header")
