"""
Permission checks for resource access control.

Key helpers:
- require_manager / require_platform_admin (FastAPI dependencies)
- can_access_member(member, current_user)
- can_view_content(content, current_user)
- can_view_event(event, current_user)
"""
from typing import Optional, Dict, Any

from fastapi import Depends, HTTPException, status

from myumc.api.deps import get_current_user_context


def is_manager(current_user: Optional[Dict[str, Any]]) -> bool:
    return bool(current_user and current_user.get("is_manager"))


def is_platform_admin(current_user: Optional[Dict[str, Any]]) -> bool:
    return bool(current_user and current_user.get("is_platform_admin"))


def require_manager(user_context=Depends(get_current_user_context)):
    """Allow Administrators and Church Leaders."""
    _user, current_user = user_context
    if not is_manager(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return user_context


def require_platform_admin(user_context=Depends(get_current_user_context)):
    """Allow Administrators and Developers."""
    _user, current_user = user_context
    if not is_platform_admin(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return user_context


def can_access_member(member, current_user: Optional[Dict[str, Any]]) -> bool:
    if member is None or not current_user:
        return False
    return is_manager(current_user) or member.user_id == current_user.get("id")


def can_view_content(content, current_user: Optional[Dict[str, Any]]) -> bool:
    if content is None:
        return False
    return bool(content.is_published) or is_manager(current_user)


def can_view_event(event, current_user: Optional[Dict[str, Any]]) -> bool:
    if event is None:
        return False
    return event.status == "Published" or is_manager(current_user)
