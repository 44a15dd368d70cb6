"""
Audit logging helpers and enums.

Central helper to persist normalized audit records for church data
mutations (organizations, members, content, events, store).
"""
from __future__ import annotations
import uuid
from enum import Enum
from typing import Any, Optional, Dict
from sqlalchemy.orm import Session

from myumc.db import schemas
from myumc.db.repositories import audits as audit_repo


class AuditAction(str, Enum):
    # Organization
    ORGANIZATION_CREATE = "organization_create"
    ORGANIZATION_UPDATE = "organization_update"
    # Members
    MEMBER_CREATE = "member_create"
    MEMBER_UPDATE = "member_update"
    MEMBER_DELETE = "member_delete"
    GIVING_RECORD_ADD = "giving_record_add"
    # Content
    CONTENT_CREATE = "content_create"
    CONTENT_PUBLISH = "content_publish"
    CONTENT_DELETE = "content_delete"
    # Events
    EVENT_CREATE = "event_create"
    EVENT_UPDATE = "event_update"
    EVENT_DELETE = "event_delete"
    # Store
    PRODUCT_CREATE = "product_create"
    ORDER_CREATE = "order_create"
    ORDER_STATUS_CHANGE = "order_status_change"
    # Identity
    PROFILE_PICTURE_UPDATE = "profile_picture_update"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


def log(
    db: Session,
    *,
    action: AuditAction | str,
    status: AuditStatus | str = AuditStatus.SUCCESS,
    target_type: str,
    target_id: Optional[uuid.UUID] = None,
    actor_user_id: Optional[uuid.UUID],
    organization_id: Optional[uuid.UUID] = None,
    metadata: Optional[Dict[str, Any]] = None,
):
    """Persist one audit record and return the ORM row."""
    # Persist plain string values, not Enum reprs
    action_value = action.value if isinstance(action, AuditAction) else str(action)
    status_value = status.value if isinstance(status, AuditStatus) else str(status)
    audit_log = schemas.AuditLogCreate(
        action_type=action_value,
        status=status_value,
        target_type=target_type,
        target_id=target_id,
        metadata=metadata or {},
    )
    return audit_repo.create_audit_log(
        db,
        audit_log=audit_log,
        actor_user_id=actor_user_id,
        organization_id=organization_id,
    )


__all__ = ["AuditAction", "AuditStatus", "log"]
