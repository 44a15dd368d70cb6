"""
Audit trail persistence and lookups.
"""
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from myumc.db import models, schemas
from myumc.db.repositories.common import save


def create_audit_log(db: Session, audit_log: schemas.AuditLogCreate, actor_user_id: Optional[uuid.UUID], organization_id: Optional[uuid.UUID] = None):
    fields = audit_log.model_dump(exclude={"metadata"})
    return save(db, models.AuditLog(
        **fields,
        actor_user_id=actor_user_id,
        organization_id=organization_id,
        metadata_json=audit_log.metadata or {},
    ))


def get_audit_logs(
    db: Session,
    organization_id: Optional[uuid.UUID] = None,
    user_id: Optional[uuid.UUID] = None,
    action_type: Optional[str] = None,
    target_type: Optional[str] = None,
    target_id: Optional[uuid.UUID] = None,
    skip: int = 0,
    limit: int = 100,
):
    """Newest-first audit entries; every filter is optional."""
    filters = []
    if organization_id:
        filters.append(models.AuditLog.organization_id == organization_id)
    if user_id:
        filters.append(models.AuditLog.actor_user_id == user_id)
    if action_type:
        filters.append(models.AuditLog.action_type == action_type)
    if target_type:
        filters.append(models.AuditLog.target_type == target_type)
    if target_id:
        filters.append(models.AuditLog.target_id == target_id)
    return (
        db.query(models.AuditLog)
        .filter(*filters)
        .order_by(models.AuditLog.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
