"""
Audit log API endpoints.

Platform administrators (Administrator, Developer) may query the audit trail,
optionally narrowed to one church, actor, action or target record.
"""
from typing import Optional, List
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from myumc.api.permissions import require_platform_admin
from myumc.db import schemas
from myumc.db.database import get_db
from myumc.db.repositories import audits as audit_repo

router = APIRouter(prefix="/api/audits", tags=["audits"])


@router.get("", response_model=List[schemas.AuditLog], include_in_schema=False)
@router.get("/", response_model=List[schemas.AuditLog])
def list_audit_logs(
    organization_id: Optional[uuid.UUID] = None,
    user_id: Optional[uuid.UUID] = None,
    action_type: Optional[str] = None,
    target_type: Optional[str] = None,
    target_id: Optional[uuid.UUID] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    user_context=Depends(require_platform_admin),
):
    return audit_repo.get_audit_logs(
        db,
        organization_id=organization_id,
        user_id=user_id,
        action_type=action_type,
        target_type=target_type,
        target_id=target_id,
        skip=skip,
        limit=limit,
    )
