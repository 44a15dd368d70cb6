"""
Organizations API endpoints.

Churches are tenants; creating and renaming them is restricted to
Administrators and Developers and every change is audited.
"""
from typing import List
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from myumc.api.deps import get_current_user_context
from myumc.api.permissions import require_platform_admin
from myumc.audit import AuditAction, AuditStatus, log
from myumc.db import schemas
from myumc.db.database import get_db
from myumc.db.repositories import organizations as org_repo

router = APIRouter(prefix="/api/organizations", tags=["organizations"])


@router.post("", response_model=schemas.Organization, status_code=status.HTTP_201_CREATED, include_in_schema=False)
@router.post("/", response_model=schemas.Organization, status_code=status.HTTP_201_CREATED)
def create_organization(
    payload: schemas.OrganizationCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_platform_admin),
):
    user, _ctx = user_context
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=422, detail="Organization name is required")
    if org_repo.get_organization_by_name(db, name):
        raise HTTPException(status_code=409, detail="Organization name already exists")
    if payload.slug and org_repo.get_organization_by_slug(db, payload.slug):
        raise HTTPException(status_code=409, detail="Organization slug already exists")

    org = org_repo.create_organization(db, schemas.OrganizationCreate(name=name, slug=payload.slug), user.id)
    log(
        db,
        action=AuditAction.ORGANIZATION_CREATE,
        status=AuditStatus.SUCCESS,
        target_type="organization",
        target_id=org.id,
        actor_user_id=user.id,
        organization_id=org.id,
        metadata={"name": org.name},
    )
    return org


@router.get("", response_model=List[schemas.Organization], include_in_schema=False)
@router.get("/", response_model=List[schemas.Organization])
def list_organizations(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return org_repo.get_organizations(db, skip=skip, limit=limit)


@router.get("/{organization_id}", response_model=schemas.Organization)
def get_organization(
    organization_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    org = org_repo.get_organization(db, organization_id)
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return org


@router.put("/{organization_id}", response_model=schemas.Organization)
def update_organization(
    organization_id: uuid.UUID,
    payload: schemas.OrganizationUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_platform_admin),
):
    user, _ctx = user_context
    org = org_repo.get_organization(db, organization_id)
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    if payload.name and payload.name != org.name:
        existing = org_repo.get_organization_by_name(db, payload.name)
        if existing and existing.id != org.id:
            raise HTTPException(status_code=409, detail="Organization name already exists")
    if payload.slug and payload.slug != org.slug:
        existing = org_repo.get_organization_by_slug(db, payload.slug)
        if existing and existing.id != org.id:
            raise HTTPException(status_code=409, detail="Organization slug already exists")

    org = org_repo.update_organization(db, organization_id, payload)
    log(
        db,
        action=AuditAction.ORGANIZATION_UPDATE,
        status=AuditStatus.SUCCESS,
        target_type="organization",
        target_id=org.id,
        actor_user_id=user.id,
        organization_id=org.id,
        metadata=payload.model_dump(exclude_unset=True),
    )
    return org
