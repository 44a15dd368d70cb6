"""
Members API endpoints.

Members may read and edit their own record; Administrators and Church
Leaders manage everyone's.
"""
from typing import Optional, List
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from myumc.api.deps import get_current_user_context, get_organization_scope
from myumc.api.permissions import can_access_member, can_view_event, is_manager, require_manager
from myumc.audit import AuditAction, log
from myumc.db import schemas
from myumc.db.database import get_db
from myumc.services.event_service import EventService
from myumc.services.member_service import MemberService

router = APIRouter(prefix="/api/members", tags=["members"])


def _accessible_member(service: MemberService, member_id: uuid.UUID, current_user):
    member = service.get_member(member_id)
    if not can_access_member(member, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return member


@router.get("", response_model=List[schemas.Member], include_in_schema=False)
@router.get("/", response_model=List[schemas.Member])
def list_members(
    skip: int = 0,
    limit: int = 100,
    organization_id: Optional[uuid.UUID] = Depends(get_organization_scope),
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    return MemberService(db).list_members(organization_id=organization_id, skip=skip, limit=limit)


@router.get("/by-user/{user_id}", response_model=schemas.MemberDetail)
def get_member_by_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, current_user = user_context
    member = MemberService(db).get_member_by_user(user_id)
    if not can_access_member(member, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return member


@router.get("/{member_id}", response_model=schemas.MemberDetail)
def get_member(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, current_user = user_context
    return _accessible_member(MemberService(db), member_id, current_user)


@router.post("", response_model=schemas.Member, status_code=status.HTTP_201_CREATED, include_in_schema=False)
@router.post("/", response_model=schemas.Member, status_code=status.HTTP_201_CREATED)
def create_member(
    payload: schemas.MemberCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    target_user_id = payload.user_id or user.id
    if target_user_id != user.id and not is_manager(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only managers can enrol other users")
    member = MemberService(db).create_member(payload, target_user_id)
    log(
        db,
        action=AuditAction.MEMBER_CREATE,
        target_type="member",
        target_id=member.id,
        actor_user_id=user.id,
        organization_id=member.organization_id,
    )
    return member


@router.put("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_member(
    member_id: uuid.UUID,
    payload: schemas.MemberUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    service = MemberService(db)
    member = _accessible_member(service, member_id, current_user)
    if "status" in payload.model_fields_set and not is_manager(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only managers can change membership status")
    service.update_member(member_id, payload)
    log(
        db,
        action=AuditAction.MEMBER_UPDATE,
        target_type="member",
        target_id=member_id,
        actor_user_id=user.id,
        organization_id=member.organization_id,
        metadata={"fields": sorted(payload.model_fields_set)},
    )


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_member(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    user, _ctx = user_context
    service = MemberService(db)
    organization_id = service.get_member(member_id).organization_id
    service.delete_member(member_id)
    log(
        db,
        action=AuditAction.MEMBER_DELETE,
        target_type="member",
        target_id=member_id,
        actor_user_id=user.id,
        organization_id=organization_id,
    )


@router.get("/{member_id}/giving-records", response_model=List[schemas.GivingRecord])
def list_giving_records(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, current_user = user_context
    service = MemberService(db)
    _accessible_member(service, member_id, current_user)
    return service.list_giving_records(member_id)


@router.post("/{member_id}/giving-records", response_model=schemas.GivingRecord, status_code=status.HTTP_201_CREATED)
def add_giving_record(
    member_id: uuid.UUID,
    payload: schemas.GivingRecordCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    service = MemberService(db)
    member = _accessible_member(service, member_id, current_user)
    record = service.add_giving_record(member_id, payload)
    log(
        db,
        action=AuditAction.GIVING_RECORD_ADD,
        target_type="giving_record",
        target_id=record.id,
        actor_user_id=user.id,
        organization_id=member.organization_id,
        metadata={"amount": str(record.amount), "payment_method": record.payment_method},
    )
    return record


@router.post("/{member_id}/membership-history", response_model=schemas.MembershipHistory, status_code=status.HTTP_201_CREATED)
def add_membership_history(
    member_id: uuid.UUID,
    payload: schemas.MembershipHistoryCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, current_user = user_context
    service = MemberService(db)
    _accessible_member(service, member_id, current_user)
    return service.add_membership_history(member_id, payload)


@router.post("/{member_id}/events/{event_id}/register", status_code=status.HTTP_204_NO_CONTENT)
def register_member_for_event(
    member_id: uuid.UUID,
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, current_user = user_context
    service = MemberService(db)
    _accessible_member(service, member_id, current_user)
    if not can_view_event(EventService(db).get_event(event_id), current_user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    service.register_for_event(member_id, event_id)
