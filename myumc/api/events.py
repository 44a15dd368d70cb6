"""
Events API endpoints.

Published events are public; drafts are only visible to managers, who also
own scheduling, reminders and the registration roster.
"""
from datetime import datetime
from typing import Optional, List
import uuid

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from myumc.api.deps import get_current_user_context, get_optional_user_context, get_organization_scope
from myumc.api.permissions import can_view_event, is_manager, require_manager
from myumc.audit import AuditAction, log
from myumc.db import schemas
from myumc.db.database import get_db
from myumc.services.event_service import EventService

router = APIRouter(prefix="/api/events", tags=["events"])


def _visible_event(service: EventService, event_id: uuid.UUID, current_user):
    event = service.get_event(event_id)
    if not can_view_event(event, current_user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


@router.get("", response_model=List[schemas.Event], include_in_schema=False)
@router.get("/", response_model=List[schemas.Event])
def list_events(
    starting_after: Optional[datetime] = None,
    include_unpublished: bool = False,
    skip: int = 0,
    limit: int = 100,
    organization_id: Optional[uuid.UUID] = Depends(get_organization_scope),
    db: Session = Depends(get_db),
    user_context=Depends(get_optional_user_context),
):
    _user, current_user = user_context
    return EventService(db).list_events(
        starting_after=starting_after,
        organization_id=organization_id,
        include_unpublished=include_unpublished and is_manager(current_user),
        skip=skip,
        limit=limit,
    )


# Declared before /{event_id} so "reminders" is not parsed as an id
@router.get("/reminders/due", response_model=List[schemas.EventReminder])
def due_reminders(
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    return EventService(db).due_reminders()


@router.post("/reminders/{reminder_id}/sent", response_model=schemas.EventReminder)
def mark_reminder_sent(
    reminder_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    return EventService(db).mark_reminder_sent(reminder_id)


@router.get("/{event_id}", response_model=schemas.Event)
def get_event(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_optional_user_context),
):
    _user, current_user = user_context
    return _visible_event(EventService(db), event_id, current_user)


@router.post("", response_model=schemas.Event, status_code=status.HTTP_201_CREATED, include_in_schema=False)
@router.post("/", response_model=schemas.Event, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: schemas.EventCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    user, _ctx = user_context
    event = EventService(db).create_event(payload, user.id, user.organization_id)
    log(
        db,
        action=AuditAction.EVENT_CREATE,
        target_type="event",
        target_id=event.id,
        actor_user_id=user.id,
        organization_id=event.organization_id,
        metadata={"title": event.title, "status": event.status},
    )
    return event


@router.put("/{event_id}", response_model=schemas.Event)
def update_event(
    event_id: uuid.UUID,
    payload: schemas.EventUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    user, _ctx = user_context
    event = EventService(db).update_event(event_id, payload)
    log(
        db,
        action=AuditAction.EVENT_UPDATE,
        target_type="event",
        target_id=event.id,
        actor_user_id=user.id,
        organization_id=event.organization_id,
        metadata={"fields": sorted(payload.model_fields_set)},
    )
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    user, _ctx = user_context
    service = EventService(db)
    organization_id = service.get_event(event_id).organization_id
    service.delete_event(event_id)
    log(
        db,
        action=AuditAction.EVENT_DELETE,
        target_type="event",
        target_id=event_id,
        actor_user_id=user.id,
        organization_id=organization_id,
    )


@router.get("/{event_id}/occurrences", response_model=List[datetime])
def list_occurrences(
    event_id: uuid.UUID,
    limit: int = Query(default=10, ge=1, le=366),
    db: Session = Depends(get_db),
    user_context=Depends(get_optional_user_context),
):
    _user, current_user = user_context
    event = _visible_event(EventService(db), event_id, current_user)
    return EventService.occurrences(event, limit=limit)


# Registration

@router.post("/{event_id}/register", response_model=schemas.EventRegistration, status_code=status.HTTP_201_CREATED)
def register_for_event(
    event_id: uuid.UUID,
    payload: Optional[schemas.EventRegistrationCreate] = Body(default=None),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    service = EventService(db)
    _visible_event(service, event_id, current_user)
    return service.register(event_id, user.id, notes=payload.notes if payload else None)


@router.delete("/{event_id}/register", status_code=status.HTTP_204_NO_CONTENT)
def cancel_registration(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ctx = user_context
    EventService(db).cancel_registration(event_id, user.id)


@router.get("/{event_id}/registrations", response_model=List[schemas.EventRegistration])
def list_registrations(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    return EventService(db).list_registrations(event_id)


# Reminders

@router.post("/{event_id}/reminders", response_model=schemas.EventReminder, status_code=status.HTTP_201_CREATED)
def add_reminder(
    event_id: uuid.UUID,
    payload: schemas.EventReminderCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    return EventService(db).add_reminder(event_id, payload)
