"""
Event repository functions.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from myumc.db import models


def get_event(db: Session, event_id: uuid.UUID):
    return db.query(models.ChurchEvent).filter(models.ChurchEvent.id == event_id).first()


def get_events(
    db: Session,
    *,
    starting_after: Optional[datetime] = None,
    organization_id: Optional[uuid.UUID] = None,
    include_unpublished: bool = False,
    skip: int = 0,
    limit: int = 100,
):
    query = db.query(models.ChurchEvent)
    if not include_unpublished:
        query = query.filter(models.ChurchEvent.status == "Published")
    if starting_after is not None:
        query = query.filter(models.ChurchEvent.end_date >= starting_after)
    if organization_id:
        query = query.filter(models.ChurchEvent.organization_id == organization_id)
    return query.order_by(models.ChurchEvent.start_date).offset(skip).limit(limit).all()


def get_registration(db: Session, event_id: uuid.UUID, user_id: uuid.UUID):
    return (
        db.query(models.EventRegistration)
        .filter(models.EventRegistration.event_id == event_id, models.EventRegistration.user_id == user_id)
        .first()
    )


def get_registrations(db: Session, event_id: uuid.UUID):
    return (
        db.query(models.EventRegistration)
        .filter(models.EventRegistration.event_id == event_id)
        .order_by(models.EventRegistration.registered_at)
        .all()
    )


def count_confirmed(db: Session, event_id: uuid.UUID) -> int:
    return (
        db.query(func.count(models.EventRegistration.id))
        .filter(
            models.EventRegistration.event_id == event_id,
            models.EventRegistration.status.in_(("Confirmed", "Pending")),
        )
        .scalar()
        or 0
    )


def first_wait_listed(db: Session, event_id: uuid.UUID):
    return (
        db.query(models.EventRegistration)
        .filter(models.EventRegistration.event_id == event_id, models.EventRegistration.status == "WaitListed")
        .order_by(models.EventRegistration.registered_at)
        .first()
    )


def get_unsent_reminders(db: Session):
    return (
        db.query(models.EventReminder)
        .join(models.ChurchEvent)
        .filter(models.EventReminder.sent.is_(False), models.ChurchEvent.status == "Published")
        .all()
    )


def get_reminder(db: Session, reminder_id: uuid.UUID):
    return db.query(models.EventReminder).filter(models.EventReminder.id == reminder_id).first()
