"""
Member repository functions.

CRUD for member records, giving records and membership history.
"""
from __future__ import annotations

import uuid
from typing import Optional
from sqlalchemy.orm import Session

from myumc.db import models


def get_member(db: Session, member_id: uuid.UUID):
    return db.query(models.Member).filter(models.Member.id == member_id).first()


def get_member_by_user(db: Session, user_id: uuid.UUID):
    return db.query(models.Member).filter(models.Member.user_id == user_id).first()


def get_members(db: Session, organization_id: Optional[uuid.UUID] = None, skip: int = 0, limit: int = 100):
    query = db.query(models.Member)
    if organization_id:
        query = query.filter(models.Member.organization_id == organization_id)
    return query.order_by(models.Member.member_since.desc()).offset(skip).limit(limit).all()


def delete_member(db: Session, member: models.Member):
    db.delete(member)
    db.commit()


def get_giving_records(db: Session, member_id: uuid.UUID):
    return (
        db.query(models.GivingRecord)
        .filter(models.GivingRecord.member_id == member_id)
        .order_by(models.GivingRecord.date.desc())
        .all()
    )
