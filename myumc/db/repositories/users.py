"""
User repository functions.

Lookups by id, email and external identity plus refresh-token bookkeeping.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from myumc.db import models


def normalize_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return email.strip().lower()


def get_user(db: Session, user_id: uuid.UUID):
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == normalize_email(email)).first()


def get_user_by_external_subject(db: Session, subject: str):
    return db.query(models.User).filter(models.User.external_subject == subject).first()


def get_user_by_refresh_token_id(db: Session, token_id: str):
    return db.query(models.User).filter(models.User.refresh_token_id == token_id).first()


def create_user(db: Session, **fields):
    fields["email"] = normalize_email(fields.get("email"))
    db_user = models.User(**fields)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_user(db: Session, user: models.User, **fields):
    for key, value in fields.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user


def store_refresh_token(db: Session, user: models.User, *, token_id: Optional[str], token_hash: Optional[str], expires_at: Optional[datetime]):
    user.refresh_token_id = token_id
    user.refresh_token_hash = token_hash
    user.refresh_token_expires_at = expires_at
    db.commit()
    return user


def clear_refresh_token(db: Session, user: models.User):
    return store_refresh_token(db, user, token_id=None, token_hash=None, expires_at=None)
