"""Helpers shared by the domain repositories."""
from sqlalchemy.orm import Session


def save(db: Session, instance):
    """Persist a new or modified row and return it refreshed."""
    db.add(instance)
    db.commit()
    db.refresh(instance)
    return instance


def apply_changes(instance, changes: dict):
    """Copy changed fields onto a row; a null for a NOT NULL column leaves the field unchanged."""
    columns = instance.__table__.columns
    for key, value in changes.items():
        if value is None and key in columns and not columns[key].nullable:
            continue
        setattr(instance, key, value)
    return instance
