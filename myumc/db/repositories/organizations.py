"""
Organization repository functions.

Implements CRUD for organizations (churches).
"""
from __future__ import annotations

import uuid
from sqlalchemy.orm import Session

from myumc.db import schemas, models
from myumc.db.repositories import common


def create_organization(db: Session, organization: schemas.OrganizationCreate, user_id: uuid.UUID):
    db_organization = models.Organization(
        name=organization.name,
        slug=organization.slug,
        created_by=user_id,
    )
    db.add(db_organization)
    db.commit()
    db.refresh(db_organization)
    return db_organization


def get_organization(db: Session, organization_id: uuid.UUID):
    return db.query(models.Organization).filter(models.Organization.id == organization_id).first()


def get_organization_by_name(db: Session, name: str):
    return db.query(models.Organization).filter(models.Organization.name == name).first()


def get_organization_by_slug(db: Session, slug: str):
    return db.query(models.Organization).filter(models.Organization.slug == slug).first()


def get_organizations(db: Session, skip: int = 0, limit: int = 100, include_inactive: bool = False):
    query = db.query(models.Organization)
    if not include_inactive:
        query = query.filter(models.Organization.is_active.is_(True))
    return query.order_by(models.Organization.name).offset(skip).limit(limit).all()


def update_organization(db: Session, organization_id: uuid.UUID, organization: schemas.OrganizationUpdate):
    db_organization = get_organization(db, organization_id)
    if db_organization:
        common.apply_changes(db_organization, organization.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(db_organization)
    return db_organization
