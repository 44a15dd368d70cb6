"""
Store repository functions.

Products, variants, carts and orders.
"""
from __future__ import annotations

import uuid
from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from myumc.db import models


def get_product(db: Session, product_id: uuid.UUID):
    return db.query(models.Product).filter(models.Product.id == product_id).first()


def get_variant(db: Session, variant_id: uuid.UUID):
    return db.query(models.ProductVariant).filter(models.ProductVariant.id == variant_id).first()


def sku_in_use(db: Session, sku: str) -> bool:
    if db.query(models.Product.id).filter(models.Product.sku == sku).first():
        return True
    return db.query(models.ProductVariant.id).filter(models.ProductVariant.sku == sku).first() is not None


def get_featured_products(db: Session, organization_id: Optional[uuid.UUID] = None):
    query = db.query(models.Product).filter(
        models.Product.is_available.is_(True),
        models.Product.is_featured.is_(True),
    )
    if organization_id:
        query = query.filter(models.Product.organization_id == organization_id)
    return query.order_by(models.Product.created_at.desc()).all()


def search_products(
    db: Session,
    term: str,
    category: Optional[str] = None,
    organization_id: Optional[uuid.UUID] = None,
):
    pattern = f"%{term.lower()}%"
    query = db.query(models.Product).filter(
        models.Product.is_available.is_(True),
        or_(
            func.lower(models.Product.name).like(pattern),
            func.lower(func.coalesce(models.Product.description, "")).like(pattern),
        ),
    )
    if category:
        query = query.filter(models.Product.category == category)
    if organization_id:
        query = query.filter(models.Product.organization_id == organization_id)
    return query.order_by(models.Product.created_at.desc()).all()


def get_cart(db: Session, cart_id: uuid.UUID):
    return db.query(models.Cart).filter(models.Cart.id == cart_id).first()


def get_cart_item(db: Session, cart_id: uuid.UUID, item_id: uuid.UUID):
    return (
        db.query(models.CartItem)
        .filter(models.CartItem.cart_id == cart_id, models.CartItem.id == item_id)
        .first()
    )


def get_order(db: Session, order_id: uuid.UUID):
    return db.query(models.Order).filter(models.Order.id == order_id).first()


def get_orders_for_user(db: Session, user_id: uuid.UUID, skip: int = 0, limit: int = 100):
    return (
        db.query(models.Order)
        .filter(models.Order.user_id == user_id)
        .order_by(models.Order.order_date.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
