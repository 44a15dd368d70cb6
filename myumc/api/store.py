"""
Store API endpoints: catalogue, carts and orders.
"""
from typing import Optional, List
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from myumc.api.deps import get_current_user_context, get_organization_scope
from myumc.api.permissions import is_manager, require_manager
from myumc.audit import AuditAction, log
from myumc.db import schemas
from myumc.db.database import get_db
from myumc.services.store_service import StoreService

router = APIRouter(prefix="/api/store", tags=["store"])


# Catalogue

@router.post("/products", response_model=schemas.Product, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: schemas.ProductCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    user, _ctx = user_context
    product = StoreService(db).create_product(payload, user.organization_id)
    log(
        db,
        action=AuditAction.PRODUCT_CREATE,
        target_type="product",
        target_id=product.id,
        actor_user_id=user.id,
        organization_id=product.organization_id,
        metadata={"sku": product.sku},
    )
    return product


@router.get("/products/featured", response_model=List[schemas.Product])
def featured_products(
    organization_id: Optional[uuid.UUID] = Depends(get_organization_scope),
    db: Session = Depends(get_db),
):
    return StoreService(db).get_featured_products(organization_id=organization_id)


@router.get("/products/search", response_model=List[schemas.Product])
def search_products(
    q: str = Query(default=""),
    category: Optional[str] = None,
    organization_id: Optional[uuid.UUID] = Depends(get_organization_scope),
    db: Session = Depends(get_db),
):
    return StoreService(db).search_products(q, category=category, organization_id=organization_id)


@router.get("/products/{product_id}", response_model=schemas.Product)
def get_product(product_id: uuid.UUID, db: Session = Depends(get_db)):
    return StoreService(db).get_product(product_id)


@router.post("/products/{product_id}/variants", response_model=schemas.ProductVariant, status_code=status.HTTP_201_CREATED)
def add_product_variant(
    product_id: uuid.UUID,
    payload: schemas.ProductVariantCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    return StoreService(db).add_product_variant(product_id, payload)


# Carts

@router.post("/carts", response_model=schemas.Cart, status_code=status.HTTP_201_CREATED)
def create_cart(
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ctx = user_context
    return StoreService(db).create_cart(user.id)


@router.get("/carts/{cart_id}", response_model=schemas.Cart)
def get_cart(
    cart_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ctx = user_context
    return StoreService(db).get_cart(cart_id, user.id)


@router.post("/carts/{cart_id}/items", response_model=schemas.CartItem, status_code=status.HTTP_201_CREATED)
def add_to_cart(
    cart_id: uuid.UUID,
    payload: schemas.CartItemAdd,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ctx = user_context
    return StoreService(db).add_to_cart(cart_id, payload, user.id)


@router.delete("/carts/{cart_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_cart_item(
    cart_id: uuid.UUID,
    item_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ctx = user_context
    StoreService(db).remove_cart_item(cart_id, item_id, user.id)


# Orders

@router.post("/orders", response_model=schemas.Order, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: schemas.OrderCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ctx = user_context
    order = StoreService(db).create_order(payload, user.id)
    log(
        db,
        action=AuditAction.ORDER_CREATE,
        target_type="order",
        target_id=order.id,
        actor_user_id=user.id,
        organization_id=user.organization_id,
        metadata={"order_number": order.order_number, "total": str(order.total)},
    )
    return order


@router.get("/orders", response_model=List[schemas.Order])
def list_my_orders(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ctx = user_context
    return StoreService(db).list_orders(user.id, skip=skip, limit=limit)


@router.get("/orders/{order_id}", response_model=schemas.Order)
def get_order(
    order_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    order = StoreService(db).get_order(order_id)
    if order.user_id != user.id and not is_manager(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return order


@router.put("/orders/{order_id}/status", response_model=schemas.Order)
def update_order_status(
    order_id: uuid.UUID,
    payload: schemas.OrderStatusUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    user, _ctx = user_context
    service = StoreService(db)
    previous = service.get_order(order_id).status
    order = service.update_order_status(order_id, payload.status)
    log(
        db,
        action=AuditAction.ORDER_STATUS_CHANGE,
        target_type="order",
        target_id=order.id,
        actor_user_id=user.id,
        organization_id=user.organization_id,
        metadata={"from": previous, "to": order.status},
    )
    return order
