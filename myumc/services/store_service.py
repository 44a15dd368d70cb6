"""
Store service: catalogue, carts and checkout.

Checkout pricing:
- line total = unit price (variant price when a variant is chosen) x quantity
- tax = subtotal x STORE_TAX_RATE, rounded half-up to cents
- shipping is free above STORE_FREE_SHIPPING_THRESHOLD, otherwise STORE_SHIPPING_FLAT
- total = subtotal + tax + shipping
"""
import logging
import os
import uuid
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List, Dict, Tuple

from sqlalchemy.orm import Session

from myumc.db import models, schemas
from myumc.db.models import now_utc
from myumc.db.repositories import common
from myumc.db.repositories import store as store_repo
from myumc.services.errors import (
    NotFoundError,
    InvalidOperationError,
    PermissionDeniedError,
    ConflictError,
)
from myumc.utils.runtime import sanitize_for_log

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class StoreSettings:
    """Pricing configuration from environment variables."""

    def __init__(self):
        self.tax_rate = Decimal(os.getenv("STORE_TAX_RATE", "0.15"))
        self.shipping_flat = Decimal(os.getenv("STORE_SHIPPING_FLAT", "50"))
        self.free_shipping_threshold = Decimal(os.getenv("STORE_FREE_SHIPPING_THRESHOLD", "1000"))


def money(value) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def generate_order_number(now=None) -> str:
    """ORD-YYYYMMDD-XXXXXXXX with eight upper-case hex characters."""
    now = now or now_utc()
    return f"ORD-{now:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


def calculate_totals(subtotal: Decimal, settings: Optional[StoreSettings] = None) -> Tuple[Decimal, Decimal, Decimal]:
    """Return (tax, shipping, total) for a subtotal."""
    settings = settings or StoreSettings()
    subtotal = money(subtotal)
    tax = money(subtotal * settings.tax_rate)
    shipping = Decimal("0.00") if subtotal > settings.free_shipping_threshold else money(settings.shipping_flat)
    return tax, shipping, money(subtotal + tax + shipping)


class StoreService:
    """Service class for the church e-store."""

    def __init__(self, db: Session, settings: Optional[StoreSettings] = None):
        self.db = db
        self.settings = settings or StoreSettings()

    # Catalogue

    def create_product(self, data: schemas.ProductCreate, organization_id: Optional[uuid.UUID] = None) -> models.Product:
        if store_repo.sku_in_use(self.db, data.sku):
            raise ConflictError(f"SKU {data.sku} already exists")
        product = models.Product(**data.model_dump(), organization_id=organization_id)
        product = common.save(self.db, product)
        logger.info("Created product %s (%s)", product.id, sanitize_for_log(product.sku))
        return product

    def get_product(self, product_id: uuid.UUID) -> models.Product:
        product = store_repo.get_product(self.db, product_id)
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found")
        return product

    def add_product_variant(self, product_id: uuid.UUID, data: schemas.ProductVariantCreate) -> models.ProductVariant:
        self.get_product(product_id)
        if store_repo.sku_in_use(self.db, data.sku):
            raise ConflictError(f"SKU {data.sku} already exists")
        variant = models.ProductVariant(product_id=product_id, **data.model_dump())
        variant = common.save(self.db, variant)
        logger.info("Added variant %s to product %s", variant.id, product_id)
        return variant

    def get_featured_products(self, organization_id: Optional[uuid.UUID] = None) -> List[models.Product]:
        return store_repo.get_featured_products(self.db, organization_id=organization_id)

    def search_products(self, term: str, category: Optional[str] = None, organization_id: Optional[uuid.UUID] = None) -> List[models.Product]:
        return store_repo.search_products(self.db, term or "", category=category, organization_id=organization_id)

    # Carts

    def create_cart(self, user_id: uuid.UUID) -> models.Cart:
        now = now_utc()
        cart = common.save(self.db, models.Cart(user_id=user_id, created_at=now, updated_at=now))
        logger.info("Created cart %s for user %s", cart.id, user_id)
        return cart

    def get_cart(self, cart_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> models.Cart:
        cart = store_repo.get_cart(self.db, cart_id)
        if cart is None:
            raise NotFoundError(f"Cart with ID {cart_id} not found")
        if user_id is not None and cart.user_id != user_id:
            raise PermissionDeniedError("Cart belongs to another user")
        return cart

    def _resolve_line(self, product_id: uuid.UUID, variant_id: Optional[uuid.UUID]):
        product = self.get_product(product_id)
        variant = None
        if variant_id is not None:
            variant = store_repo.get_variant(self.db, variant_id)
            if variant is None or variant.product_id != product.id:
                raise NotFoundError(f"Variant with ID {variant_id} not found")
        return product, variant

    def add_to_cart(self, cart_id: uuid.UUID, data: schemas.CartItemAdd, user_id: Optional[uuid.UUID] = None) -> models.CartItem:
        """Add a line to the cart, merging with an existing line for the same product and variant."""
        cart = self.get_cart(cart_id, user_id)
        product, variant = self._resolve_line(data.product_id, data.variant_id)
        if not product.is_available:
            raise InvalidOperationError(f"Product {product.name} is not available")

        existing = next(
            (i for i in cart.items if i.product_id == product.id and i.variant_id == data.variant_id),
            None,
        )
        requested = data.quantity + (existing.quantity if existing else 0)
        available = variant.stock_quantity if variant is not None else product.stock_quantity
        if available < requested:
            raise InvalidOperationError("Insufficient stock")

        if existing is not None:
            existing.quantity = requested
            item = existing
        else:
            item = models.CartItem(
                cart_id=cart.id, product_id=product.id, variant_id=data.variant_id, quantity=data.quantity
            )
            cart.items.append(item)
        cart.updated_at = now_utc()
        self.db.commit()
        self.db.refresh(item)
        return item

    def remove_cart_item(self, cart_id: uuid.UUID, item_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> None:
        cart = self.get_cart(cart_id, user_id)
        item = store_repo.get_cart_item(self.db, cart.id, item_id)
        if item is None:
            raise NotFoundError(f"Cart item with ID {item_id} not found")
        cart.items.remove(item)
        cart.updated_at = now_utc()
        self.db.commit()

    # Orders

    def create_order(self, data: schemas.OrderCreate, user_id: Optional[uuid.UUID] = None) -> models.Order:
        """Convert a cart into an order.

        Stock is verified for every line before anything changes, then
        decremented, the order written and the cart removed in one commit.
        """
        cart = self.get_cart(data.cart_id, user_id)
        if not cart.items:
            raise InvalidOperationError("Cart is empty")

        needed: Dict[Tuple[str, uuid.UUID], int] = {}
        for item in cart.items:
            if not item.product.is_available:
                raise InvalidOperationError(f"Product {item.product.name} is not available")
            key = ("variant", item.variant_id) if item.variant_id else ("product", item.product_id)
            needed[key] = needed.get(key, 0) + item.quantity
        for item in cart.items:
            stock_holder = item.variant if item.variant_id else item.product
            key = ("variant", item.variant_id) if item.variant_id else ("product", item.product_id)
            if stock_holder.stock_quantity < needed[key]:
                raise InvalidOperationError(f"Insufficient stock for {item.product.name}")

        now = now_utc()
        order = models.Order(
            order_number=generate_order_number(now),
            user_id=cart.user_id,
            order_date=now,
            status=schemas.OrderStatus.pending.value,
            payment_method=data.payment_method,
            payment_status=schemas.PaymentStatus.pending.value,
            shipping_address=data.shipping_address,
            billing_address=data.billing_address or data.shipping_address,
            notes=data.notes,
        )
        subtotal = Decimal("0.00")
        for item in cart.items:
            unit_price = money(item.variant.price if item.variant_id else item.product.price)
            line_total = money(unit_price * item.quantity)
            subtotal += line_total
            name = item.product.name if not item.variant_id else f"{item.product.name} ({item.variant.name})"
            order.items.append(models.OrderItem(
                product_id=item.product_id,
                variant_id=item.variant_id,
                product_name=name,
                quantity=item.quantity,
                unit_price=unit_price,
                total=line_total,
            ))
            stock_holder = item.variant if item.variant_id else item.product
            stock_holder.stock_quantity -= item.quantity

        order.subtotal = money(subtotal)
        order.tax, order.shipping_cost, order.total = calculate_totals(subtotal, self.settings)

        self.db.add(order)
        self.db.delete(cart)
        self.db.commit()
        self.db.refresh(order)
        logger.info("Created order %s with total %s", order.order_number, order.total)
        return order

    def get_order(self, order_id: uuid.UUID) -> models.Order:
        order = store_repo.get_order(self.db, order_id)
        if order is None:
            raise NotFoundError(f"Order with ID {order_id} not found")
        return order

    def list_orders(self, user_id: uuid.UUID, skip: int = 0, limit: int = 100) -> List[models.Order]:
        return store_repo.get_orders_for_user(self.db, user_id, skip=skip, limit=limit)

    def update_order_status(self, order_id: uuid.UUID, status: schemas.OrderStatus) -> models.Order:
        order = self.get_order(order_id)
        previous = order.status
        order.status = schemas.OrderStatus(status).value
        order = common.save(self.db, order)
        logger.info("Order %s status %s -> %s", order.order_number, previous, order.status)
        return order
