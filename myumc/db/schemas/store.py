import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict
from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    pending = "Pending"
    processing = "Processing"
    shipped = "Shipped"
    delivered = "Delivered"
    cancelled = "Cancelled"
    refunded = "Refunded"


class PaymentStatus(str, Enum):
    pending = "Pending"
    completed = "Completed"
    failed = "Failed"
    refunded = "Refunded"


class ProductVariantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    sku: str = Field(min_length=1, max_length=50)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    stock_quantity: int = Field(default=0, ge=0)
    attributes: Dict[str, str] = {}


class ProductVariant(ProductVariantCreate):
    id: uuid.UUID
    product_id: uuid.UUID
    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    stock_quantity: int = Field(default=0, ge=0)
    sku: str = Field(min_length=1, max_length=50)
    images: List[str] = []
    category: Optional[str] = Field(default=None, max_length=100)
    sub_category: Optional[str] = Field(default=None, max_length=100)
    is_available: bool = True
    is_featured: bool = False


class Product(ProductCreate):
    id: uuid.UUID
    organization_id: Optional[uuid.UUID] = None
    variants: List[ProductVariant] = []
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CartItemAdd(BaseModel):
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    quantity: int = Field(gt=0)


class CartItem(CartItemAdd):
    id: uuid.UUID
    cart_id: uuid.UUID
    model_config = ConfigDict(from_attributes=True)


class Cart(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    items: List[CartItem] = []
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class OrderCreate(BaseModel):
    cart_id: uuid.UUID
    shipping_address: str = Field(min_length=1)
    billing_address: Optional[str] = None
    payment_method: str = Field(min_length=1, max_length=32)
    notes: Optional[str] = Field(default=None, max_length=1000)


class OrderItem(BaseModel):
    id: uuid.UUID
    product_id: Optional[uuid.UUID] = None
    variant_id: Optional[uuid.UUID] = None
    product_name: str
    quantity: int
    unit_price: Decimal
    total: Decimal
    model_config = ConfigDict(from_attributes=True)


class Order(BaseModel):
    id: uuid.UUID
    order_number: str
    user_id: Optional[uuid.UUID] = None
    order_date: datetime
    status: OrderStatus
    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    total: Decimal
    payment_method: str
    payment_reference: Optional[str] = None
    payment_status: PaymentStatus
    shipping_address: Optional[str] = None
    billing_address: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItem] = []
    model_config = ConfigDict(from_attributes=True)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
