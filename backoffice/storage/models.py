"""
Domain Models

Entity schemas for the back-office catalog, promotions, orders and returns.

Every entity comes in three shapes:
- <Entity>Create: the plain record a caller submits (no id, no created_at)
- <Entity>Update: a partial record; unset fields are left untouched
- <Entity>: the frozen stored record with its assigned identifier

Referential fields (category_id, order_id, scope_id, ...) are plain integers.
Nothing here checks that they resolve.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so comparisons never mix naive and aware values"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


_URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)


def _clean_url(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    if not _URL_PATTERN.match(value):
        raise ValueError("must be a valid http(s) URL")
    return value


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ProductSource(str, Enum):
    """Where a product was listed first"""
    MANUAL = "manual"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    WHATSAPP = "whatsapp"
    TIKTOK = "tiktok"


class DiscountType(str, Enum):
    """How a discount value is interpreted"""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountScope(str, Enum):
    """Entity space a discount's scope_id points into"""
    ALL = "all"
    CATEGORY = "category"
    PRODUCT = "product"
    TAG = "tag"


class DiscountStatus(str, Enum):
    """Display classification of a discount"""
    ACTIVE = "active"
    SCHEDULED = "scheduled"
    EXPIRED = "expired"
    INACTIVE = "inactive"


class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    """Payment status enumeration"""
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class EscrowStatus(str, Enum):
    """Whether held funds were disbursed (a label only)"""
    PENDING = "pending"
    RELEASED = "released"
    REFUNDED = "refunded"


class ReturnStatus(str, Enum):
    """Return request status enumeration"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class StoredRecord(BaseModel):
    """Base for records held by the entity store"""
    
    model_config = ConfigDict(frozen=True)
    
    id: int = Field(..., ge=1)


# =============================================================================
# USERS
# =============================================================================

class UserCreate(BaseModel):
    username: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    avatar: Optional[str] = None
    
    @field_validator("avatar")
    @classmethod
    def validate_avatar(cls, v: Optional[str]) -> Optional[str]:
        return _clean_url(v)


class UserUpdate(BaseModel):
    """Only the profile fields of a user can change"""
    name: str = Field(None, min_length=1)
    email: str = Field(None, min_length=3)
    avatar: Optional[str] = None
    
    @field_validator("avatar")
    @classmethod
    def validate_avatar(cls, v: Optional[str]) -> Optional[str]:
        return _clean_url(v)


class User(StoredRecord, UserCreate):
    pass


# =============================================================================
# CATALOG
# =============================================================================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    
    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: Optional[str]) -> Optional[str]:
        return _clean_url(v)


class CategoryUpdate(BaseModel):
    name: str = Field(None, min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    
    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: Optional[str]) -> Optional[str]:
        return _clean_url(v)


class Category(StoredRecord, CategoryCreate):
    owner_id: int


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., ge=0)
    cost: float = Field(..., ge=0)
    stock: int = Field(default=0, ge=0)
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    source: ProductSource = ProductSource.MANUAL
    source_id: Optional[str] = None
    
    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: Optional[str]) -> Optional[str]:
        return _clean_url(v)


class ProductUpdate(BaseModel):
    name: str = Field(None, min_length=1)
    description: str = None
    price: float = Field(None, ge=0)
    cost: float = Field(None, ge=0)
    stock: int = Field(None, ge=0)
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    source: ProductSource = None
    source_id: Optional[str] = None
    
    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: Optional[str]) -> Optional[str]:
        return _clean_url(v)


class Product(StoredRecord, ProductCreate):
    owner_id: int
    created_at: Optional[datetime] = None


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1)


class Tag(StoredRecord, TagCreate):
    owner_id: int


class ProductTag(StoredRecord):
    """Join row; the same (product_id, tag_id) pair may appear more than once"""
    product_id: int
    tag_id: int


# =============================================================================
# DISCOUNTS
# =============================================================================

class DiscountCreate(BaseModel):
    """
    A promotion rule. A percentage value is expected to be 0-100 but only
    non-negativity is enforced.
    """
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: DiscountType
    value: float = Field(..., ge=0)
    code: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: bool = True
    scope: DiscountScope
    scope_id: Optional[int] = None
    
    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class DiscountUpdate(BaseModel):
    name: str = Field(None, min_length=1)
    description: Optional[str] = None
    type: DiscountType = None
    value: float = Field(None, ge=0)
    code: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: bool = None
    scope: DiscountScope = None
    scope_id: Optional[int] = None
    
    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class Discount(StoredRecord, DiscountCreate):
    owner_id: int


# =============================================================================
# ORDERS
# =============================================================================

class OrderItemCreate(BaseModel):
    """
    A denormalized line item. total is expected to equal price * quantity
    but is stored as given.
    """
    product_id: int
    product_name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    total: float = Field(..., ge=0)


class OrderItemUpdate(BaseModel):
    product_id: int = None
    product_name: str = Field(None, min_length=1)
    price: float = Field(None, ge=0)
    quantity: int = Field(None, ge=1)
    total: float = Field(None, ge=0)


class OrderItem(StoredRecord, OrderItemCreate):
    order_id: int


class OrderCreate(BaseModel):
    """
    status, payment_status and escrow_status are independent labels;
    any combination is accepted.
    """
    customer_id: Optional[int] = None
    customer_name: str = Field(..., min_length=1)
    customer_email: str = Field(..., min_length=3)
    customer_phone: Optional[str] = None
    shipping_address: str = Field(..., min_length=1)
    total: float = Field(..., ge=0)
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    escrow_status: EscrowStatus = EscrowStatus.PENDING
    tracking_number: Optional[str] = None
    shipping_carrier: Optional[str] = None
    
    @field_validator("customer_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("must be an email address")
        return v


class OrderUpdate(BaseModel):
    customer_id: Optional[int] = None
    customer_name: str = Field(None, min_length=1)
    customer_email: str = Field(None, min_length=3)
    customer_phone: Optional[str] = None
    shipping_address: str = Field(None, min_length=1)
    total: float = Field(None, ge=0)
    status: OrderStatus = None
    payment_status: PaymentStatus = None
    escrow_status: EscrowStatus = None
    tracking_number: Optional[str] = None
    shipping_carrier: Optional[str] = None
    
    @field_validator("customer_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("must be an email address")
        return v


class Order(StoredRecord, OrderCreate):
    owner_id: int
    created_at: Optional[datetime] = None


# =============================================================================
# RETURNS
# =============================================================================

class ReturnCreate(BaseModel):
    """
    requested_items holds order item ids as submitted; they are not checked
    against the order. refund_amount is stored as given.
    """
    order_id: int
    reason: str
    status: ReturnStatus = ReturnStatus.PENDING
    refund_amount: Optional[float] = Field(default=None, ge=0)
    requested_items: List[int]


class ReturnUpdate(BaseModel):
    order_id: int = None
    reason: str = None
    status: ReturnStatus = None
    refund_amount: Optional[float] = Field(default=None, ge=0)
    requested_items: List[int] = None


class Return(StoredRecord, ReturnCreate):
    created_at: Optional[datetime] = None
