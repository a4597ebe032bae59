from sqlalchemy import (
    String, ForeignKey, Boolean, Numeric, Float, Enum, Text, DateTime, Integer, JSON
)
from sqlalchemy.orm import Mapped, mapped_column
from enum import Enum as PyEnum
from datetime import datetime
from cafe.db import Base
from cafe.models.common import IdMixin, TSMMixin

# ── Enums ───────────────────────────────────────────────────────────────────
class OfferType(PyEnum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"

class TaxCalculationMethod(PyEnum):
    ON_SUBTOTAL = "onSubtotal"
    ON_DISCOUNTED_SUBTOTAL = "onDiscountedSubtotal"

class MenuCategory(PyEnum):
    COFFEE = "Coffee"
    SHAKES = "Shakes"
    SIDES = "Sides"

class PriceType(PyEnum):
    BLEND = "Blend"
    ROBUSTA_SPECIAL = "Robusta Special"
    STANDARD = "Standard"

class OrderSource(PyEnum):
    COUNTER = "Counter"
    QR = "QR"

class OrderStatus(PyEnum):
    PENDING = "Pending"
    PREPARING = "Preparing"
    READY = "Ready"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

class PaymentStatus(PyEnum):
    PAID = "Paid"
    PENDING = "Pending"
    FAILED = "Failed"

class PaymentMethod(PyEnum):
    CASH = "Cash"
    RAZORPAY = "Razorpay"
    OTHER = "Other"

# ── Identity ────────────────────────────────────────────────────────────────
class Admin(Base, IdMixin, TSMMixin):
    __tablename__ = "admin"
    email: Mapped[str] = mapped_column(String(160), unique=True)
    pass_hash: Mapped[str] = mapped_column(String(200))

# ── Billing ─────────────────────────────────────────────────────────────────
class BillingSettings(Base, IdMixin, TSMMixin):
    __tablename__ = "billing_settings"
    cgst_rate: Mapped[float] = mapped_column(Numeric(5, 2), default=2.5)
    sgst_rate: Mapped[float] = mapped_column(Numeric(5, 2), default=2.5)
    tax_calculation_method: Mapped[TaxCalculationMethod] = mapped_column(
        Enum(TaxCalculationMethod), default=TaxCalculationMethod.ON_SUBTOTAL)
    updated_by: Mapped[str] = mapped_column(String(160), default="admin")

class DailyOffer(Base, IdMixin, TSMMixin):
    __tablename__ = "daily_offer"
    name: Mapped[str] = mapped_column(String(160))
    description: Mapped[str] = mapped_column(Text, default="")
    offer_type: Mapped[OfferType] = mapped_column(Enum(OfferType))
    discount_value: Mapped[float] = mapped_column(Numeric(10, 2))
    min_order_amount: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    max_discount_amount: Mapped[float | None] = mapped_column(Numeric(10, 2))  # NULL = no cap
    applicable_categories: Mapped[list] = mapped_column(JSON, default=list)  # [] = all categories
    applicable_items: Mapped[list] = mapped_column(JSON, default=list)       # [] = all items
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    applicable_days: Mapped[list] = mapped_column(JSON, default=list)  # 0 = Sunday; [] = every day
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    priority: Mapped[int] = mapped_column(Integer, default=0)

# ── Menu ────────────────────────────────────────────────────────────────────
class MenuItem(Base, IdMixin, TSMMixin):
    __tablename__ = "menu_item"
    name: Mapped[str] = mapped_column(String(160))
    description: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[MenuCategory] = mapped_column(Enum(MenuCategory))
    subcategory: Mapped[str | None] = mapped_column(String(10))   # Hot | Cold
    milk_type: Mapped[str | None] = mapped_column(String(10))     # Milk | Non-Milk
    strength: Mapped[str | None] = mapped_column(String(20))
    flavor_notes: Mapped[list] = mapped_column(JSON, default=list)
    price: Mapped[float] = mapped_column(Numeric(10, 2), default=0)  # Shakes / Sides
    price_blend: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    price_robusta_special: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    is_bestseller: Mapped[bool] = mapped_column(Boolean, default=False)
    image_url: Mapped[str | None] = mapped_column(String(400))
    prep_time: Mapped[int] = mapped_column(Integer, default=5)  # minutes
    position: Mapped[int] = mapped_column(Integer, default=0)

# ── Customers ───────────────────────────────────────────────────────────────
class Customer(Base, IdMixin, TSMMixin):
    __tablename__ = "customer"
    name: Mapped[str] = mapped_column(String(160))
    mobile: Mapped[str] = mapped_column(String(20), unique=True)  # +91XXXXXXXXXX
    email: Mapped[str] = mapped_column(String(160), default="")
    total_orders: Mapped[int] = mapped_column(Integer, default=0)
    total_spent: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    last_order_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

# ── Orders ──────────────────────────────────────────────────────────────────
class Order(Base, IdMixin, TSMMixin):
    __tablename__ = "order"
    order_number: Mapped[str] = mapped_column(String(11), unique=True)
    token_number: Mapped[int] = mapped_column(Integer, default=0)
    table_number: Mapped[str] = mapped_column(String(20), default="")
    order_source: Mapped[OrderSource] = mapped_column(Enum(OrderSource), default=OrderSource.QR)
    payment_status: Mapped[PaymentStatus] = mapped_column(Enum(PaymentStatus), default=PaymentStatus.PENDING)
    payment_method: Mapped[PaymentMethod] = mapped_column(Enum(PaymentMethod), default=PaymentMethod.CASH)
    status: Mapped[OrderStatus] = mapped_column(Enum(OrderStatus), default=OrderStatus.PENDING, index=True)
    customer_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("customer.id"))
    customer_name: Mapped[str] = mapped_column(String(160), default="")
    customer_mobile: Mapped[str] = mapped_column(String(20), default="")
    customer_email: Mapped[str] = mapped_column(String(160), default="")
    notes: Mapped[str] = mapped_column(Text, default="")
    # billing breakdown exactly as computed at order time; only total is rounded
    subtotal: Mapped[float] = mapped_column(Float)
    discount_type: Mapped[str] = mapped_column(String(12), default="")
    discount_value: Mapped[float] = mapped_column(Float, default=0)
    discount_amount: Mapped[float] = mapped_column(Float, default=0)
    applied_offer_id: Mapped[str | None] = mapped_column(String(36))
    applied_offer_name: Mapped[str | None] = mapped_column(String(160))
    applied_offer_description: Mapped[str | None] = mapped_column(Text)
    offer_discount_amount: Mapped[float] = mapped_column(Float, default=0)
    discounted_subtotal: Mapped[float] = mapped_column(Float, default=0)
    cgst_rate: Mapped[float] = mapped_column(Float, default=0)
    sgst_rate: Mapped[float] = mapped_column(Float, default=0)
    cgst_amount: Mapped[float] = mapped_column(Float, default=0)
    sgst_amount: Mapped[float] = mapped_column(Float, default=0)
    tax: Mapped[float] = mapped_column(Float, default=0)
    total: Mapped[float] = mapped_column(Float)
    estimated_prep_time: Mapped[int] = mapped_column(Integer, default=0)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    receipt_generated: Mapped[bool] = mapped_column(Boolean, default=False)

class OrderItem(Base, IdMixin, TSMMixin):
    __tablename__ = "order_item"
    order_id: Mapped[str] = mapped_column(String(36), ForeignKey("order.id"), index=True)
    item_id: Mapped[str] = mapped_column(String(36), ForeignKey("menu_item.id"))
    name: Mapped[str] = mapped_column(String(160))
    category: Mapped[str] = mapped_column(String(20))
    quantity: Mapped[int] = mapped_column(Integer)
    price: Mapped[float] = mapped_column(Numeric(10, 2))
    price_type: Mapped[PriceType] = mapped_column(Enum(PriceType), default=PriceType.STANDARD)
    prep_time: Mapped[int] = mapped_column(Integer, default=5)

class OrderCounter(Base):
    __tablename__ = "order_counter"
    id: Mapped[str] = mapped_column(String(40), primary_key=True)  # "orderNumber" | "token_YYYY-MM-DD"
    sequence: Mapped[int] = mapped_column(Integer, default=0)

# ── Audit ───────────────────────────────────────────────────────────────────
class AuditLog(Base, IdMixin, TSMMixin):
    __tablename__ = "audit_log"
    actor_user_id: Mapped[str] = mapped_column(String(36))
    entity: Mapped[str] = mapped_column(String(60))
    entity_id: Mapped[str] = mapped_column(String(36))
    action: Mapped[str] = mapped_column(String(60))
    before: Mapped[str | None] = mapped_column(Text)
    after: Mapped[str | None] = mapped_column(Text)
