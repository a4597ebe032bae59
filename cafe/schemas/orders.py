from pydantic import BaseModel, Field
from typing import Optional, Literal

from cafe.schemas.billing import BillingBreakdown, DiscountTypeLiteral

OrderSourceLiteral = Literal["Counter", "QR"]
OrderStatusLiteral = Literal["Pending", "Preparing", "Ready", "Completed", "Cancelled"]
PriceTypeLiteral = Literal["Blend", "Robusta Special", "Standard"]

class OrderLineIn(BaseModel):
    item_id: str
    quantity: int = Field(ge=1)
    price_type: Optional[PriceTypeLiteral] = None

class OrderIn(BaseModel):
    items: list[OrderLineIn] = []
    customer_mobile: str = ""
    customer_name: str = ""
    customer_email: Optional[str] = None
    notes: str = ""
    order_source: OrderSourceLiteral = "QR"
    table_number: str = ""
    payment_method: Optional[str] = None  # "counter" = pay cash at the counter
    discount_type: DiscountTypeLiteral = ""
    discount_value: float = Field(0.0, ge=0)
    applied_offer_id: Optional[str] = None

class OrderItemOut(BaseModel):
    item_id: str
    name: str
    category: str
    quantity: int
    price: float
    price_type: PriceTypeLiteral
    prep_time: int

class OrderOut(BaseModel):
    id: str
    order_number: str
    token_number: int
    table_number: str
    order_source: OrderSourceLiteral
    payment_status: str
    payment_method: str
    status: OrderStatusLiteral
    customer_id: Optional[str] = None
    customer_name: str
    customer_mobile: str
    customer_email: str
    notes: str
    items: list[OrderItemOut]
    billing: BillingBreakdown
    applied_offer_id: Optional[str] = None
    estimated_prep_time: int
    receipt_generated: bool
    completed_at: Optional[str] = None
    created_at: Optional[str] = None

class OrderStatusIn(BaseModel):
    status: str

class PrepTimeIn(BaseModel):
    estimated_prep_time: Optional[int] = None
