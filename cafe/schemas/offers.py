from pydantic import BaseModel, Field
from typing import Optional, Literal, Annotated
from datetime import datetime

OfferTypeLiteral = Literal["percentage", "fixed"]
OfferCategoryLiteral = Literal["Coffee", "Shakes", "Sides"]  # same set as MenuCategory
Weekday = Annotated[int, Field(ge=0, le=6)]  # 0 = Sunday

class DailyOfferIn(BaseModel):
    name: str
    description: str = ""
    offer_type: OfferTypeLiteral
    discount_value: float
    min_order_amount: float = Field(0.0, ge=0)
    max_discount_amount: Optional[float] = Field(None, ge=0)
    applicable_categories: list[OfferCategoryLiteral] = []
    applicable_items: list[str] = []
    start_date: datetime
    end_date: datetime
    applicable_days: list[Weekday] = []
    is_active: bool = True
    priority: int = 0

class DailyOfferUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    offer_type: Optional[OfferTypeLiteral] = None
    discount_value: Optional[float] = None
    min_order_amount: Optional[float] = Field(None, ge=0)
    max_discount_amount: Optional[float] = Field(None, ge=0)
    applicable_categories: Optional[list[OfferCategoryLiteral]] = None
    applicable_items: Optional[list[str]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    applicable_days: Optional[list[Weekday]] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None

class DailyOfferOut(BaseModel):
    """Read-only snapshot of an offer; also what the billing calculator consumes."""
    id: str
    name: str
    description: str = ""
    offer_type: OfferTypeLiteral
    discount_value: float
    min_order_amount: float = 0.0
    max_discount_amount: Optional[float] = None
    applicable_categories: list[str] = []
    applicable_items: list[str] = []
    start_date: datetime
    end_date: datetime
    applicable_days: list[int] = []
    is_active: bool = True
    priority: int = 0

class OfferCleanupOut(BaseModel):
    deleted: int
    inactive: int
    expired: int
    message: str
