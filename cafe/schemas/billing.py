from pydantic import BaseModel, Field
from typing import Optional, Literal

TaxMethodLiteral = Literal["onSubtotal", "onDiscountedSubtotal"]
DiscountTypeLiteral = Literal["", "percentage", "fixed"]

class TaxSettings(BaseModel):
    cgst_rate: float
    sgst_rate: float
    tax_calculation_method: TaxMethodLiteral = "onSubtotal"

class BillingSettingsOut(TaxSettings):
    id: str
    updated_by: str
    updated_at: Optional[str] = None

class BillingSettingsUpdate(BaseModel):
    # ranges are checked by the route so the error messages match the admin panel
    cgst_rate: Optional[float] = None
    sgst_rate: Optional[float] = None
    tax_calculation_method: Optional[str] = None

class LineItem(BaseModel):
    item_id: str
    category: str = "Coffee"
    quantity: int = 1
    price: float = 0.0

class BillingOptions(BaseModel):
    discount_type: DiscountTypeLiteral = ""
    discount_value: float = 0.0
    applied_offer_id: Optional[str] = None

class BillingPreviewIn(BaseModel):
    subtotal: float = Field(ge=0)
    items: list[LineItem] = []
    discount_type: DiscountTypeLiteral = ""
    discount_value: float = Field(0.0, ge=0)
    applied_offer_id: Optional[str] = None

class AppliedOfferSummary(BaseModel):
    id: str
    name: str
    description: str = ""

class BillingBreakdown(BaseModel):
    subtotal: float
    discount_type: str
    discount_value: float
    discount_amount: float
    applied_offer: Optional[AppliedOfferSummary] = None
    offer_discount_amount: float
    discounted_subtotal: float
    cgst_rate: float
    sgst_rate: float
    cgst_amount: float
    sgst_amount: float
    tax: float
    total: float
