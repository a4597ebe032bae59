from pydantic import BaseModel, Field
from typing import Optional, Literal

MenuCategoryLiteral = Literal["Coffee", "Shakes", "Sides"]

class MenuItemIn(BaseModel):
    name: str
    description: str = ""
    category: MenuCategoryLiteral
    subcategory: Optional[Literal["Hot", "Cold"]] = None
    milk_type: Optional[Literal["Milk", "Non-Milk"]] = None
    strength: Optional[Literal["Mild", "Medium", "Strong", "Extra Strong"]] = None
    flavor_notes: list[str] = []
    # Shakes / Sides use price; Coffee uses the two blend prices
    price: float = Field(0.0, ge=0)
    price_blend: float = Field(0.0, ge=0)
    price_robusta_special: float = Field(0.0, ge=0)
    is_bestseller: bool = False
    image_url: Optional[str] = None
    prep_time: int = Field(5, ge=0)
    position: int = 0

class MenuItemOut(MenuItemIn):
    id: str
