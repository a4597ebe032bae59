from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
from decimal import Decimal

from cafe.db import get_db
from cafe.schemas.menu import MenuItemIn, MenuItemOut
from cafe.models.core import MenuItem, MenuCategory
from cafe.deps import require_admin

router = APIRouter(prefix="/menu", tags=["menu"])


# ---------- helpers ----------

def _as_float(val: Decimal | float | int | None) -> float:
    if val is None:
        return 0.0
    return float(val)

def _item_out(m: MenuItem) -> MenuItemOut:
    return MenuItemOut(
        id=m.id,
        name=m.name,
        description=m.description or "",
        category=m.category.value,
        subcategory=m.subcategory,
        milk_type=m.milk_type,
        strength=m.strength,
        flavor_notes=list(m.flavor_notes or []),
        price=_as_float(m.price),
        price_blend=_as_float(m.price_blend),
        price_robusta_special=_as_float(m.price_robusta_special),
        is_bestseller=bool(m.is_bestseller),
        image_url=m.image_url,
        prep_time=int(m.prep_time or 0),
        position=int(m.position or 0),
    )

def _check_strength(body: MenuItemIn) -> None:
    if body.category == "Coffee" and not body.strength:
        raise HTTPException(400, detail="strength is required for Coffee items")


# ---------- ITEMS ----------

@router.get("/items", response_model=List[MenuItemOut])
def list_items(category: Optional[str] = None, db: Session = Depends(get_db)):
    q = db.query(MenuItem)
    if category:
        try:
            q = q.filter(MenuItem.category == MenuCategory(category))
        except ValueError:
            raise HTTPException(400, detail="invalid category")
    rows = q.order_by(MenuItem.position.asc(), MenuItem.created_at.desc()).all()
    return [_item_out(m) for m in rows]


@router.get("/items/{item_id}", response_model=MenuItemOut)
def get_item(item_id: str, db: Session = Depends(get_db)):
    m = db.get(MenuItem, item_id)
    if not m:
        raise HTTPException(404, detail="Menu item not found")
    return _item_out(m)


@router.post("/items", response_model=MenuItemOut, status_code=201)
def create_item(body: MenuItemIn, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    _check_strength(body)
    m = MenuItem(**{**body.model_dump(), "category": MenuCategory(body.category)})
    db.add(m)
    db.commit()
    db.refresh(m)
    return _item_out(m)


@router.put("/items/{item_id}", response_model=MenuItemOut)
def update_item(item_id: str, body: MenuItemIn, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    m = db.get(MenuItem, item_id)
    if not m:
        raise HTTPException(404, detail="Menu item not found")
    _check_strength(body)
    for k, v in body.model_dump().items():
        setattr(m, k, MenuCategory(v) if k == "category" else v)
    db.commit()
    db.refresh(m)
    return _item_out(m)


@router.delete("/items/{item_id}")
def delete_item(item_id: str, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    m = db.get(MenuItem, item_id)
    if not m:
        raise HTTPException(404, detail="Menu item not found")
    db.delete(m)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, detail="Menu item is referenced by existing orders")
    return {"message": "Menu item deleted successfully"}
