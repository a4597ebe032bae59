from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from cafe.db import get_db
from cafe.config import settings
from cafe.util.security import hash_pw
from cafe.models.core import Admin, MenuItem, MenuCategory
from cafe.services.billing_settings import get_billing_settings

router = APIRouter(prefix="/admin", tags=["admin"])

DEV_ADMIN_EMAIL = "admin@cafe.local"
DEV_ADMIN_PASSWORD = "admin1234"

SAMPLE_MENU = [
    dict(name="Filter Coffee", description="South Indian filter coffee", category=MenuCategory.COFFEE,
         subcategory="Hot", milk_type="Milk", strength="Strong", price_blend=120, price_robusta_special=150,
         prep_time=5, position=1),
    dict(name="Cold Brew", description="Slow steeped robusta", category=MenuCategory.COFFEE,
         subcategory="Cold", milk_type="Non-Milk", strength="Extra Strong", price_blend=0, price_robusta_special=180,
         prep_time=3, position=2),
    dict(name="Chocolate Shake", description="Thick chocolate shake", category=MenuCategory.SHAKES,
         price=160, prep_time=6, position=3),
    dict(name="Garlic Bread", description="Toasted with herb butter", category=MenuCategory.SIDES,
         price=110, prep_time=8, position=4),
]

@router.post("/dev-bootstrap")
def dev_bootstrap(db: Session = Depends(get_db)):
    if settings.APP_ENV != "dev":
        raise HTTPException(403, detail="Not allowed")

    admin = db.query(Admin).filter(Admin.email == DEV_ADMIN_EMAIL).first()
    if not admin:
        admin = Admin(email=DEV_ADMIN_EMAIL, pass_hash=hash_pw(DEV_ADMIN_PASSWORD))
        db.add(admin); db.flush()

    # billing settings singleton with configured defaults
    bs = get_billing_settings(db)

    menu_ids = {}
    for row in SAMPLE_MENU:
        m = db.query(MenuItem).filter(MenuItem.name == row["name"]).first()
        if not m:
            m = MenuItem(**row)
            db.add(m); db.flush()
        menu_ids[m.name] = m.id

    db.commit()
    return {
        "admin_id": admin.id,
        "admin_email": DEV_ADMIN_EMAIL,
        "admin_password": DEV_ADMIN_PASSWORD,
        "billing_settings_id": bs.id,
        "menu": menu_ids,
    }
