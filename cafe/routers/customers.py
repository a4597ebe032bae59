from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cafe.db import get_db
from cafe.deps import require_admin
from cafe.models.common import as_aware
from cafe.models.core import Customer

router = APIRouter(prefix="/customers", tags=["customers"])

@router.get("/")
def list_customers(limit: int = 100, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    rows = db.query(Customer).order_by(Customer.created_at.desc()).limit(max(1, min(limit, 500))).all()
    return [
        {
            "id": c.id,
            "name": c.name,
            "mobile": c.mobile,
            "email": c.email or "",
            "total_orders": c.total_orders or 0,
            "total_spent": float(c.total_spent or 0),
            "last_order_at": as_aware(c.last_order_at).isoformat() if c.last_order_at else None,
        }
        for c in rows
    ]
