# cafe/routers/billing.py
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from cafe.db import get_db
from cafe.deps import require_admin
from cafe.models.common import as_aware, to_utc
from cafe.models.core import Admin, DailyOffer, OfferType, TaxCalculationMethod
from cafe.schemas.billing import (
    BillingBreakdown, BillingOptions, BillingPreviewIn, BillingSettingsOut, BillingSettingsUpdate,
)
from cafe.schemas.offers import DailyOfferIn, DailyOfferOut, DailyOfferUpdate, OfferCleanupOut
from cafe.services.billing import compute_billing
from cafe.services.billing_settings import get_billing_settings, tax_snapshot
from cafe.services.offers import active_offers, cleanup_daily_offers, list_offers, offer_snapshot
from cafe.util.audit import audit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["billing"])

TAX_METHODS = {m.value for m in TaxCalculationMethod}


# ---------- helpers ----------

def _settings_out(bs) -> BillingSettingsOut:
    return BillingSettingsOut(
        id=bs.id,
        updated_by=bs.updated_by or "admin",
        updated_at=as_aware(bs.updated_at).isoformat() if bs.updated_at else None,
        **tax_snapshot(bs).model_dump(),
    )

def _check_discount(offer_type: str, value: float) -> None:
    if value < 0:
        raise HTTPException(400, detail="Discount value must be non-negative")
    if offer_type == "percentage" and value > 100:
        raise HTTPException(400, detail="Percentage discount cannot exceed 100%")


# ---------- settings ----------

@router.get("/settings", response_model=BillingSettingsOut)
def read_settings(db: Session = Depends(get_db)):
    return _settings_out(get_billing_settings(db))


@router.put("/settings")
def update_settings(body: BillingSettingsUpdate, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    bs = get_billing_settings(db)
    before = tax_snapshot(bs).model_dump()

    if body.cgst_rate is not None:
        if body.cgst_rate < 0 or body.cgst_rate > 100:
            raise HTTPException(400, detail="CGST rate must be between 0 and 100")
        bs.cgst_rate = body.cgst_rate
    if body.sgst_rate is not None:
        if body.sgst_rate < 0 or body.sgst_rate > 100:
            raise HTTPException(400, detail="SGST rate must be between 0 and 100")
        bs.sgst_rate = body.sgst_rate
    if body.tax_calculation_method is not None:
        if body.tax_calculation_method not in TAX_METHODS:
            raise HTTPException(400, detail="Invalid tax calculation method")
        bs.tax_calculation_method = TaxCalculationMethod(body.tax_calculation_method)

    admin = db.get(Admin, sub)
    bs.updated_by = admin.email if admin else "admin"
    audit(db, sub, "BillingSettings", bs.id, "UPDATE", before=before, after=tax_snapshot(bs).model_dump())
    db.commit(); db.refresh(bs)
    return {"message": "Billing settings updated successfully", "settings": _settings_out(bs)}


# ---------- preview ----------

@router.post("/calculate", response_model=BillingBreakdown)
def calculate(body: BillingPreviewIn, db: Session = Depends(get_db)):
    options = BillingOptions(
        discount_type=body.discount_type,
        discount_value=body.discount_value,
        applied_offer_id=body.applied_offer_id,
    )
    return compute_billing(db, body.subtotal, body.items, options)


# ---------- daily offers ----------

@router.get("/offers", response_model=list[DailyOfferOut])
def get_offers(active: bool = False, db: Session = Depends(get_db)):
    return [offer_snapshot(o) for o in list_offers(db, active_only=active)]


@router.get("/offers/active", response_model=list[DailyOfferOut])
def get_active_offers(db: Session = Depends(get_db)):
    return [offer_snapshot(o) for o in active_offers(db)]


@router.post("/offers", status_code=201)
def create_offer(body: DailyOfferIn, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    if not body.name.strip():
        raise HTTPException(400, detail="Name, offer type, and discount value are required")
    _check_discount(body.offer_type, body.discount_value)

    data = body.model_dump()
    data["name"] = body.name.strip()
    data["offer_type"] = OfferType(body.offer_type)
    data["max_discount_amount"] = body.max_discount_amount or None  # 0 means "no cap"
    data["start_date"] = to_utc(body.start_date)
    data["end_date"] = to_utc(body.end_date)
    o = DailyOffer(**data)
    db.add(o); db.flush()
    audit(db, sub, "DailyOffer", o.id, "CREATE", after=body.model_dump())
    db.commit(); db.refresh(o)
    logger.info("Daily offer %s created (%s)", o.id, o.name)
    return {"message": "Offer created successfully", "offer": offer_snapshot(o)}


@router.put("/offers/{offer_id}")
def update_offer(offer_id: str, body: DailyOfferUpdate, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    o = db.get(DailyOffer, offer_id)
    if not o:
        raise HTTPException(404, detail="Offer not found")
    before = offer_snapshot(o).model_dump()

    changes = body.model_dump(exclude_unset=True)
    # the stored value must stay valid for the resulting type, whichever field changed
    offer_type = changes.get("offer_type") or o.offer_type.value
    value = changes.get("discount_value")
    _check_discount(offer_type, float(o.discount_value) if value is None else value)
    if changes.get("offer_type") is not None:
        o.offer_type = OfferType(changes.pop("offer_type"))
    for k in ("start_date", "end_date"):
        if changes.get(k) is not None:
            changes[k] = to_utc(changes[k])
    if "max_discount_amount" in changes:
        changes["max_discount_amount"] = changes["max_discount_amount"] or None
    for k, v in changes.items():
        if v is None and k != "max_discount_amount":
            continue
        setattr(o, k, v)

    audit(db, sub, "DailyOffer", o.id, "UPDATE", before=before, after=offer_snapshot(o).model_dump())
    db.commit(); db.refresh(o)
    return {"message": "Offer updated successfully", "offer": offer_snapshot(o)}


@router.delete("/offers/{offer_id}")
def delete_offer(offer_id: str, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    o = db.get(DailyOffer, offer_id)
    if not o:
        raise HTTPException(404, detail="Offer not found")
    audit(db, sub, "DailyOffer", o.id, "DELETE", before=offer_snapshot(o).model_dump())
    db.delete(o)
    db.commit()
    return {"message": "Offer deleted successfully"}


@router.post("/offers/cleanup", response_model=OfferCleanupOut)
def cleanup_offers(db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    return cleanup_daily_offers(db)
