import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cafe.config import settings
from cafe.models.core import BillingSettings, TaxCalculationMethod
from cafe.schemas.billing import TaxSettings

logger = logging.getLogger(__name__)

SETTINGS_ID = "default"


def get_billing_settings(db: Session) -> BillingSettings:
    """The single settings row, created from the configured defaults on first use."""
    bs = db.get(BillingSettings, SETTINGS_ID)
    if bs:
        return bs
    bs = BillingSettings(
        id=SETTINGS_ID,
        cgst_rate=settings.DEFAULT_CGST_RATE,
        sgst_rate=settings.DEFAULT_SGST_RATE,
        tax_calculation_method=TaxCalculationMethod(settings.DEFAULT_TAX_METHOD),
    )
    db.add(bs)
    try:
        db.commit()
    except IntegrityError:
        # another request created it first
        db.rollback()
        return db.get(BillingSettings, SETTINGS_ID)
    db.refresh(bs)
    logger.info("Created default billing settings")
    return bs


def tax_snapshot(bs: BillingSettings) -> TaxSettings:
    return TaxSettings(
        cgst_rate=float(bs.cgst_rate or 0),
        sgst_rate=float(bs.sgst_rate or 0),
        tax_calculation_method=bs.tax_calculation_method.value,
    )


def get_tax_settings(db: Session) -> TaxSettings:
    return tax_snapshot(get_billing_settings(db))
