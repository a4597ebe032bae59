"""Daily offer repository: lookups, validity window checks and housekeeping."""
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from sqlalchemy import or_
from sqlalchemy.orm import Session

from cafe.config import settings
from cafe.models.common import as_aware, utcnow
from cafe.models.core import DailyOffer
from cafe.schemas.offers import DailyOfferOut

logger = logging.getLogger(__name__)


def weekday(at: datetime) -> int:
    """Day of week of ``at`` in the café's timezone, 0 = Sunday .. 6 = Saturday."""
    local = as_aware(at).astimezone(ZoneInfo(settings.TZ))
    return (local.weekday() + 1) % 7


def offer_snapshot(o: DailyOffer) -> DailyOfferOut:
    return DailyOfferOut(
        id=o.id,
        name=o.name,
        description=o.description or "",
        offer_type=o.offer_type.value,
        discount_value=float(o.discount_value),
        min_order_amount=float(o.min_order_amount or 0),
        max_discount_amount=float(o.max_discount_amount) if o.max_discount_amount is not None else None,
        applicable_categories=list(o.applicable_categories or []),
        applicable_items=[str(i) for i in (o.applicable_items or [])],
        start_date=as_aware(o.start_date),
        end_date=as_aware(o.end_date),
        applicable_days=list(o.applicable_days or []),
        is_active=bool(o.is_active),
        priority=int(o.priority or 0),
    )


def offer_rejection(offer: DailyOfferOut, at: datetime) -> str | None:
    """Why ``offer`` is not valid at ``at``; None when it is.

    Both ends of the date window are inclusive.
    """
    if not offer.is_active:
        return "inactive"
    at = as_aware(at)
    if at < as_aware(offer.start_date):
        return "not started"
    if at > as_aware(offer.end_date):
        return "expired"
    if offer.applicable_days and weekday(at) not in offer.applicable_days:
        return "not valid on this weekday"
    return None


def is_offer_valid(offer: DailyOfferOut, at: datetime | None = None) -> bool:
    return offer_rejection(offer, at or utcnow()) is None


def get_offer_by_id(db: Session, offer_id: str) -> DailyOfferOut | None:
    o = db.get(DailyOffer, offer_id)
    return offer_snapshot(o) if o else None


def list_offers(db: Session, active_only: bool = False, at: datetime | None = None) -> list[DailyOffer]:
    q = db.query(DailyOffer)
    if active_only:
        at = at or utcnow()
        q = q.filter(DailyOffer.is_active.is_(True),
                     DailyOffer.start_date <= at,
                     DailyOffer.end_date >= at)
    return q.order_by(DailyOffer.priority.desc(), DailyOffer.created_at.desc()).all()


def active_offers(db: Session, at: datetime | None = None) -> list[DailyOffer]:
    """Offers valid at ``at`` (weekday included), highest priority first."""
    at = at or utcnow()
    today = weekday(at)
    return [o for o in list_offers(db, active_only=True, at=at)
            if not o.applicable_days or today in o.applicable_days]


def cleanup_daily_offers(db: Session, at: datetime | None = None) -> dict:
    """Delete offers that are switched off or whose end date has passed."""
    at = at or utcnow()
    doomed = (
        db.query(DailyOffer)
        .filter(or_(DailyOffer.is_active.is_(False), DailyOffer.end_date < at))
        .all()
    )
    if not doomed:
        logger.info("No daily offers to clean up")
        return {"deleted": 0, "inactive": 0, "expired": 0, "message": "No offers to clean up"}

    inactive = sum(1 for o in doomed if not o.is_active)
    expired = len(doomed) - inactive
    for o in doomed:
        db.delete(o)
    db.commit()

    logger.info("Cleaned up %d daily offer(s): inactive=%d expired=%d", len(doomed), inactive, expired)
    return {
        "deleted": len(doomed),
        "inactive": inactive,
        "expired": expired,
        "message": f"Cleaned up {len(doomed)} offer(s)",
    }
