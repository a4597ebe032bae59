from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union
import logging

from sqlalchemy.orm import Session

from cafe.models.common import utcnow
from cafe.schemas.billing import (
    AppliedOfferSummary, BillingBreakdown, BillingOptions, LineItem, TaxSettings,
)
from cafe.schemas.offers import DailyOfferOut
from cafe.services.billing_settings import get_tax_settings
from cafe.services.offers import get_offer_by_id, offer_rejection

logger = logging.getLogger(__name__)


def _money(x) -> float:
    return float(Decimal(str(x)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class OfferApplied:
    amount: float


@dataclass(frozen=True)
class OfferNotApplicable:
    reason: str
    amount: float = 0.0


OfferApplication = Union[OfferApplied, OfferNotApplicable]


def offer_matches_items(offer: DailyOfferOut, items: Iterable[LineItem]) -> bool:
    # unscoped offers cover everything; otherwise a category hit OR an item hit is enough
    if not offer.applicable_categories and not offer.applicable_items:
        return True
    categories = set(offer.applicable_categories)
    item_ids = {str(i) for i in offer.applicable_items}
    return any(li.category in categories or str(li.item_id) in item_ids for li in items)


def resolve_offer(offer: DailyOfferOut | None, subtotal: float, items: Iterable[LineItem],
                  at: datetime) -> OfferApplication:
    if offer is None:
        return OfferNotApplicable("offer not found")
    rejected = offer_rejection(offer, at)
    if rejected:
        return OfferNotApplicable(rejected)
    if subtotal < offer.min_order_amount:
        return OfferNotApplicable("subtotal below minimum order amount")
    if not offer_matches_items(offer, items):
        return OfferNotApplicable("no matching category or item")

    if offer.offer_type == "percentage":
        amount = subtotal * offer.discount_value / 100
        if offer.max_discount_amount is not None and amount > offer.max_discount_amount:
            amount = offer.max_discount_amount
    else:
        # fixed offers are not capped at the subtotal
        amount = offer.discount_value
    return OfferApplied(amount)


def manual_discount(subtotal: float, discount_type: str, discount_value: float) -> float:
    if discount_type == "percentage" and discount_value > 0:
        return subtotal * discount_value / 100
    if discount_type == "fixed" and discount_value > 0:
        return discount_value
    return 0.0


def calculate_billing(
    subtotal: float,
    items: Iterable[LineItem],
    options: BillingOptions,
    *,
    tax_settings: TaxSettings,
    offer: DailyOfferOut | None = None,
    at: datetime | None = None,
) -> BillingBreakdown:
    """
    Price breakdown for an order.

    ``subtotal`` is taken as given (price x quantity summed by the caller);
    ``items`` are only consulted for offer scoping. The manual discount and
    the offer stack, and only their combined effect is floored at zero.
    Nothing is rounded except the final total.
    """
    items = list(items)
    at = at or utcnow()

    applied = None
    offer_discount_amount = 0.0
    if options.applied_offer_id:
        outcome = resolve_offer(offer, subtotal, items, at)
        if isinstance(outcome, OfferApplied):
            offer_discount_amount = outcome.amount
            applied = AppliedOfferSummary(id=offer.id, name=offer.name, description=offer.description)
        else:
            logger.debug("offer %s not applied: %s", options.applied_offer_id, outcome.reason)

    discount_amount = manual_discount(subtotal, options.discount_type, options.discount_value)

    discounted_subtotal = max(0.0, subtotal - discount_amount - offer_discount_amount)

    if tax_settings.tax_calculation_method == "onSubtotal":
        tax_base = subtotal
    else:
        tax_base = discounted_subtotal

    cgst_amount = tax_base * tax_settings.cgst_rate / 100
    sgst_amount = tax_base * tax_settings.sgst_rate / 100
    tax = cgst_amount + sgst_amount

    return BillingBreakdown(
        subtotal=subtotal,
        discount_type=options.discount_type,
        discount_value=options.discount_value,
        discount_amount=discount_amount,
        applied_offer=applied,
        offer_discount_amount=offer_discount_amount,
        discounted_subtotal=discounted_subtotal,
        cgst_rate=tax_settings.cgst_rate,
        sgst_rate=tax_settings.sgst_rate,
        cgst_amount=cgst_amount,
        sgst_amount=sgst_amount,
        tax=tax,
        total=_money(discounted_subtotal + tax),
    )


def compute_billing(db: Session, subtotal: float, items: Iterable[LineItem],
                    options: BillingOptions, at: datetime | None = None) -> BillingBreakdown:
    """Load the tax settings and the selected offer, then run the calculator."""
    tax_settings = get_tax_settings(db)
    offer = get_offer_by_id(db, options.applied_offer_id) if options.applied_offer_id else None
    return calculate_billing(subtotal, items, options, tax_settings=tax_settings, offer=offer, at=at)
