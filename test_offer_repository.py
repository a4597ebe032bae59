# test_offer_repository.py
from datetime import timedelta
import uuid

from cafe.models.common import utcnow
from cafe.models.core import BillingSettings, DailyOffer, OfferType, OrderCounter
from cafe.schemas.billing import BillingOptions, LineItem
from cafe.services.billing import compute_billing
from cafe.services.billing_settings import get_billing_settings, get_tax_settings
from cafe.services.offers import (
    active_offers, cleanup_daily_offers, get_offer_by_id, is_offer_valid, weekday,
)
from cafe.services.order_numbers import next_order_number, next_token_number


def _offer(db, **kw) -> DailyOffer:
    now = utcnow()
    data = dict(
        name=f"Offer {uuid.uuid4().hex[:6]}", description="", offer_type=OfferType.PERCENTAGE,
        discount_value=10, min_order_amount=0, applicable_categories=[], applicable_items=[],
        applicable_days=[], start_date=now - timedelta(days=1), end_date=now + timedelta(days=1),
        is_active=True, priority=0,
    )
    data.update(kw)
    o = DailyOffer(**data)
    db.add(o)
    db.commit()
    return o


def test_billing_settings_singleton(db):
    first = get_billing_settings(db)
    second = get_billing_settings(db)
    assert first.id == second.id == "default"
    assert db.query(BillingSettings).count() == 1
    tax = get_tax_settings(db)
    assert tax.tax_calculation_method in ("onSubtotal", "onDiscountedSubtotal")


def test_billing_settings_concurrent_first_insert(db, monkeypatch):
    get_billing_settings(db)
    db.expunge_all()

    # the lookup misses once, as if another request inserted the row meanwhile
    real_get = db.get
    calls = []
    def late_get(model, key, **kw):
        calls.append(key)
        return None if len(calls) == 1 else real_get(model, key, **kw)
    monkeypatch.setattr(db, "get", late_get)

    bs = get_billing_settings(db)
    assert bs.id == "default"
    assert len(calls) == 2
    assert db.query(BillingSettings).count() == 1


def test_snapshot_round_trips_lists_and_caps(db):
    o = _offer(db, max_discount_amount=40, applicable_categories=["Coffee"], applicable_items=["x1"],
               applicable_days=[1, 3])
    snap = get_offer_by_id(db, o.id)
    assert snap.max_discount_amount == 40
    assert snap.applicable_categories == ["Coffee"]
    assert snap.applicable_items == ["x1"]
    assert snap.applicable_days == [1, 3]
    assert snap.start_date.tzinfo is not None
    assert get_offer_by_id(db, "missing") is None


def test_active_offers_respect_window_weekday_and_priority(db):
    now = utcnow()
    today = weekday(now)
    low = _offer(db, priority=1)
    high = _offer(db, priority=99)
    other_day = _offer(db, applicable_days=[(today + 1) % 7])
    off = _offer(db, is_active=False)
    future = _offer(db, start_date=now + timedelta(days=2), end_date=now + timedelta(days=3))

    ids = [o.id for o in active_offers(db, at=now)]
    assert high.id in ids and low.id in ids
    assert ids.index(high.id) < ids.index(low.id)
    for o in (other_day, off, future):
        assert o.id not in ids
    assert is_offer_valid(get_offer_by_id(db, high.id), now)


def test_cleanup_removes_inactive_and_expired(db):
    now = utcnow()
    gone_inactive = _offer(db, is_active=False)
    gone_expired = _offer(db, start_date=now - timedelta(days=5), end_date=now - timedelta(days=1))
    kept = _offer(db)

    result = cleanup_daily_offers(db, at=now)
    assert result["deleted"] >= 2
    assert result["inactive"] >= 1 and result["expired"] >= 1
    assert db.get(DailyOffer, gone_inactive.id) is None
    assert db.get(DailyOffer, gone_expired.id) is None
    assert db.get(DailyOffer, kept.id) is not None

    assert cleanup_daily_offers(db, at=now)["deleted"] == 0


def test_compute_billing_reads_settings_and_offer(db):
    o = _offer(db, offer_type=OfferType.FIXED, discount_value=30, applicable_categories=["Sides"])
    bs = get_billing_settings(db)
    rates = float(bs.cgst_rate) + float(bs.sgst_rate)
    items = [LineItem(item_id="b1", category="Sides", quantity=1, price=200)]

    b = compute_billing(db, 200, items, BillingOptions(applied_offer_id=o.id))
    assert b.offer_discount_amount == 30
    assert b.applied_offer.id == o.id
    assert b.cgst_rate + b.sgst_rate == rates

    b = compute_billing(db, 200, items, BillingOptions(applied_offer_id="no-such-offer"))
    assert b.offer_discount_amount == 0
    assert b.applied_offer is None


def test_order_and_token_counters(db):
    a = next_order_number(db)
    b = next_order_number(db)
    assert len(a) == 11 and a.isdigit()
    assert int(b) == int(a) + 1

    t1 = next_token_number(db)
    t2 = next_token_number(db)
    assert t2 == t1 + 1
    db.commit()
    assert db.get(OrderCounter, "orderNumber").sequence >= 2
