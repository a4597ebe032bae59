import logging
import math
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cafe.db import get_db
from cafe.deps import require_admin
from cafe.models.common import as_aware, to_utc, utcnow
from cafe.models.core import (
    MenuCategory, MenuItem, Order, OrderItem, OrderSource, OrderStatus,
    PaymentMethod, PaymentStatus, PriceType,
)
from cafe.schemas.billing import AppliedOfferSummary, BillingBreakdown, BillingOptions, LineItem
from cafe.schemas.orders import OrderIn, OrderItemOut, OrderOut, OrderStatusIn, PrepTimeIn
from cafe.services.billing import compute_billing
from cafe.services.customers import (
    get_or_create_customer, is_indian_mobile, normalize_mobile, record_order,
)
from cafe.services.order_numbers import next_order_number, next_token_number

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

MAX_ORDER_NUMBER_ATTEMPTS = 20


def _f(x) -> float:
    return float(x or 0)

def _ts(dt: datetime | None) -> str | None:
    return as_aware(dt).isoformat() if dt else None


def _resolve_price(m: MenuItem, wanted: str | None) -> tuple[float, PriceType]:
    """Unit price for a menu item; coffee honours the requested blend when it is priced."""
    if m.category == MenuCategory.COFFEE:
        robusta, blend = _f(m.price_robusta_special), _f(m.price_blend)
        if wanted == PriceType.ROBUSTA_SPECIAL.value and robusta > 0:
            price, ptype = robusta, PriceType.ROBUSTA_SPECIAL
        elif wanted == PriceType.BLEND.value and blend > 0:
            price, ptype = blend, PriceType.BLEND
        elif robusta > 0:
            price, ptype = robusta, PriceType.ROBUSTA_SPECIAL
        else:
            price, ptype = blend, PriceType.BLEND
        if price <= 0:
            raise HTTPException(400, detail=(
                f'Item "{m.name}" has no valid price set. '
                "Please set either Blend or Robusta Special price."))
        return price, ptype

    price = _f(m.price)
    if price <= 0:
        raise HTTPException(400, detail=f'Item "{m.name}" has no price set.')
    return price, PriceType.STANDARD


def estimated_prep_time(lines: list[OrderItem]) -> int:
    """Items are made in parallel: slowest item plus a minute per three units ordered."""
    if not lines:
        return 0
    slowest = max((l.prep_time or 5) for l in lines)
    return slowest + math.ceil(sum(l.quantity for l in lines) / 3)


def _billing_of(o: Order) -> BillingBreakdown:
    applied = None
    if o.applied_offer_id:
        applied = AppliedOfferSummary(id=o.applied_offer_id, name=o.applied_offer_name or "",
                                      description=o.applied_offer_description or "")
    return BillingBreakdown(
        subtotal=_f(o.subtotal),
        discount_type=o.discount_type or "",
        discount_value=_f(o.discount_value),
        discount_amount=_f(o.discount_amount),
        applied_offer=applied,
        offer_discount_amount=_f(o.offer_discount_amount),
        discounted_subtotal=_f(o.discounted_subtotal),
        cgst_rate=_f(o.cgst_rate),
        sgst_rate=_f(o.sgst_rate),
        cgst_amount=_f(o.cgst_amount),
        sgst_amount=_f(o.sgst_amount),
        tax=_f(o.tax),
        total=_f(o.total),
    )


def _order_out(db: Session, o: Order) -> OrderOut:
    lines = db.query(OrderItem).filter(OrderItem.order_id == o.id).order_by(OrderItem.created_at).all()
    return OrderOut(
        id=o.id,
        order_number=o.order_number,
        token_number=o.token_number or 0,
        table_number=o.table_number or "",
        order_source=o.order_source.value,
        payment_status=o.payment_status.value,
        payment_method=o.payment_method.value,
        status=o.status.value,
        customer_id=o.customer_id,
        customer_name=o.customer_name or "",
        customer_mobile=o.customer_mobile or "",
        customer_email=o.customer_email or "",
        notes=o.notes or "",
        items=[
            OrderItemOut(item_id=l.item_id, name=l.name, category=l.category, quantity=l.quantity,
                         price=_f(l.price), price_type=l.price_type.value, prep_time=l.prep_time or 0)
            for l in lines
        ],
        billing=_billing_of(o),
        applied_offer_id=o.applied_offer_id,
        estimated_prep_time=o.estimated_prep_time or 0,
        receipt_generated=bool(o.receipt_generated),
        completed_at=_ts(o.completed_at),
        created_at=_ts(o.created_at),
    )


def _get_order(db: Session, order_id: str) -> Order:
    o = db.get(Order, order_id)
    if not o:
        raise HTTPException(404, detail="Order not found")
    return o


@router.get("/", response_model=list[OrderOut])
def list_orders(
    status: str | None = None,
    table_number: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    db: Session = Depends(get_db),
    sub: str = Depends(require_admin),
):
    """
    Orders the kitchen should see: paid ones, plus "pay at counter" orders
    still waiting for the cash to be confirmed. Newest first, at most 100.
    """
    q = db.query(Order).filter(or_(
        Order.payment_status == PaymentStatus.PAID,
        and_(Order.payment_status == PaymentStatus.PENDING, Order.payment_method == PaymentMethod.CASH),
    ))
    if status:
        try:
            q = q.filter(Order.status == OrderStatus(status))
        except ValueError:
            raise HTTPException(400, detail="Invalid status")
    if table_number:
        q = q.filter(Order.table_number == table_number)
    if start_date:
        q = q.filter(Order.created_at >= to_utc(start_date))
    if end_date:
        q = q.filter(Order.created_at <= to_utc(end_date))

    rows = q.order_by(Order.created_at.desc()).limit(100).all()
    return [_order_out(db, o) for o in rows]


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, db: Session = Depends(get_db)):
    return _order_out(db, _get_order(db, order_id))


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(body: OrderIn, db: Session = Depends(get_db)):
    logger.info("Order request received: source=%s items=%d", body.order_source, len(body.items))

    if not body.items:
        raise HTTPException(400, detail="Items are required")
    if not body.customer_mobile.strip():
        raise HTTPException(400, detail="Mobile number is required")
    if not body.customer_name.strip():
        raise HTTPException(400, detail="Name is required")

    mobile = normalize_mobile(body.customer_mobile)
    if not is_indian_mobile(mobile):
        raise HTTPException(400, detail="Please provide a valid Indian mobile number")

    name = body.customer_name.strip()
    email = (body.customer_email or "").strip().lower()

    # price every line from the menu; client prices are never trusted
    lines: list[OrderItem] = []
    billing_items: list[LineItem] = []
    subtotal = 0.0
    for li in body.items:
        m = db.get(MenuItem, li.item_id)
        if not m:
            raise HTTPException(400, detail=f"Item {li.item_id} not found")
        price, ptype = _resolve_price(m, li.price_type)
        lines.append(OrderItem(item_id=m.id, name=m.name, category=m.category.value, quantity=li.quantity,
                               price=price, price_type=ptype, prep_time=m.prep_time or 5))
        billing_items.append(LineItem(item_id=m.id, category=m.category.value, quantity=li.quantity, price=price))
        subtotal += price * li.quantity

    bill = compute_billing(db, subtotal, billing_items, BillingOptions(
        discount_type=body.discount_type,
        discount_value=body.discount_value,
        applied_offer_id=body.applied_offer_id,
    ))

    customer = get_or_create_customer(db, mobile, name, email)

    order_number = None
    for _ in range(MAX_ORDER_NUMBER_ATTEMPTS):
        candidate = next_order_number(db)
        if not db.query(Order.id).filter(Order.order_number == candidate).first():
            order_number = candidate
            break
        logger.warning("Order number %s already exists, trying next number", candidate)
    if not order_number:
        raise HTTPException(409, detail="Failed to generate unique order number after multiple attempts")

    source = OrderSource(body.order_source)
    if source == OrderSource.COUNTER:
        pay_status, pay_method = PaymentStatus.PAID, PaymentMethod.CASH
    elif body.payment_method == "counter":
        pay_status, pay_method = PaymentStatus.PENDING, PaymentMethod.CASH
    else:
        pay_status, pay_method = PaymentStatus.PENDING, PaymentMethod.RAZORPAY

    o = Order(
        order_number=order_number,
        token_number=next_token_number(db),
        table_number=body.table_number.strip(),
        order_source=source,
        payment_status=pay_status,
        payment_method=pay_method,
        status=OrderStatus.PENDING,
        customer_id=customer.id,
        customer_name=name,
        customer_mobile=mobile,
        customer_email=email or customer.email or "",
        notes=body.notes.strip(),
        subtotal=bill.subtotal,
        discount_type=bill.discount_type,
        discount_value=bill.discount_value,
        discount_amount=bill.discount_amount,
        applied_offer_id=bill.applied_offer.id if bill.applied_offer else None,
        applied_offer_name=bill.applied_offer.name if bill.applied_offer else None,
        applied_offer_description=bill.applied_offer.description if bill.applied_offer else None,
        offer_discount_amount=bill.offer_discount_amount,
        discounted_subtotal=bill.discounted_subtotal,
        cgst_rate=bill.cgst_rate,
        sgst_rate=bill.sgst_rate,
        cgst_amount=bill.cgst_amount,
        sgst_amount=bill.sgst_amount,
        tax=bill.tax,
        total=bill.total,
        estimated_prep_time=estimated_prep_time(lines),
    )
    db.add(o)
    try:
        db.flush()
        for l in lines:
            l.order_id = o.id
            db.add(l)
        record_order(customer, bill.total)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, detail="Order number already exists. Please try again.")

    db.refresh(o)
    logger.info("Order %s created for customer %s (total %.2f)", o.order_number, mobile, bill.total)
    return _order_out(db, o)


@router.put("/{order_id}/status", response_model=OrderOut)
def update_status(order_id: str, body: OrderStatusIn, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    try:
        wanted = OrderStatus(body.status)
    except ValueError:
        raise HTTPException(400, detail="Invalid status")
    o = _get_order(db, order_id)
    o.status = wanted
    if wanted == OrderStatus.COMPLETED:
        o.completed_at = utcnow()
    db.commit(); db.refresh(o)
    return _order_out(db, o)


@router.put("/{order_id}/confirm-payment", response_model=OrderOut)
def confirm_payment(order_id: str, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    o = _get_order(db, order_id)
    if o.payment_status != PaymentStatus.PENDING or o.payment_method != PaymentMethod.CASH:
        raise HTTPException(400, detail="This order does not require payment confirmation")
    o.payment_status = PaymentStatus.PAID
    db.commit(); db.refresh(o)
    return _order_out(db, o)


@router.put("/{order_id}/estimated-prep-time", response_model=OrderOut)
def update_prep_time(order_id: str, body: PrepTimeIn, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    if body.estimated_prep_time is None:
        raise HTTPException(400, detail="Estimated prep time is required")
    if body.estimated_prep_time < 0:
        raise HTTPException(400, detail="Estimated prep time must be a non-negative number")
    o = _get_order(db, order_id)
    o.estimated_prep_time = body.estimated_prep_time
    db.commit(); db.refresh(o)
    return _order_out(db, o)


@router.put("/{order_id}/receipt", response_model=OrderOut)
def mark_receipt(order_id: str, db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    o = _get_order(db, order_id)
    o.receipt_generated = True
    db.commit(); db.refresh(o)
    return _order_out(db, o)


@router.get("/{order_id}/receipt", response_model=OrderOut)
def get_receipt(order_id: str, db: Session = Depends(get_db)):
    return _order_out(db, _get_order(db, order_id))
