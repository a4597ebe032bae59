import logging
import re
from decimal import Decimal
from sqlalchemy.orm import Session

from cafe.models.common import utcnow
from cafe.models.core import Customer

logger = logging.getLogger(__name__)

_INDIAN_MOBILE = re.compile(r"^\+91[6-9]\d{9}$")


def normalize_mobile(mobile: str | None) -> str | None:
    """Bring a mobile number to +91XXXXXXXXXX where it is recognisably Indian."""
    if not mobile:
        return None
    m = re.sub(r"[\s-]", "", mobile)
    if re.fullmatch(r"[6-9]\d{9}", m):
        return "+91" + m
    if m.startswith("91") and len(m) == 12:
        return "+" + m
    return m


def is_indian_mobile(mobile: str | None) -> bool:
    return bool(mobile and _INDIAN_MOBILE.match(mobile))


def get_or_create_customer(db: Session, mobile: str, name: str, email: str = "") -> Customer:
    c = db.query(Customer).filter(Customer.mobile == mobile).first()
    if not c:
        c = Customer(mobile=mobile, name=name, email=email, total_orders=0, total_spent=0)
        db.add(c)
        db.flush()
        logger.info("New customer created: %s", mobile)
        return c
    if name and c.name != name:
        c.name = name
    if email and c.email != email:
        c.email = email
    return c


def record_order(c: Customer, total: float) -> None:
    c.total_orders = (c.total_orders or 0) + 1
    c.total_spent = Decimal(str(c.total_spent or 0)) + Decimal(str(total))
    c.last_order_at = utcnow()
