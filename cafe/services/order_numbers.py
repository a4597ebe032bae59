from datetime import datetime
from zoneinfo import ZoneInfo
from sqlalchemy.orm import Session

from cafe.config import settings
from cafe.models.common import as_aware, utcnow
from cafe.models.core import OrderCounter


def _bump(db: Session, key: str) -> int:
    c = db.get(OrderCounter, key, with_for_update=True)
    if not c:
        c = OrderCounter(id=key, sequence=0)
        db.add(c)
    c.sequence = (c.sequence or 0) + 1
    db.flush()
    return c.sequence


def next_order_number(db: Session) -> str:
    """Global sequence, zero padded to 11 digits ("00000000042")."""
    return f"{_bump(db, 'orderNumber'):011d}"


def next_token_number(db: Session, at: datetime | None = None) -> int:
    """Counter token; starts again from 1 every local day."""
    day = as_aware(at or utcnow()).astimezone(ZoneInfo(settings.TZ)).date()
    return _bump(db, f"token_{day.isoformat()}")
