import json
import logging
from sqlalchemy.orm import Session
from cafe.models.core import AuditLog

logger = logging.getLogger(__name__)

def audit(db: Session, actor_user_id: str, entity: str, entity_id: str,
          action: str, before: dict | None = None, after: dict | None = None):
    entry = AuditLog(
        actor_user_id=actor_user_id,
        entity=entity, entity_id=entity_id,
        action=action,
        before=json.dumps(before, default=str) if before else None,
        after=json.dumps(after, default=str) if after else None,
    )
    db.add(entry)
    logger.info("audit %s %s %s by %s", action, entity, entity_id, actor_user_id)
