import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from sqlalchemy.orm import Session
from cafe.db import get_db
from cafe.models.core import Admin
from cafe.util.security import decode_token

logger = logging.getLogger(__name__)

auth_scheme = HTTPBearer(auto_error=False)

def require_auth(creds: HTTPAuthorizationCredentials | None = Depends(auth_scheme)) -> str:
    if not creds:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authorization token missing or malformed")
    try:
        return decode_token(creds.credentials)
    except jwt.InvalidTokenError as e:
        logger.warning("JWT verification error: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

def require_admin(sub: str = Depends(require_auth), db: Session = Depends(get_db)) -> str:
    # token may outlive the admin account
    if not db.get(Admin, sub):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin not found")
    return sub
