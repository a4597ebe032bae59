import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from cafe.schemas.common import LoginIn, Msg, Token
from cafe.util.security import create_token, hash_pw, verify_pw
from cafe.models.core import Admin
from cafe.db import get_db
from cafe.deps import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

MIN_PASSWORD_LEN = 8

@router.post("/login", response_model=Token)
def login(body: LoginIn, db: Session = Depends(get_db)):
    if not body.email or not body.password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    admin = db.query(Admin).filter(Admin.email == body.email.strip().lower()).first()
    if not admin or not verify_pw(admin.pass_hash, body.password):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return Token(access_token=create_token(admin.id), admin_id=admin.id, email=admin.email)

@router.post("/change-password", response_model=Msg)
def change_password(current_password: str, new_password: str,
                    db: Session = Depends(get_db), sub: str = Depends(require_admin)):
    if len(new_password) < MIN_PASSWORD_LEN:
        raise HTTPException(status_code=400, detail="New password must be at least 8 characters long")
    admin = db.get(Admin, sub)
    if not verify_pw(admin.pass_hash, current_password):
        raise HTTPException(status_code=401, detail="Current password is incorrect")
    admin.pass_hash = hash_pw(new_password)
    db.commit()
    logger.info("Password changed for admin %s", admin.email)
    return Msg(message="Password changed successfully")
