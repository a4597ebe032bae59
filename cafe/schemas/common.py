from pydantic import BaseModel
from typing import Optional

class Msg(BaseModel):
    message: str

class LoginIn(BaseModel):
    email: str
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin_id: Optional[str] = None
    email: Optional[str] = None
