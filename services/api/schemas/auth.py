"""
Pydantic schemas for signup / login.
"""
from typing import Optional
from pydantic import BaseModel, Field


class SignupIn(BaseModel):
    """Signup payload. Blank fields are rejected by the router with 400."""
    email: Optional[str] = Field(None, max_length=320, description="Login email")
    password: Optional[str] = Field(None, max_length=256, description="Plain password")
    name: Optional[str] = Field(None, max_length=200, description="Display name")


class LoginIn(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=256)


class UserOut(BaseModel):
    id: str
    email: str
    name: Optional[str] = None


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
