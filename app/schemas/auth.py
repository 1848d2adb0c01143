from pydantic import BaseModel, Field
from typing import Optional


class AdminLogin(BaseModel):
    """Schema for admin login"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    token: str
    username: str
    email: Optional[str] = None
    token_type: str = "bearer"


class AdminProfile(BaseModel):
    username: str
    email: Optional[str] = None

    class Config:
        from_attributes = True
