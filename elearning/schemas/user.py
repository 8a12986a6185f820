"""
Pydantic schemas for authentication and profile endpoints
"""
from datetime import datetime
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional


class UserRegister(BaseModel):
    """Registration payload; field rules are enforced by the User model"""
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None
    age: Optional[int] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    about: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class GoogleLoginRequest(BaseModel):
    token: Optional[str] = None


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    age: Optional[int] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    about: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UserResponse(BaseModel):
    """Public user representation, never includes the password"""
    id: int
    email: str
    full_name: str
    age: Optional[int] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    about: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class TokenResponse(BaseModel):
    access_token: str


class GoogleLoginResponse(BaseModel):
    access_token: str = Field(alias="access_token")
    id: int
    email: str
    full_name: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProfileUpdateResponse(BaseModel):
    message: str
    data: UserResponse


class MessageResponse(BaseModel):
    message: str
