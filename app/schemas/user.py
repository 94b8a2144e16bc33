from pydantic import BaseModel, EmailStr
from datetime import datetime
from typing import Optional
from enum import Enum


class UserState(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    BLOCKED = "blocked"


class UserBase(BaseModel):
    name: str
    email: EmailStr


class UserResponse(UserBase):
    id: str
    state: UserState
    created_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class RegisterResponse(BaseModel):
    user: UserResponse
    message: str


class MemberResponse(BaseModel):
    id: str
    name: str
    email: str
    created_at: Optional[datetime] = None
    joined_at: Optional[datetime] = None


class UserStateRequest(BaseModel):
    user_id: str
