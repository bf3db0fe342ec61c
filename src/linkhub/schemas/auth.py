from pydantic import BaseModel
from typing import Optional


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    username: Optional[str] = None
    display_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class CurrentUserResponse(BaseModel):
    id: str
    email: str
    username: Optional[str]
    display_name: Optional[str]


class SessionResponse(BaseModel):
    success: bool = True
    token: str
    user: CurrentUserResponse
