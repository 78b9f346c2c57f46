"""Pydantic schemas for admin Auth."""

from pydantic import BaseModel


class AdminRead(BaseModel):
    username: str
    role: str = "admin"


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: AdminRead
