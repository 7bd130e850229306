"""
Request / response schemas for the auth endpoints.

Fields are optional on purpose: presence is checked by the flows so a
missing field answers 400 with the flow's own message instead of a
generic validation error.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(_Request):
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=128)


class LoginRequest(_Request):
    email: Optional[str] = None
    password: Optional[str] = None


class GoogleLoginRequest(_Request):
    token_id: Optional[str] = Field(default=None, alias="tokenId")


class ForgotPasswordRequest(_Request):
    email: Optional[str] = None


class ResetPasswordRequest(_Request):
    token: Optional[str] = None
    new_password: Optional[str] = Field(default=None, alias="newPassword", max_length=128)


class TokenResponse(BaseModel):
    message: str
    token: str


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


class IdentityResponse(BaseModel):
    user_id: str
    issued_at: int
    expires_at: int
