"""
Authentication schemas for Deepmetric.
"""

from pydantic import EmailStr, Field, field_validator

from .base import CamelModel


class LoginRequest(CamelModel):
    """Sign in or sign up. Identity is by email only."""
    name: str = Field("", max_length=255)
    email: EmailStr

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()
