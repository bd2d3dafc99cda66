from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class EmailNormalized(BaseModel):
    """Emails are stored and looked up lowercased."""

    @field_validator("email", check_fields=False)
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.strip().lower()


class RegisterRequest(EmailNormalized):
    email: EmailStr
    password: str = Field(..., min_length=1)
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)
    company: Optional[str] = None


class LoginRequest(EmailNormalized):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdateAccountRequest(EmailNormalized):
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)
    email: EmailStr
    company: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    currentPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=1)


class PreferencesRequest(BaseModel):
    preferences: Dict[str, Any]


class CheckoutRequest(BaseModel):
    accountType: str = Field(..., min_length=1)
