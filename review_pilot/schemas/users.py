"""Pydantic schemas for accounts and authentication."""

import re
from datetime import datetime

from pydantic import EmailStr, Field, field_validator, model_validator

from ..models import SubscriptionStatus, UserRole
from .base import ReviewPilotBaseModel

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


class SignupRequest(ReviewPilotBaseModel):
    """Create an account with email and password."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=2, max_length=50)
    confirm_password: str | None = Field(default=None, alias="confirmPassword")

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        if not PASSWORD_PATTERN.match(value):
            raise ValueError(
                "Password must contain at least one uppercase letter, "
                "one lowercase letter, and one number"
            )
        return value

    @model_validator(mode="after")
    def passwords_match(self) -> "SignupRequest":
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords don't match")
        return self


class LoginRequest(ReviewPilotBaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(ReviewPilotBaseModel):
    """Public view of a user. Never carries the password hash."""

    id: int
    email: str
    name: str
    role: UserRole
    subscription_status: SubscriptionStatus
    trial_end_date: datetime | None = None


class SignupResponse(ReviewPilotBaseModel):
    success: bool = True
    message: str = "Account created successfully"
    user: UserResponse
    organization_id: int | None = Field(default=None, alias="organizationId")
    token: str


class LoginResponse(ReviewPilotBaseModel):
    success: bool = True
    message: str = "Login successful"
    user: UserResponse
    token: str


class MeResponse(ReviewPilotBaseModel):
    user: UserResponse
    organization_id: int = Field(alias="organizationId")
    trial_active: bool = Field(alias="trialActive")
    trial_days_remaining: int = Field(alias="trialDaysRemaining")
    needs_upgrade: bool = Field(alias="needsUpgrade")
