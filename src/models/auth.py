"""
Authentication and account schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.models.common import ApiModel


class UserRole(str, Enum):
    """Roles the back office hands out."""
    ADMIN = "admin"
    LAB_STAFF = "lab_staff"
    CASHIER = "cashier"

    @property
    def label(self) -> str:
        return {
            UserRole.ADMIN: "Admin",
            UserRole.LAB_STAFF: "Lab Staff",
            UserRole.CASHIER: "Cashier",
        }[self]


class SessionState(str, Enum):
    """
    Lifecycle of the authenticated session.

    uninitialized -> hydrating -> authenticated | unauthenticated
    """
    UNINITIALIZED = "uninitialized"
    HYDRATING = "hydrating"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class User(ApiModel):
    """The signed-in user as returned by `GET /user`."""

    id: int
    name: str
    username: str
    email: Optional[str] = None
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def can_reconcile(self) -> bool:
        """Cashiers and admins may submit a cash count."""
        return self.role in (UserRole.ADMIN.value, UserRole.CASHIER.value)


class LoginRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    remember: bool = False


class LoginResponse(ApiModel):
    token: str = Field(..., min_length=1)
    user: User


class ForgotPasswordRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=3)


class VerifyOtpRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=3)
    otp: str = Field(..., pattern=r"^\d{6}$")


class ResetPasswordRequest(BaseModel):
    """
    Final step of password recovery.

    The OTP has already been verified at this point; the API expects
    the literal token "verified".
    """

    token: str = "verified"
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    password_confirmation: str = Field(..., min_length=1)

    @model_validator(mode='after')
    def passwords_match(self) -> 'ResetPasswordRequest':
        if self.password != self.password_confirmation:
            raise ValueError("Passwords do not match")
        return self


class StaffAccount(ApiModel):
    """A row on the Users admin screen."""

    id: int
    name: str
    username: str
    email: Optional[str] = None
    role: str
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def role_label(self) -> str:
        try:
            return UserRole(self.role).label
        except ValueError:
            return self.role


class StaffAccountForm(BaseModel):
    """Create payload for `POST /users`. All fields are required."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    username: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
    role: UserRole

    @field_validator('email')
    @classmethod
    def email_shape(cls, v: str) -> str:
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("Please enter a valid email address")
        return v


class StaffAccountUpdate(BaseModel):
    """Update payload for `PUT /users/{id}`; a blank password keeps the old one."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    username: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    role: UserRole
    password: Optional[str] = None

    @field_validator('password')
    @classmethod
    def blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None
