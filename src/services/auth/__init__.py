"""Authentication services package."""

from src.services.auth.service import AuthService

__all__ = ["AuthService"]
