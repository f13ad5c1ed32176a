"""
API error hierarchy.

Every failure that comes out of the request layer is an ApiError, so a
screen can catch one type, show `user_message()` and keep what it had.
"""

from typing import Any, Optional


class ApiError(Exception):
    """Base exception for back-office API calls."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)

    def user_message(self, default: str = "An error occurred") -> str:
        """The server's `message` if it sent one, else ours, else `default`."""
        if isinstance(self.payload, dict):
            server_message = self.payload.get("message")
            if isinstance(server_message, str) and server_message.strip():
                return server_message
        return self.message or default


class NetworkError(ApiError):
    """The request never got a response (DNS, refused, timeout...)."""
    pass


class AuthenticationError(ApiError):
    """401 - missing, expired or revoked token, or bad credentials."""
    pass


class PermissionDeniedError(ApiError):
    """403 - signed in, but the role may not do this."""
    pass


class NotFoundError(ApiError):
    """404."""
    pass


class RequestValidationError(ApiError):
    """
    422 - the server rejected the submitted fields.

    `field_errors` maps field name to messages, Laravel style.
    """

    def __init__(
        self,
        message: str,
        field_errors: Optional[dict[str, list[str]]] = None,
        status_code: Optional[int] = 422,
        payload: Any = None,
    ):
        super().__init__(message, status_code=status_code, payload=payload)
        self.field_errors = field_errors or {}

    def first_error(self, field: str) -> Optional[str]:
        messages = self.field_errors.get(field) or []
        return messages[0] if messages else None


class ServerError(ApiError):
    """5xx, or any other status we have no better name for."""
    pass


class ResponseSchemaError(ApiError):
    """The server answered 2xx but the body is not what we expected."""
    pass


def error_for_status(status_code: int, payload: Any, fallback: str) -> ApiError:
    """Map an HTTP error response to the matching ApiError subclass."""
    message = fallback
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        message = payload["message"] or fallback

    if status_code == 401:
        return AuthenticationError(message, status_code, payload)
    if status_code == 403:
        return PermissionDeniedError(message, status_code, payload)
    if status_code == 404:
        return NotFoundError(message, status_code, payload)
    if status_code == 422:
        raw = payload.get("errors") if isinstance(payload, dict) else None
        field_errors: dict[str, list[str]] = {}
        if isinstance(raw, dict):
            for field, messages in raw.items():
                if isinstance(messages, str):
                    messages = [messages]
                field_errors[str(field)] = [str(m) for m in messages or []]
        return RequestValidationError(message, field_errors, status_code, payload)
    return ServerError(message, status_code, payload)
