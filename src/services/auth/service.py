"""
Authentication Service

Owns the session lifecycle:

    uninitialized -> hydrating -> authenticated | unauthenticated

- hydrate(): restore a persisted token and confirm it with GET /user
- login(): exchange credentials for a token and persist it
- logout(): best-effort server revoke; the local token is ALWAYS cleared
- refresh_profile(): re-read the signed-in user

Password recovery (forgot -> verify OTP -> reset) lives here too since
it runs against the same public endpoints as login.

DESIGN DECISION: The service watches the TokenSession. When the API
client clears the token after a 401, the service drops to
unauthenticated on its own; no screen has to notice first.
"""

from typing import Optional

import structlog

from src.audit import AuditLogger
from src.models.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    SessionState,
    User,
    VerifyOtpRequest,
)
from src.models.common import ApiMessage
from src.services.api import ApiClient, ApiError
from src.services.storage import StorageError
from src.validation import (
    FormValidationError,
    require_form,
    validate_email,
    validate_otp,
    validate_required,
)


logger = structlog.get_logger(__name__)


class AuthService:
    """Session state machine on top of ApiClient and its TokenSession."""

    def __init__(
        self,
        client: ApiClient,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._client = client
        self._session = client.session
        self._audit_logger = audit_logger
        self._state = SessionState.UNINITIALIZED
        self._user: Optional[User] = None
        self._session.subscribe(self._on_token_changed)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def initializing(self) -> bool:
        return self._state in (SessionState.UNINITIALIZED, SessionState.HYDRATING)

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED and self._session.has_token

    def _on_token_changed(self, token: Optional[str]) -> None:
        if token is None and self._state == SessionState.AUTHENTICATED:
            logger.info("session_ended", reason="token_cleared")
            self._state = SessionState.UNAUTHENTICATED
            self._user = None

    async def hydrate(self) -> SessionState:
        """
        Restore the session saved by a previous run.

        Any failure (unreadable storage, rejected token, server down)
        clears the token and ends in unauthenticated. Never raises.
        """
        self._state = SessionState.HYDRATING
        try:
            token = await self._session.load()
        except StorageError as e:
            logger.error("session_load_failed", error=str(e))
            token = None

        if not token:
            self._state = SessionState.UNAUTHENTICATED
            return self._state

        try:
            user = await self._client.get_model("/user", User)
        except ApiError as e:
            logger.warning("session_restore_failed", error=e.message, status_code=e.status_code)
            await self._session.clear_token()
            self._user = None
            self._state = SessionState.UNAUTHENTICATED
            if self._audit_logger:
                await self._audit_logger.log_session_expired(error_message=e.message)
            return self._state

        self._user = user
        self._state = SessionState.AUTHENTICATED
        logger.info("session_restored", username=user.username)
        if self._audit_logger:
            await self._audit_logger.log_session_restored(username=user.username)
        return self._state

    async def login(self, username: str, password: str, remember: bool = False) -> User:
        """
        Sign in and persist the token.

        Raises:
            FormValidationError: Username or password blank (no request sent)
            ApiError: The server refused the credentials or could not be reached
        """
        require_form([
            (username, "username", [validate_required]),
            (password, "password", [validate_required]),
        ])
        body = LoginRequest(username=username, password=password, remember=remember)

        try:
            response: LoginResponse = await self._client.post_model(
                "/login", LoginResponse, json=body.model_dump(),
            )
        except ApiError as e:
            logger.warning("login_failed", username=body.username, status_code=e.status_code)
            if self._audit_logger:
                await self._audit_logger.log_login_failed(
                    username=body.username,
                    error_message=e.user_message("Unable to log in. Please double-check your credentials."),
                    status_code=e.status_code,
                )
            raise

        try:
            await self._session.set_token(response.token)
        except StorageError as e:
            # the token is live in memory; only the next app start loses it
            logger.error("token_persist_failed", username=response.user.username, error=str(e))
        self._user = response.user
        self._state = SessionState.AUTHENTICATED
        logger.info("login_succeeded", username=response.user.username, role=response.user.role)
        if self._audit_logger:
            await self._audit_logger.log_login_succeeded(
                username=response.user.username,
                role=response.user.role,
            )
        return response.user

    async def logout(self) -> bool:
        """
        Sign out. Returns True if the server confirmed the revoke.

        The local token is cleared even when the revoke fails, so the
        user is never trapped in a signed-in state.
        """
        username = self._user.username if self._user else None
        revoked = False
        error_message = None
        try:
            if self._session.has_token:
                await self._client.post("/logout")
                revoked = True
        except ApiError as e:
            error_message = e.message
            logger.warning("logout_revoke_failed", error=e.message, status_code=e.status_code)
        finally:
            await self._session.clear_token()
            self._user = None
            self._state = SessionState.UNAUTHENTICATED

        if self._audit_logger:
            await self._audit_logger.log_logout(
                username=username,
                revoked=revoked,
                error_message=error_message,
            )
        return revoked

    async def refresh_profile(self) -> Optional[User]:
        """Re-read the signed-in user. No-op without a token."""
        if not self._session.has_token:
            return None
        self._user = await self._client.get_model("/user", User)
        return self._user

    async def request_password_reset(self, email: str) -> str:
        """Send the OTP email. Returns the server's message."""
        require_form([(email, "email", [validate_required, validate_email])])
        body = ForgotPasswordRequest(email=email)
        response = await self._client.post_model("/forgot-password", ApiMessage, json=body.model_dump())
        if self._audit_logger:
            await self._audit_logger.log_password_reset(email=body.email, completed=False)
        return response.message

    async def verify_otp(self, email: str, otp: str) -> str:
        require_form([
            (email, "email", [validate_required, validate_email]),
            (otp, "otp", [validate_required, validate_otp]),
        ])
        body = VerifyOtpRequest(email=email, otp=otp)
        response = await self._client.post_model("/verify-otp", ApiMessage, json=body.model_dump())
        return response.message

    async def reset_password(
        self,
        email: str,
        password: str,
        password_confirmation: str,
    ) -> str:
        """
        Set the new password once the OTP has been verified.

        Raises:
            FormValidationError: Blank fields or the passwords differ
            ApiError: The server rejected the reset
        """
        require_form([
            (email, "email", [validate_required, validate_email]),
            (password, "password", [validate_required]),
            (password_confirmation, "password_confirmation", [validate_required]),
        ])
        if password != password_confirmation:
            raise FormValidationError(
                "Passwords do not match",
                {"password_confirmation": "Passwords do not match"},
            )
        body = ResetPasswordRequest(
            email=email,
            password=password,
            password_confirmation=password_confirmation,
        )
        response = await self._client.post_model("/reset-password", ApiMessage, json=body.model_dump())
        if self._audit_logger:
            await self._audit_logger.log_password_reset(email=body.email, completed=True)
        return response.message
