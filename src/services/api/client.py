"""
Back-office API client

A thin async wrapper over httpx that:
1. Reads the bearer token from the injected TokenSession before every call
2. Sends and expects JSON (`Accept: application/json` on everything)
3. Turns every failure into an ApiError subclass
4. Clears the token when the server rejects it with 401

DESIGN DECISION: 401 handling mirrors the mobile app. Only a request
that actually carried a token can clear it, only if that token is still
the current one, and at most once per cooldown window, so a burst of
concurrent 401s doesn't log the user out repeatedly. There is no
automatic token refresh; the API has no refresh endpoint.
"""

import time
from functools import lru_cache
from typing import Any, Optional

import httpx
import structlog
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from src.audit import AuditLogger
from src.config import ApiSettings
from src.services.api.errors import (
    ApiError,
    AuthenticationError,
    NetworkError,
    ResponseSchemaError,
    ServerError,
    error_for_status,
)
from src.services.session import TokenSession


logger = structlog.get_logger(__name__)

# Endpoints that are called before there is a token
PUBLIC_ENDPOINTS = ("/login", "/register", "/forgot-password", "/verify-otp", "/reset-password")


@lru_cache(maxsize=None)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def parse_payload(type_: Any, payload: Any, endpoint: str) -> Any:
    """
    Validate a decoded JSON payload against a schema.

    Raises:
        ResponseSchemaError: If the payload does not match
    """
    try:
        return _adapter(type_).validate_python(payload)
    except PydanticValidationError as e:
        logger.error(
            "response_schema_mismatch",
            endpoint=endpoint,
            errors=e.errors(include_url=False)[:5],
        )
        raise ResponseSchemaError(
            f"Unexpected response from {endpoint} ({e.error_count()} invalid field(s))",
        ) from e


class ApiClient:
    """
    Authenticated JSON client for the back-office REST API.

    Use as an async context manager, or call `aclose()` when done.
    """

    def __init__(
        self,
        session: TokenSession,
        settings: Optional[ApiSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._session = session
        self._settings = settings or ApiSettings()
        self._audit_logger = audit_logger
        self._last_token_clear: Optional[float] = None
        self._http = httpx.AsyncClient(
            base_url=self._settings.base_url,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=self._settings.timeout_seconds,
            transport=transport,
        )

    @property
    def session(self) -> TokenSession:
        return self._session

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @staticmethod
    def _is_public(path: str) -> bool:
        return any(path.startswith(endpoint) for endpoint in PUBLIC_ENDPOINTS)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            if response.is_success:
                raise ResponseSchemaError(
                    f"Expected JSON from {response.request.url.path}",
                    status_code=response.status_code,
                )
            return {"raw": response.text[:500]}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
        handle_unauthorized: bool = True,
    ) -> Any:
        """
        Send one request and return the decoded JSON body (None if empty).

        Args:
            method: HTTP method
            path: Endpoint path relative to the API base URL, e.g. "/patients"
            params: Query parameters; None values are dropped
            json: JSON body
            handle_unauthorized: Clear the token on 401 (see module docstring)

        Raises:
            ApiError: Any failure, as the most specific subclass
        """
        token = self._session.get_token()
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        elif not self._is_public(path):
            logger.warning("request_without_token", method=method, path=path)

        query = {k: v for k, v in (params or {}).items() if v is not None}

        logger.debug("api_request", method=method, path=path, token_attached=bool(token))

        try:
            response = await self._http.request(
                method,
                path,
                params=query or None,
                json=json,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            logger.warning("api_request_timeout", method=method, path=path)
            error = NetworkError("The server took too long to respond")
            await self._audit_error(method, path, error)
            raise error from e
        except httpx.TransportError as e:
            logger.warning("api_request_unreachable", method=method, path=path, error=str(e))
            error = NetworkError(f"Could not reach the server: {e}")
            await self._audit_error(method, path, error)
            raise error from e

        payload = self._decode(response)
        if response.is_success:
            return payload

        error = error_for_status(
            response.status_code,
            payload,
            fallback=f"Request failed with status {response.status_code}",
        )
        logger.warning(
            "api_request_failed",
            method=method,
            path=path,
            status_code=response.status_code,
            message=error.message,
        )

        if isinstance(error, ServerError):
            await self._audit_error(method, path, error)
        if isinstance(error, AuthenticationError) and handle_unauthorized:
            await self.handle_unauthorized(path, sent_token=token)

        raise error

    async def _audit_error(self, method: str, path: str, error: ApiError) -> None:
        if self._audit_logger:
            await self._audit_logger.log_api_error(
                method=method,
                path=path,
                status_code=error.status_code,
                error_message=error.message,
            )

    async def handle_unauthorized(self, path: str, sent_token: Optional[str]) -> bool:
        """
        React to a 401. Returns True if the session token was cleared.
        """
        if not sent_token:
            logger.warning("unauthorized_without_token", path=path)
            return False
        if self._session.get_token() != sent_token:
            # the token changed while this request was in flight
            return False

        now = time.monotonic()
        cooldown = self._settings.unauthorized_cooldown_seconds
        if self._last_token_clear is not None and now - self._last_token_clear < cooldown:
            logger.warning("unauthorized_clear_skipped", path=path, reason="cooldown")
            return False

        self._last_token_clear = now
        logger.warning("unauthorized_token_cleared", path=path)
        await self._session.clear_token()
        if self._audit_logger:
            await self._audit_logger.log_token_cleared(path=path)
        return True

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def get_with_retry(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        retries: Optional[int] = None,
        delay: Optional[float] = None,
    ) -> Any:
        """
        GET that retries a 401 while the session still holds a token.

        Right after sign-in a lookup can race the token being applied;
        waiting briefly and trying again is usually enough. The token is
        only cleared if the final attempt is still rejected.
        """
        retries = self._settings.retry_attempts if retries is None else retries
        delay = self._settings.retry_delay_seconds if delay is None else delay
        sent_token = self._session.get_token()

        def _retryable(exc: BaseException) -> bool:
            return isinstance(exc, AuthenticationError) and self._session.has_token

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(retries + 1),
                wait=wait_fixed(delay),
                retry=retry_if_exception(_retryable),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.info(
                            "api_request_retry",
                            path=path,
                            attempt=attempt.retry_state.attempt_number,
                        )
                    return await self.request(
                        "GET", path, params=params, handle_unauthorized=False,
                    )
        except AuthenticationError:
            await self.handle_unauthorized(path, sent_token=sent_token)
            raise

    async def get_model(
        self,
        path: str,
        type_: Any,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """GET and validate the body against `type_`."""
        return parse_payload(type_, await self.get(path, params=params), path)

    async def post_model(self, path: str, type_: Any, json: Any = None) -> Any:
        """POST and validate the body against `type_`."""
        return parse_payload(type_, await self.post(path, json=json) or {}, path)

    async def put_model(self, path: str, type_: Any, json: Any = None) -> Any:
        """PUT and validate the body against `type_`."""
        return parse_payload(type_, await self.put(path, json=json) or {}, path)


__all__ = ["ApiClient", "ApiError", "PUBLIC_ENDPOINTS", "parse_payload"]
