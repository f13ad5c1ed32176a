"""Shared fixtures."""

import httpx
import pytest

from src.audit import AuditLogger
from src.config import ApiSettings
from src.services.api import ApiClient
from src.services.session import TokenSession
from src.services.storage import MemoryTokenStorage
from tests.factories import BASE_URL, FakeBackend


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def api_settings() -> ApiSettings:
    return ApiSettings(
        base_url=BASE_URL,
        timeout_seconds=5,
        unauthorized_cooldown_seconds=5.0,
        retry_delay_seconds=0,
        retry_attempts=1,
    )


@pytest.fixture
def storage() -> MemoryTokenStorage:
    return MemoryTokenStorage()


@pytest.fixture
def session(storage) -> TokenSession:
    return TokenSession(storage, storage_key="@bp-mobile-token")


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def client(backend, session, api_settings, audit_logger) -> ApiClient:
    return ApiClient(
        session,
        settings=api_settings,
        audit_logger=audit_logger,
        transport=httpx.MockTransport(backend.handler),
    )
