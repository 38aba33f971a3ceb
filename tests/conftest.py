from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from token_broker.config import TokenIssuerConfig
from token_broker.main import create_app
from token_broker.service.token_service import VivoxTokenService

SECRET = "s"
FIXED_NOW = 1_700_000_000.0


@pytest.fixture
def issuer_config() -> TokenIssuerConfig:
    return TokenIssuerConfig(issuer="i", secret_key=SECRET, domain="d", admin_user_id="a")


@pytest.fixture
def token_service(issuer_config: TokenIssuerConfig) -> VivoxTokenService:
    return VivoxTokenService(issuer_config)


@pytest.fixture
def fixed_service(issuer_config: TokenIssuerConfig) -> VivoxTokenService:
    return VivoxTokenService(issuer_config, clock=lambda: FIXED_NOW)


@pytest.fixture
def app(token_service: VivoxTokenService):
    return create_app(token_service)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
def issuer_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in {"ISSUER": "i", "SERCRET_KEY": SECRET, "DOMAIN": "d", "ADMIN_USER_ID": "a"}.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("TOKEN_TTL_SECONDS", raising=False)
