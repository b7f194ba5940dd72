"""
BookingDesk Backend — Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The app under test is built with create_app() and real, local
       collaborators: an in-memory SQLite document store, a temp-dir object
       store and a static identity verifier that knows a few fixed tokens.

Fixture Hierarchy (all function-scoped):
    ├── document_store:    SQLDocumentStore on sqlite+aiosqlite :memory:
    ├── object_store:      FilesystemObjectStore under tmp_path
    ├── identity_verifier: StaticVerifier (VALID / EXPIRED / UNVERIFIED tokens)
    ├── test_settings:     Settings pointing at the fixtures above
    ├── app:               create_app(...) with the collaborators injected
    ├── test_client:       HTTPX AsyncClient over ASGITransport
    └── auth_headers:      Authorization header carrying VALID_TOKEN

ASGITransport does not run the lifespan, so the `document_store` fixture
creates the schema itself.
"""

import base64
import hashlib
import hmac
import json
import os
import tempfile
import time

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set before any bookingdesk import so the module-level app never touches
# a real database or the working directory
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="bookingdesk_test_")
os.environ["AUTH_SECRET_KEY"] = "test-secret-not-real"
os.environ["OBJECT_STORE_BACKEND"] = "filesystem"
os.environ["LOG_LEVEL"] = "WARNING"

from bookingdesk.config import Settings  # noqa: E402
from bookingdesk.database import create_engine  # noqa: E402
from bookingdesk.main import create_app  # noqa: E402
from bookingdesk.services.document_store import SQLDocumentStore  # noqa: E402
from bookingdesk.services.identity import (  # noqa: E402
    IdentityVerifier,
    InvalidCredentialsError,
    VerifiedToken,
)
from bookingdesk.services.object_store import FilesystemObjectStore  # noqa: E402

TEST_SECRET = "test-secret-not-real"
TEST_BUCKET = "test-images"

VALID_TOKEN = "valid-token"
EXPIRED_TOKEN = "expired-token"
UNVERIFIED_TOKEN = "unverified-token"
PRINCIPAL_ID = "user-1"


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles & Helpers
# ══════════════════════════════════════════════════════════════════════════

class StaticVerifier(IdentityVerifier):
    """Identity verifier that accepts a fixed table of credentials."""

    def __init__(self, tokens):
        self.tokens = dict(tokens)
        self.calls = []

    async def verify(self, credential: str) -> VerifiedToken:
        self.calls.append(credential)
        try:
            return self.tokens[credential]
        except KeyError:
            raise InvalidCredentialsError("unknown credential")


def default_tokens():
    now = int(time.time())
    return {
        VALID_TOKEN: VerifiedToken(subject=PRINCIPAL_ID, expires_at=now + 3600, email_verified=True),
        EXPIRED_TOKEN: VerifiedToken(subject=PRINCIPAL_ID, expires_at=now - 60, email_verified=True),
        UNVERIFIED_TOKEN: VerifiedToken(subject=PRINCIPAL_ID, expires_at=now + 3600, email_verified=False),
    }


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def make_hs256_token(claims: dict, secret: str = TEST_SECRET, alg: str = "HS256") -> str:
    """Sign `claims` the way the identity provider does (HS256 JWT)."""
    header_b64 = _b64(json.dumps({"alg": alg, "typ": "JWT"}, separators=(",", ":")).encode())
    payload_b64 = _b64(json.dumps(claims, separators=(",", ":")).encode())
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{_b64(signature)}"


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def document_store():
    """A fresh in-memory SQLite document store with its schema created."""
    store = SQLDocumentStore(create_engine("sqlite+aiosqlite:///:memory:"))
    await store.create_schema()
    yield store
    await store.close()


@pytest.fixture
def object_store(tmp_path):
    return FilesystemObjectStore(str(tmp_path / "objects"))


@pytest.fixture
def identity_verifier():
    return StaticVerifier(default_tokens())


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        storage_root=str(tmp_path / "objects"),
        image_bucket=TEST_BUCKET,
        auth_secret_key=TEST_SECRET,
        max_file_size=1_048_576,
        log_level="WARNING",
    )


@pytest.fixture
def app(test_settings, document_store, object_store, identity_verifier):
    return create_app(
        settings=test_settings,
        document_store=document_store,
        object_store=object_store,
        identity_verifier=identity_verifier,
    )


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app.

    raise_app_exceptions=False lets the catch-all handler's 500 reach the
    test instead of re-raising inside the transport.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {VALID_TOKEN}"}


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )
