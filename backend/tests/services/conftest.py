"""Service test fixtures: in-memory Firestore, fake identities, vendor mocks + FastAPI test client.

Invariants:
    - Every test gets a fresh FakeFirestore
    - get_firestore, get_optional_firestore, get_token_verifier, get_stripe_gateway, get_email_client,
      get_storage, get_optional_storage and get_chat_client are overridden; no test reaches a vendor
    - Bearer tokens map to fixed identities (see mock_identity.TOKENS); unknown tokens fail with 401

Design Decisions:
    - Vendor gateways mocked with MagicMock(spec=...): calls are asserted, not simulated
    - Profiles for the fixed identities are seeded per test via seed_users
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from diaspora_connect.api.dependencies import (
    get_chat_client, get_email_client, get_stripe_gateway,
)
from diaspora_connect.infrastructure.email_client import ResendEmailClient
from diaspora_connect.infrastructure.firebase_auth import get_token_verifier
from diaspora_connect.infrastructure.firestore import get_firestore, get_optional_firestore
from diaspora_connect.infrastructure.storage import (
    StorageClient, get_optional_storage, get_storage,
)
from diaspora_connect.infrastructure.stripe_gateway import StripeGateway
from diaspora_connect.main import app

from tests.services.mock_firestore import FakeFirestore
from tests.services.mock_identity import FakeVerifier
from tests.services.mock_openai import MockChatClient, chat_response


@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def seed_users(fake_db):
    """Profiles for admin-1 (admin), mod-1 (moderator) and user-1 (supporter, free)."""
    base = {
        "emailVerified": True, "photoURL": None, "stripeCustomerId": None,
        "createdAt": datetime(2026, 1, 1, tzinfo=timezone.utc),
    }
    fake_db.seed("users", "admin-1", {
        **base, "uid": "admin-1", "email": "admin@dc.test", "name": "Ada Admin",
        "role": "admin", "membershipTier": "free", "referralCode": "ADMIN234",
    })
    fake_db.seed("users", "mod-1", {
        **base, "uid": "mod-1", "email": "mod@dc.test", "name": "Moe Moderator",
        "role": "moderator", "membershipTier": "free", "referralCode": "MODS2345",
    })
    fake_db.seed("users", "user-1", {
        **base, "uid": "user-1", "email": "tendai@dc.test", "name": "Tendai Moyo",
        "role": "supporter", "membershipTier": "free", "referralCode": "TENDAI23",
    })
    return fake_db


@pytest.fixture
def stripe_gateway():
    gateway = MagicMock(spec=StripeGateway)
    gateway.configured = True
    return gateway


@pytest.fixture
def email_client():
    client = MagicMock(spec=ResendEmailClient)
    client.configured = True
    client.send.return_value = "email_123"
    return client


@pytest.fixture
def storage_client():
    storage = MagicMock(spec=StorageClient)
    storage.upload.return_value = (
        "https://storage.googleapis.com/dc-test.appspot.com/products/p1/shirt.png"
    )
    return storage


@pytest.fixture
def chat_client():
    return MockChatClient(response=chat_response("Hello from WTP"))


@pytest.fixture
async def client(fake_db, stripe_gateway, email_client, storage_client, chat_client):
    """FastAPI test client with every datastore/vendor dependency overridden."""
    verifier = FakeVerifier()
    app.dependency_overrides[get_firestore] = lambda: fake_db
    app.dependency_overrides[get_optional_firestore] = lambda: fake_db
    app.dependency_overrides[get_token_verifier] = lambda: verifier
    app.dependency_overrides[get_stripe_gateway] = lambda: stripe_gateway
    app.dependency_overrides[get_email_client] = lambda: email_client
    app.dependency_overrides[get_storage] = lambda: storage_client
    app.dependency_overrides[get_optional_storage] = lambda: storage_client
    app.dependency_overrides[get_chat_client] = lambda: chat_client

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
