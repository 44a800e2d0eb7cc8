"""Pytest fixtures for testing"""

import os

# Keep the module-level engine off Postgres during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

import httpx
import pytest
from datetime import datetime, timezone
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from mock_platform.identity_server import main as mock_identity
from wealthwise_portal.api.dependencies import get_identity_client, get_session_cache
from wealthwise_portal.api.main import create_app
from wealthwise_portal.domain.models import ClientContext, ClientRecord, TransactionType
from wealthwise_portal.infrastructure.clients.identity import IdentityClient
from wealthwise_portal.infrastructure.database.models import Base, Client, FundTransaction
from wealthwise_portal.infrastructure.database.session import get_db
from wealthwise_portal.infrastructure.session_cache import SessionCache
from wealthwise_portal.utils.money import to_cents


# Test database
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

INVESTOR_EMAIL = "jane.investor@example.com"
INVESTOR_PASSWORD = "correct-horse"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_mock_identity() -> Generator[None, None, None]:
    """Mock identity provider keeps module-level state; isolate tests"""
    mock_identity.SESSIONS.clear()
    mock_identity.SENT_LINKS.clear()
    yield
    mock_identity.SESSIONS.clear()
    mock_identity.SENT_LINKS.clear()


@pytest.fixture
def identity_client() -> IdentityClient:
    """Identity client wired to the in-process mock identity provider"""
    return IdentityClient(
        base_url="http://identity.test",
        api_key="test-anon-key",
        timeout=2.0,
        transport=httpx.ASGITransport(app=mock_identity.app),
    )


@pytest.fixture
def sessions() -> SessionCache:
    return SessionCache(ttl_minutes=30)


@pytest.fixture
def client(db: Session, identity_client: IdentityClient, sessions: SessionCache) -> TestClient:
    """Create FastAPI test client with test database and mock identity provider"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_client] = lambda: identity_client
    app.dependency_overrides[get_session_cache] = lambda: sessions
    return TestClient(app)


@pytest.fixture
def investor(db: Session) -> Client:
    """Provisioned client matching the mock identity provider's confirmed user"""
    row = Client(email=INVESTOR_EMAIL, full_name="Jane Investor", phone="+1 555 0100")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def investor_context(investor: Client) -> ClientContext:
    return ClientContext(client=ClientRecord.from_row(investor))


@pytest.fixture
def auth_headers(investor_context: ClientContext, sessions: SessionCache) -> dict:
    """Cached-session header for the investor"""
    session_id = sessions.store(investor_context.client)
    return {"X-Portal-Session": session_id}


@pytest.fixture
def add_transaction(db: Session) -> Callable[..., FundTransaction]:
    """Insert a ledger row directly, bypassing the campaign workflow"""

    def _add(
        client: Client,
        amount: float,
        transaction_type: TransactionType = TransactionType.DEPOSIT,
        description: str | None = None,
        created_at: datetime | None = None,
    ) -> FundTransaction:
        row = FundTransaction(
            client_id=client.id,
            amount_cents=to_cents(amount),
            transaction_type=transaction_type.value,
            description=description,
            created_at=created_at or datetime.now(timezone.utc),
        )
        db.add(row)
        db.commit()
        return row

    return _add
