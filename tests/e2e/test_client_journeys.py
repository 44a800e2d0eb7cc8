"""
E2E tests for client journeys through the portal API.

The identity provider is the in-process mock, so no servers need to be
running.

Journeys:
- Access link: token login, fund a campaign, watch balance drop, sign out
- Password: sign in, browse dashboard, over-invest and get rejected
- Link reuse: the same access link cannot sign in twice
"""

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from wealthwise_portal.domain import access
from wealthwise_portal.infrastructure.database.models import Client, ClientAccessToken

CAMPAIGN = {
    "name": "Spring Launch",
    "investment_amount": "400",
    "duration_days": "45",
    "roi_percentage": "2",
}


def provision_client(db: Session, email: str, full_name: str) -> Client:
    row = Client(email=email, full_name=full_name)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def issue_link(db: Session, client: Client, token: str) -> None:
    db.add(
        ClientAccessToken(
            client_id=client.id,
            token=token,
            expires_at=datetime.now(timezone.utc) + timedelta(hours=24),
        )
    )
    db.commit()


@pytest.mark.integration
def test_access_link_journey(client: TestClient, db: Session, add_transaction):
    """
    Client without a provider account signs in from an access link.
    Expected: cookie session, campaign funded, balance reduced, sign-out ends session
    """
    offline = provision_client(db, "offline.client@example.com", "Offline Client")
    add_transaction(offline, 1000.0, description="Initial deposit")
    issue_link(db, offline, "link-token-1")

    login = client.post("/v1/auth/token", json={"token": "link-token-1"})
    assert login.status_code == 200
    assert login.json()["outcome"] == "session_cached"

    # Cookie jar now carries the session
    assert client.get("/v1/me").json()["email"] == "offline.client@example.com"
    assert client.get("/v1/balance").json()["balance"] == 1000.0

    created = client.post("/v1/campaigns", json=CAMPAIGN)
    assert created.status_code == 201
    assert created.json()["refresh"] == ["campaigns", "transactions"]

    assert client.get("/v1/balance").json()["balance"] == 600.0
    transactions = client.get("/v1/transactions").json()["transactions"]
    assert {t["description"] for t in transactions} == {
        "Initial deposit",
        "Investment in campaign: Spring Launch",
    }
    assert len(client.get("/v1/campaigns").json()["campaigns"]) == 1

    assert client.post("/v1/auth/logout").status_code == 200
    assert client.get("/v1/me").status_code == 401


@pytest.mark.integration
def test_password_journey(client: TestClient, investor, add_transaction):
    """
    Provisioned client signs in with a password.
    Expected: second campaign exceeding the remaining balance is rejected
    """
    add_transaction(investor, 500.0)
    token = client.post(
        "/v1/auth/login",
        json={"email": "jane.investor@example.com", "password": "correct-horse"},
    ).json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    first = client.post("/v1/campaigns", json=CAMPAIGN, headers=headers)
    assert first.status_code == 201

    second = client.post("/v1/campaigns", json=CAMPAIGN, headers=headers)
    assert second.status_code == 422
    assert second.json()["detail"] == "Insufficient balance. Available: $100.00"

    campaigns = client.get("/v1/campaigns", headers=headers).json()["campaigns"]
    assert len(campaigns) == 1


@pytest.mark.integration
def test_access_link_single_use(client: TestClient, db: Session):
    """
    Link is opened twice.
    Expected: first succeeds, second is rejected
    """
    offline = provision_client(db, "twice@example.com", "Clicks Twice")
    issue_link(db, offline, "link-token-2")

    assert client.post("/v1/auth/token", json={"token": "link-token-2"}).status_code == 200

    again = client.post("/v1/auth/token", json={"token": "link-token-2"})
    assert again.status_code == 401
    assert again.json()["detail"] == access.INVALID_ACCESS_LINK
