"""Data access layer for portal entities"""

import uuid
from datetime import date, datetime, timezone
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from wealthwise_portal.infrastructure.database.models import (
    Campaign,
    Client,
    ClientAccessToken,
    ClientBalance,
    FundTransaction,
)
from wealthwise_portal.utils.money import from_cents, to_cents
from wealthwise_portal.domain.models import (
    AccessGrant,
    BalanceEntry,
    CampaignRecord,
    ClientRecord,
    TransactionRecord,
    TransactionType,
)


def as_uuid(value: str | uuid.UUID) -> uuid.UUID:
    """Coerce an identifier to UUID; raises ValueError when malformed"""
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


class ClientRepository:
    """Repository for client profiles"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[ClientRecord]:
        row = self.db.query(Client).filter(Client.email == email).first()
        return ClientRecord.from_row(row) if row else None

    def get_by_id(self, client_id: str) -> Optional[ClientRecord]:
        row = self.db.query(Client).filter(Client.id == as_uuid(client_id)).first()
        return ClientRecord.from_row(row) if row else None


class BalanceRepository:
    """Repository for administrator balance snapshots"""

    def __init__(self, db: Session):
        self.db = db

    def get_balances_by_client(self, client_id: str) -> List[BalanceEntry]:
        """Fetch balance snapshots, newest first"""
        rows = (
            self.db.query(ClientBalance)
            .filter(ClientBalance.client_id == as_uuid(client_id))
            .order_by(ClientBalance.created_at.desc())
            .all()
        )
        return [BalanceEntry.from_row(row) for row in rows]


class TransactionRepository:
    """Repository for the fund transaction ledger"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        client_id: str,
        amount: float,
        transaction_type: TransactionType,
        description: str | None = None,
    ) -> FundTransaction:
        """Stage a ledger row and flush to obtain its ID"""
        db_transaction = FundTransaction(
            client_id=as_uuid(client_id),
            amount_cents=to_cents(amount),
            transaction_type=transaction_type.value,
            description=description,
            created_by=None,
        )
        self.db.add(db_transaction)
        self.db.flush()
        return db_transaction

    def get_transactions_by_client(self, client_id: str, limit: int = 100) -> List[TransactionRecord]:
        """Fetch recent ledger rows, newest first"""
        rows = (
            self.db.query(FundTransaction)
            .filter(FundTransaction.client_id == as_uuid(client_id))
            .order_by(FundTransaction.created_at.desc())
            .limit(limit)
            .all()
        )
        return [TransactionRecord.from_row(row) for row in rows]

    def get_current_balance(self, client_id: str) -> float:
        """Net balance: sum of all signed amounts for the client, summed in cents"""
        total_cents = (
            self.db.query(func.coalesce(func.sum(FundTransaction.amount_cents), 0))
            .filter(FundTransaction.client_id == as_uuid(client_id))
            .scalar()
        )
        return from_cents(total_cents or 0)


class CampaignRepository:
    """Repository for investment campaigns"""

    def __init__(self, db: Session):
        self.db = db

    def create_campaign(
        self,
        client_id: str,
        name: str,
        investment_amount: float,
        duration_days: int,
        roi_percentage: float,
        start_date: date,
        end_date: date,
        description: str | None = None,
    ) -> Campaign:
        """Stage a campaign row; status and ROI totals use store defaults"""
        db_campaign = Campaign(
            client_id=as_uuid(client_id),
            name=name,
            description=description,
            investment_cents=to_cents(investment_amount),
            duration_days=duration_days,
            roi_percentage=roi_percentage,
            start_date=start_date,
            end_date=end_date,
            created_by=None,
        )
        self.db.add(db_campaign)
        self.db.flush()
        return db_campaign

    def get_campaigns_by_client(self, client_id: str) -> List[CampaignRecord]:
        """Fetch campaigns, newest first"""
        rows = (
            self.db.query(Campaign)
            .filter(Campaign.client_id == as_uuid(client_id))
            .order_by(Campaign.created_at.desc())
            .all()
        )
        return [CampaignRecord.from_row(row) for row in rows]

    def get_campaign_for_client(self, campaign_id: str, client_id: str) -> Optional[CampaignRecord]:
        row = (
            self.db.query(Campaign)
            .filter(Campaign.id == as_uuid(campaign_id), Campaign.client_id == as_uuid(client_id))
            .first()
        )
        return CampaignRecord.from_row(row) if row else None


class AccessTokenRepository:
    """Repository for single-use login link tokens"""

    def __init__(self, db: Session):
        self.db = db

    def find_valid(self, token: str, now: datetime | None = None) -> Optional[AccessGrant]:
        """Look up a token that is unused and not yet expired"""
        if now is None:
            now = datetime.now(timezone.utc)
        row = (
            self.db.query(ClientAccessToken)
            .filter(
                ClientAccessToken.token == token,
                ClientAccessToken.used.is_(False),
                ClientAccessToken.expires_at > now,
            )
            .first()
        )
        if row is None or row.client is None:
            return None
        return AccessGrant(token_id=str(row.id), client=ClientRecord.from_row(row.client))

    def mark_used(self, token_id: str) -> bool:
        """
        Consume a token. Only flips rows that are still unused, so of two
        concurrent exchanges exactly one sees True.
        """
        updated = (
            self.db.query(ClientAccessToken)
            .filter(ClientAccessToken.id == as_uuid(token_id), ClientAccessToken.used.is_(False))
            .update({"used": True}, synchronize_session=False)
        )
        self.db.commit()
        return updated == 1
