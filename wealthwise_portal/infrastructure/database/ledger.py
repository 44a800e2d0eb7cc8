"""Balance lookup and campaign persistence against the fund ledger"""

import logging
from datetime import date, timedelta
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wealthwise_portal.config import settings
from wealthwise_portal.domain.exceptions import PartialWriteWarning, StoreError
from wealthwise_portal.domain.models import (
    CampaignRecord,
    CampaignWriteResult,
    TransactionRecord,
    TransactionType,
    ValidatedCampaign,
)
from wealthwise_portal.infrastructure.database.repositories import CampaignRepository, TransactionRepository
from wealthwise_portal.infrastructure.observability.metrics import (
    balance_query_failures_counter,
    partial_write_counter,
)
from wealthwise_portal.utils.date_utils import utc_today


class BalanceQuery:
    """Fresh, uncached net balance lookup"""

    def __init__(self, db: Session):
        self.db = db
        self.transactions = TransactionRepository(db)

    def __call__(self, client_id: str) -> Optional[float]:
        """
        Sum of the client's transaction amounts.

        Returns None when the store query fails; callers then skip the
        balance check instead of blocking.
        """
        try:
            return self.transactions.get_current_balance(client_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            balance_query_failures_counter.inc()
            logging.warning(f"Unable to fetch current balance: {e}", extra={"client_id": client_id})
            return None


class CampaignWriter:
    """
    Persist a campaign and its investment debit.

    Best-effort mode (default) commits the campaign first and the debit
    second; a failed debit leaves the campaign in place and is reported as a
    PartialWriteWarning. Atomic mode commits both rows together or neither.
    """

    def __init__(self, db: Session, atomic: bool | None = None):
        self.db = db
        self.atomic = settings.atomic_campaign_writes if atomic is None else atomic
        self.campaigns = CampaignRepository(db)
        self.transactions = TransactionRepository(db)

    def write(
        self,
        client_id: str,
        campaign: ValidatedCampaign,
        start_date: date | None = None,
    ) -> CampaignWriteResult:
        """
        Raises:
            StoreError: Campaign insert failed (or, in atomic mode, either insert)
        """
        if start_date is None:
            start_date = utc_today()
        end_date = start_date + timedelta(days=campaign.duration)

        # (a) Campaign row
        try:
            db_campaign = self.campaigns.create_campaign(
                client_id=client_id,
                name=campaign.name,
                description=campaign.description,
                investment_amount=campaign.investment,
                duration_days=campaign.duration,
                roi_percentage=campaign.roi,
                start_date=start_date,
                end_date=end_date,
            )
            if not self.atomic:
                self.db.commit()
            record = CampaignRecord.from_row(db_campaign)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(_store_message(e)) from e

        # (b) Ledger debit
        try:
            db_transaction = self.transactions.create_transaction(
                client_id=client_id,
                amount=-campaign.investment,
                transaction_type=TransactionType.CAMPAIGN_INVESTMENT,
                description=f"Investment in campaign: {campaign.name}",
            )
            self.db.commit()
            transaction = TransactionRecord.from_row(db_transaction)
        except SQLAlchemyError as e:
            self.db.rollback()
            if self.atomic:
                raise StoreError(_store_message(e)) from e

            warning = PartialWriteWarning(record.id, _store_message(e))
            partial_write_counter.inc()
            logging.warning(str(warning), extra={"client_id": client_id, "campaign_id": record.id})
            return CampaignWriteResult(campaign=record, warning=warning)

        return CampaignWriteResult(campaign=record, transaction=transaction)


def _store_message(error: SQLAlchemyError) -> str:
    """Driver-level message without SQLAlchemy's statement dump"""
    original = getattr(error, "orig", None)
    return str(original) if original is not None else str(error)
