"""Integration tests for balance lookup and campaign persistence"""

import pytest
from datetime import date, timedelta
from unittest.mock import patch
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from wealthwise_portal.domain.exceptions import InsufficientFundsError, PartialWriteWarning, StoreError
from wealthwise_portal.domain.models import CampaignInput, ClientContext, TransactionType, ValidatedCampaign
from wealthwise_portal.domain.workflow import CampaignWorkflow
from wealthwise_portal.infrastructure.database.ledger import BalanceQuery, CampaignWriter
from wealthwise_portal.infrastructure.database.models import Campaign, FundTransaction

STORE_DOWN = OperationalError("INSERT", {}, Exception("connection lost"))

VALIDATED = ValidatedCampaign(name="Q1 Growth", investment=500.0, duration=30, roi=1.5)


def test_balance_query_sums_transactions(db: Session, investor, add_transaction):
    """Test net balance equals the sum of signed amounts"""
    query = BalanceQuery(db)
    assert query(str(investor.id)) == 0.0

    add_transaction(investor, 1000.0)
    add_transaction(investor, -250.5, TransactionType.WITHDRAWAL)
    add_transaction(investor, 12.25, TransactionType.ROI_PAYMENT)
    assert query(str(investor.id)) == pytest.approx(761.75)

    add_transaction(investor, -61.75, TransactionType.WITHDRAWAL)
    assert query(str(investor.id)) == pytest.approx(700.0)


def test_balance_query_failure_returns_unknown(db: Session, investor):
    """Test a store failure is swallowed and reported as unknown balance"""
    with patch(
        "wealthwise_portal.infrastructure.database.repositories.TransactionRepository.get_current_balance",
        side_effect=STORE_DOWN,
    ):
        assert BalanceQuery(db)(str(investor.id)) is None


def test_writer_creates_campaign_and_debit(db: Session, investor):
    """Test one campaign and one matching negative transaction are written"""
    start = date(2026, 1, 5)
    result = CampaignWriter(db, atomic=False).write(str(investor.id), VALIDATED, start_date=start)

    assert result.warning is None
    assert result.campaign.start_date == start
    assert result.campaign.end_date == start + timedelta(days=30)
    assert result.campaign.status.value == "active"
    assert result.campaign.total_roi_earned == 0.0

    campaigns = db.query(Campaign).all()
    transactions = db.query(FundTransaction).all()
    assert len(campaigns) == 1
    assert len(transactions) == 1
    assert transactions[0].amount == -campaigns[0].investment_amount
    assert transactions[0].transaction_type == "campaign_investment"
    assert transactions[0].description == "Investment in campaign: Q1 Growth"


def test_writer_partial_write_keeps_campaign(db: Session, investor):
    """Test a failed debit leaves the campaign and yields a warning"""
    with patch(
        "wealthwise_portal.infrastructure.database.repositories.TransactionRepository.create_transaction",
        side_effect=STORE_DOWN,
    ):
        result = CampaignWriter(db, atomic=False).write(str(investor.id), VALIDATED)

    assert isinstance(result.warning, PartialWriteWarning)
    assert result.warning.campaign_id == result.campaign.id
    assert result.transaction is None
    assert db.query(Campaign).count() == 1
    assert db.query(FundTransaction).count() == 0


def test_writer_atomic_mode_rolls_back_both(db: Session, investor):
    """Test atomic mode leaves no campaign when the debit fails"""
    with patch(
        "wealthwise_portal.infrastructure.database.repositories.TransactionRepository.create_transaction",
        side_effect=STORE_DOWN,
    ):
        with pytest.raises(StoreError) as exc_info:
            CampaignWriter(db, atomic=True).write(str(investor.id), VALIDATED)

    assert str(exc_info.value) == "connection lost"
    assert db.query(Campaign).count() == 0
    assert db.query(FundTransaction).count() == 0


def test_writer_atomic_mode_success(db: Session, investor):
    result = CampaignWriter(db, atomic=True).write(str(investor.id), VALIDATED)

    assert result.transaction.amount == -500.0
    assert db.query(Campaign).count() == 1
    assert db.query(FundTransaction).count() == 1


def test_writer_campaign_insert_failure(db: Session, investor):
    """Test campaign insert failure raises StoreError and writes nothing"""
    error = IntegrityError("INSERT", {}, Exception("new row violates row-level security policy"))
    with patch(
        "wealthwise_portal.infrastructure.database.repositories.CampaignRepository.create_campaign",
        side_effect=error,
    ):
        with pytest.raises(StoreError) as exc_info:
            CampaignWriter(db, atomic=False).write(str(investor.id), VALIDATED)

    assert str(exc_info.value) == "new row violates row-level security policy"
    assert db.query(FundTransaction).count() == 0


def test_workflow_scenario_balance_drops(db: Session, investor, investor_context: ClientContext, add_transaction):
    """Test $1000 balance, $500 campaign for 30 days -> $500 remaining"""
    add_transaction(investor, 1000.0)
    workflow = CampaignWorkflow(investor_context, CampaignWriter(db, atomic=False), BalanceQuery(db))

    assert workflow.open() == 1000.0
    result = workflow.submit(
        CampaignInput(name="Q1 Growth", investment_amount="500", duration_days="30", roi_percentage="1.5")
    )

    assert (result.campaign.end_date - result.campaign.start_date).days == 30
    assert result.transaction.amount == -500.0
    assert BalanceQuery(db)(str(investor.id)) == 500.0


def test_workflow_scenario_insufficient_no_rows(db: Session, investor, investor_context: ClientContext, add_transaction):
    """Test $100 balance rejects a $500 campaign with no writes"""
    add_transaction(investor, 100.0)
    workflow = CampaignWorkflow(investor_context, CampaignWriter(db, atomic=False), BalanceQuery(db))

    with pytest.raises(InsufficientFundsError):
        workflow.submit(
            CampaignInput(name="Q1 Growth", investment_amount="500", duration_days="30", roi_percentage="1.5")
        )

    assert workflow.error == "Insufficient balance. Available: $100.00"
    assert db.query(Campaign).count() == 0
    assert db.query(FundTransaction).count() == 1
