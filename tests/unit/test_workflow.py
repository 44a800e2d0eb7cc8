"""Unit tests for the campaign workflow state machine"""

import pytest
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from wealthwise_portal.domain.exceptions import (
    CampaignValidationError,
    InsufficientFundsError,
    StoreError,
    WorkflowBusyError,
)
from wealthwise_portal.domain.models import (
    CampaignInput,
    CampaignRecord,
    CampaignStatus,
    CampaignWriteResult,
    ClientContext,
    ClientRecord,
    TransactionRecord,
    TransactionType,
    ValidatedCampaign,
    WorkflowState,
)
from wealthwise_portal.domain.workflow import REFRESH_TOPICS, CampaignWorkflow

NOW = datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc)


class FakeWriter:
    """In-memory writer that records calls and can fail on demand"""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: List[ValidatedCampaign] = []

    def write(self, client_id: str, campaign: ValidatedCampaign) -> CampaignWriteResult:
        self.calls.append(campaign)
        if self.error:
            raise self.error
        start = date(2026, 1, 5)
        record = CampaignRecord(
            id=f"camp-{len(self.calls)}",
            client_id=client_id,
            name=campaign.name,
            investment_amount=campaign.investment,
            duration_days=campaign.duration,
            roi_percentage=campaign.roi,
            status=CampaignStatus.ACTIVE,
            start_date=start,
            end_date=start + timedelta(days=campaign.duration),
            total_roi_earned=0.0,
            created_at=NOW,
        )
        transaction = TransactionRecord(
            id=f"tx-{len(self.calls)}",
            client_id=client_id,
            amount=-campaign.investment,
            transaction_type=TransactionType.CAMPAIGN_INVESTMENT,
            created_at=NOW,
        )
        return CampaignWriteResult(campaign=record, transaction=transaction)


class CountingBalance:
    def __init__(self, balance: Optional[float]):
        self.balance = balance
        self.calls = 0

    def __call__(self, client_id: str) -> Optional[float]:
        self.calls += 1
        return self.balance


@pytest.fixture
def context() -> ClientContext:
    return ClientContext(
        client=ClientRecord(id="client-1", email="jane@example.com", full_name="Jane", created_at=NOW)
    )


def form(investment: str = "500") -> CampaignInput:
    return CampaignInput(name="Q1 Growth", investment_amount=investment, duration_days="30", roi_percentage="1.5")


def test_workflow_starts_idle(context):
    workflow = CampaignWorkflow(context, FakeWriter())
    assert workflow.state == WorkflowState.IDLE
    assert workflow.error is None


def test_workflow_success_signals_refresh(context):
    """Test successful submit persists once and notifies listeners"""
    writer = FakeWriter()
    signals = []
    workflow = CampaignWorkflow(context, writer, CountingBalance(1000.0))
    workflow.add_refresh_listener(signals.append)

    result = workflow.submit(form())

    assert workflow.state == WorkflowState.SUCCEEDED
    assert len(writer.calls) == 1
    assert result.transaction.amount == -result.campaign.investment_amount
    assert signals == [REFRESH_TOPICS]
    assert workflow.result is result


def test_workflow_validation_failure_blocks_writes(context):
    """Test rejected input never reaches the writer"""
    writer = FakeWriter()
    signals = []
    workflow = CampaignWorkflow(context, writer, CountingBalance(1000.0))
    workflow.add_refresh_listener(signals.append)

    with pytest.raises(CampaignValidationError):
        workflow.submit(CampaignInput(name="", investment_amount="-1", duration_days="1", roi_percentage="1"))

    assert workflow.state == WorkflowState.FAILED
    assert workflow.error == "Campaign name is required"
    assert writer.calls == []
    assert signals == []


def test_workflow_insufficient_funds(context):
    """Test balance check runs before any write"""
    writer = FakeWriter()
    workflow = CampaignWorkflow(context, writer, CountingBalance(100.0))

    with pytest.raises(InsufficientFundsError):
        workflow.submit(form("500"))

    assert workflow.error == "Insufficient balance. Available: $100.00"
    assert writer.calls == []


def test_workflow_unknown_balance_proceeds(context):
    """Test a failed balance lookup does not block submission"""
    workflow = CampaignWorkflow(context, FakeWriter(), CountingBalance(None))
    workflow.submit(form("50000"))
    assert workflow.state == WorkflowState.SUCCEEDED


def test_workflow_store_failure_surfaces_message(context):
    """Test campaign insert failure moves to failed with the store's message"""
    workflow = CampaignWorkflow(context, FakeWriter(StoreError("permission denied for table campaigns")))

    with pytest.raises(StoreError):
        workflow.submit(form())

    assert workflow.state == WorkflowState.FAILED
    assert workflow.error == "permission denied for table campaigns"


def test_workflow_resubmit_after_failure(context):
    """Test a failed workflow can be submitted again manually"""
    writer = FakeWriter(StoreError("timeout"))
    workflow = CampaignWorkflow(context, writer, CountingBalance(1000.0))

    with pytest.raises(StoreError):
        workflow.submit(form())

    writer.error = None
    workflow.submit(form())

    assert workflow.state == WorkflowState.SUCCEEDED
    assert workflow.error is None
    assert len(writer.calls) == 2


def test_workflow_rejects_submit_while_in_flight(context):
    """Test a second submit during persistence is refused"""
    workflow = None

    class ReentrantWriter(FakeWriter):
        def write(self, client_id, campaign):
            return workflow.submit(form())

    workflow = CampaignWorkflow(context, ReentrantWriter())

    with pytest.raises(WorkflowBusyError):
        workflow.submit(form())

    assert workflow.state == WorkflowState.FAILED


def test_workflow_balance_fetched_on_open_and_after_success(context):
    """Test balance is read when the form opens and refreshed after a campaign"""
    balance = CountingBalance(1000.0)
    workflow = CampaignWorkflow(context, FakeWriter(), balance)

    assert workflow.open() == 1000.0
    workflow.submit(form())
    assert balance.calls == 1

    workflow.submit(form())
    assert balance.calls == 2
