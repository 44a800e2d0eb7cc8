"""Unit tests for mapping store rows to domain records"""

import pytest
from datetime import date, datetime
from wealthwise_portal.domain.exceptions import InvalidRecordError
from wealthwise_portal.domain.models import (
    CampaignRecord,
    CampaignStatus,
    ClientRecord,
    TransactionRecord,
    TransactionType,
)


def campaign_row(**overrides) -> dict:
    row = {
        "id": "c1",
        "client_id": "client-1",
        "name": "Q1 Growth",
        "investment_amount": "500",
        "duration_days": 30,
        "roi_percentage": 1.5,
        "status": "active",
        "start_date": "2026-01-05",
        "end_date": "2026-02-04",
        "total_roi_earned": None,
        "created_at": "2026-01-05T09:30:00+00:00",
    }
    row.update(overrides)
    return row


def test_campaign_from_row():
    record = CampaignRecord.from_row(campaign_row())

    assert record.investment_amount == 500.0
    assert record.start_date == date(2026, 1, 5)
    assert record.end_date == date(2026, 2, 4)
    assert record.status == CampaignStatus.ACTIVE
    assert record.total_roi_earned == 0.0
    assert record.last_roi_payment is None


def test_campaign_unknown_status_maps_to_other():
    record = CampaignRecord.from_row(campaign_row(status="paused"))
    assert record.status == CampaignStatus.OTHER


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": None},
        {"investment_amount": "lots"},
        {"duration_days": "a month"},
        {"end_date": "next week"},
    ],
)
def test_campaign_malformed_rows_rejected(overrides):
    """Test malformed rows raise instead of carrying undefined fields"""
    with pytest.raises(InvalidRecordError):
        CampaignRecord.from_row(campaign_row(**overrides))


def test_transaction_unknown_type_rejected():
    row = {
        "id": "t1",
        "client_id": "client-1",
        "amount": 10,
        "transaction_type": "refund",
        "created_at": datetime(2026, 1, 1),
    }
    with pytest.raises(InvalidRecordError):
        TransactionRecord.from_row(row)

    row["transaction_type"] = "roi_payment"
    assert TransactionRecord.from_row(row).transaction_type == TransactionType.ROI_PAYMENT


def test_client_serialization_for_session_cache():
    """Test the cached form of a client maps back to the same record"""
    client = ClientRecord(
        id="client-1",
        email="jane@example.com",
        full_name="Jane Investor",
        created_at=datetime(2026, 1, 1, 8, 0),
    )
    assert ClientRecord.from_row(client.to_dict()) == client
