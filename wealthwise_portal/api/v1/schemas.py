"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List, Optional

from wealthwise_portal.domain.models import (
    BalanceEntry,
    CampaignRecord,
    ClientRecord,
    Lead,
    TransactionRecord,
)


class ClientSchema(BaseModel):
    """Client profile"""

    id: str
    email: str
    full_name: str
    phone: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_record(cls, record: ClientRecord) -> "ClientSchema":
        return cls(
            id=record.id,
            email=record.email,
            full_name=record.full_name,
            phone=record.phone,
            created_at=record.created_at,
        )


class LoginRequest(BaseModel):
    """Request body for POST /v1/auth/login"""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    client: ClientSchema


class MagicLinkRequest(BaseModel):
    """Request body for POST /v1/auth/magic-link"""

    email: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    message: str


class TokenExchangeRequest(BaseModel):
    """Request body for POST /v1/auth/token"""

    token: str = Field(..., min_length=1, description="Access token from the login link")


class TokenExchangeResponse(BaseModel):
    outcome: str  # link_sent | session_cached
    message: str
    redirect_to: Optional[str] = None
    session_id: Optional[str] = None


class BalanceItem(BaseModel):
    """Single balance snapshot"""

    id: str
    balance: float
    description: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_record(cls, record: BalanceEntry) -> "BalanceItem":
        return cls(
            id=record.id,
            balance=record.balance,
            description=record.description,
            created_at=record.created_at,
        )


class BalancesResponse(BaseModel):
    """Response for GET /v1/balances"""

    client_id: str
    total_balance: float
    balances: List[BalanceItem]


class CurrentBalanceResponse(BaseModel):
    """Response for GET /v1/balance"""

    client_id: str
    balance: Optional[float] = Field(None, description="Net ledger balance; null when unavailable")
    display_balance: float


class TransactionItem(BaseModel):
    """Single ledger row"""

    id: str
    amount: float
    transaction_type: str
    description: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "TransactionItem":
        return cls(
            id=record.id,
            amount=record.amount,
            transaction_type=record.transaction_type.value,
            description=record.description,
            created_at=record.created_at,
        )


class TransactionsResponse(BaseModel):
    """Response for GET /v1/transactions"""

    client_id: str
    transactions: List[TransactionItem]


class CampaignItem(BaseModel):
    """Single campaign"""

    id: str
    name: str
    description: Optional[str] = None
    investment_amount: float
    duration_days: int
    roi_percentage: float
    status: str
    start_date: date
    end_date: date
    total_roi_earned: float
    last_roi_payment: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_record(cls, record: CampaignRecord) -> "CampaignItem":
        return cls(
            id=record.id,
            name=record.name,
            description=record.description,
            investment_amount=record.investment_amount,
            duration_days=record.duration_days,
            roi_percentage=record.roi_percentage,
            status=record.status.value,
            start_date=record.start_date,
            end_date=record.end_date,
            total_roi_earned=record.total_roi_earned,
            last_roi_payment=record.last_roi_payment,
            created_at=record.created_at,
        )


class CampaignsResponse(BaseModel):
    """Response for GET /v1/campaigns"""

    client_id: str
    campaigns: List[CampaignItem]


class CampaignFormRequest(BaseModel):
    """Campaign form fields; numbers may arrive as JSON numbers or text"""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = ""
    description: Optional[str] = None
    investment_amount: str = ""
    duration_days: str = ""
    roi_percentage: str = ""


class CampaignCreateResponse(BaseModel):
    """Response for POST /v1/campaigns"""

    state: str
    campaign: CampaignItem
    transaction_id: Optional[str] = None
    ledger_recorded: bool
    refresh: List[str]


class CampaignPreviewResponse(BaseModel):
    """Response for POST /v1/campaigns/preview"""

    daily_roi: float
    projected_total: float


class LeadItem(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    status: str
    source: str
    cost: float
    created_at: datetime

    @classmethod
    def from_record(cls, lead: Lead) -> "LeadItem":
        return cls(**lead.__dict__)


class LeadTotalsSchema(BaseModel):
    total: int
    won: int
    qualified: int
    spend: float
    cost_per_lead: float


class LeadsResponse(BaseModel):
    """Response for GET /v1/campaigns/{campaign_id}/leads"""

    campaign_id: str
    campaign_name: str
    totals: LeadTotalsSchema
    leads: List[LeadItem]
