"""Domain models - pure Python dataclasses representing portal entities"""

from dataclasses import dataclass, asdict
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional

from wealthwise_portal.domain.exceptions import InvalidRecordError


class TransactionType(str, Enum):
    """Kinds of ledger rows recorded against a client"""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    ROI_PAYMENT = "roi_payment"
    CAMPAIGN_INVESTMENT = "campaign_investment"


class CampaignStatus(str, Enum):
    """Campaign lifecycle status as reported by the store"""

    ACTIVE = "active"
    COMPLETED = "completed"
    OTHER = "other"

    @classmethod
    def from_value(cls, value: str | None) -> "CampaignStatus":
        # Statuses set by back-office processes collapse to OTHER
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class WorkflowState(str, Enum):
    """Campaign submission lifecycle"""

    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _get(row: Any, name: str, required: bool = True) -> Any:
    """Read a field from an ORM row or a mapping"""
    if isinstance(row, Mapping):
        value = row.get(name)
    else:
        value = getattr(row, name, None)
    if value is None and required:
        raise InvalidRecordError(f"Missing required field '{name}'")
    return value


def _as_datetime(value: Any, name: str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError as e:
            raise InvalidRecordError(f"Invalid timestamp for '{name}': {value!r}") from e
    raise InvalidRecordError(f"Invalid timestamp for '{name}': {value!r}")


def _as_date(value: Any, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise InvalidRecordError(f"Invalid date for '{name}': {value!r}") from e
    raise InvalidRecordError(f"Invalid date for '{name}': {value!r}")


def _as_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidRecordError(f"Invalid number for '{name}': {value!r}") from e


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidRecordError(f"Invalid integer for '{name}': {value!r}") from e


@dataclass(frozen=True)
class ClientRecord:
    """Portal client, one per authenticated identity"""

    id: str
    email: str
    full_name: str
    created_at: datetime
    phone: Optional[str] = None

    @classmethod
    def from_row(cls, row: Any) -> "ClientRecord":
        return cls(
            id=str(_get(row, "id")),
            email=_get(row, "email"),
            full_name=_get(row, "full_name"),
            created_at=_as_datetime(_get(row, "created_at"), "created_at"),
            phone=_get(row, "phone", required=False),
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass(frozen=True)
class BalanceEntry:
    """Administrator-recorded balance snapshot"""

    id: str
    client_id: str
    balance: float
    created_at: datetime
    description: Optional[str] = None

    @classmethod
    def from_row(cls, row: Any) -> "BalanceEntry":
        return cls(
            id=str(_get(row, "id")),
            client_id=str(_get(row, "client_id")),
            balance=_as_float(_get(row, "balance"), "balance"),
            created_at=_as_datetime(_get(row, "created_at"), "created_at"),
            description=_get(row, "description", required=False),
        )


@dataclass(frozen=True)
class TransactionRecord:
    """Signed ledger entry affecting the computed balance"""

    id: str
    client_id: str
    amount: float
    transaction_type: TransactionType
    created_at: datetime
    description: Optional[str] = None

    @classmethod
    def from_row(cls, row: Any) -> "TransactionRecord":
        raw_type = _get(row, "transaction_type")
        try:
            transaction_type = TransactionType(raw_type)
        except ValueError as e:
            raise InvalidRecordError(f"Unknown transaction type: {raw_type!r}") from e

        return cls(
            id=str(_get(row, "id")),
            client_id=str(_get(row, "client_id")),
            amount=_as_float(_get(row, "amount"), "amount"),
            transaction_type=transaction_type,
            created_at=_as_datetime(_get(row, "created_at"), "created_at"),
            description=_get(row, "description", required=False),
        )


@dataclass(frozen=True)
class CampaignRecord:
    """Client-initiated investment with fixed duration and daily ROI"""

    id: str
    client_id: str
    name: str
    investment_amount: float
    duration_days: int
    roi_percentage: float
    status: CampaignStatus
    start_date: date
    end_date: date
    total_roi_earned: float
    created_at: datetime
    description: Optional[str] = None
    last_roi_payment: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Any) -> "CampaignRecord":
        last_payment = _get(row, "last_roi_payment", required=False)
        return cls(
            id=str(_get(row, "id")),
            client_id=str(_get(row, "client_id")),
            name=_get(row, "name"),
            investment_amount=_as_float(_get(row, "investment_amount"), "investment_amount"),
            duration_days=_as_int(_get(row, "duration_days"), "duration_days"),
            roi_percentage=_as_float(_get(row, "roi_percentage"), "roi_percentage"),
            status=CampaignStatus.from_value(_get(row, "status", required=False)),
            start_date=_as_date(_get(row, "start_date"), "start_date"),
            end_date=_as_date(_get(row, "end_date"), "end_date"),
            total_roi_earned=_as_float(_get(row, "total_roi_earned", required=False) or 0, "total_roi_earned"),
            created_at=_as_datetime(_get(row, "created_at"), "created_at"),
            description=_get(row, "description", required=False),
            last_roi_payment=_as_datetime(last_payment, "last_roi_payment") if last_payment else None,
        )


@dataclass(frozen=True)
class CampaignInput:
    """Raw campaign form fields as typed by the client"""

    name: str
    investment_amount: str
    duration_days: str
    roi_percentage: str
    description: Optional[str] = None


@dataclass(frozen=True)
class ValidatedCampaign:
    """Normalized campaign inputs that passed every form rule"""

    name: str
    investment: float
    duration: int
    roi: float
    description: Optional[str] = None


@dataclass(frozen=True)
class CampaignPreview:
    """Display-only ROI projection"""

    daily_roi: float
    projected_total: float


@dataclass(frozen=True)
class CampaignWriteResult:
    """Outcome of persisting a campaign and its ledger debit"""

    campaign: CampaignRecord
    transaction: Optional[TransactionRecord] = None
    warning: Optional[Warning] = None


@dataclass(frozen=True)
class ClientContext:
    """Authenticated client for the current request"""

    client: ClientRecord
    access_token: Optional[str] = None
    session_id: Optional[str] = None


@dataclass(frozen=True)
class AccessGrant:
    """Unused, unexpired access token and the client it logs in"""

    token_id: str
    client: ClientRecord


@dataclass(frozen=True)
class Lead:
    """Sample lead attributed to a campaign"""

    id: str
    name: str
    email: str
    phone: str
    status: str
    source: str
    cost: float
    created_at: datetime


@dataclass(frozen=True)
class LeadTotals:
    """KPI summary across a campaign's leads"""

    total: int
    won: int
    qualified: int
    spend: float
    cost_per_lead: float
