"""Campaign investment workflow - balance check, validation and persistence"""

import logging
from typing import Callable, List, Optional, Protocol, Tuple

from wealthwise_portal.domain.models import (
    CampaignInput,
    CampaignWriteResult,
    ClientContext,
    ValidatedCampaign,
    WorkflowState,
)
from wealthwise_portal.domain.exceptions import (
    CampaignValidationError,
    StoreError,
    WorkflowBusyError,
)
from wealthwise_portal.domain.validation import validate_campaign

REFRESH_TOPICS: Tuple[str, ...] = ("campaigns", "transactions")

RefreshListener = Callable[[Tuple[str, ...]], None]
BalanceQuery = Callable[[str], Optional[float]]


class CampaignWriter(Protocol):
    def write(self, client_id: str, campaign: ValidatedCampaign) -> CampaignWriteResult:
        ...


class CampaignWorkflow:
    """
    Orchestrates one campaign creation form.

    States: idle -> validating -> submitting -> succeeded | failed.
    A finished workflow can be submitted again; nothing is retried
    automatically.
    """

    def __init__(
        self,
        context: ClientContext,
        writer: CampaignWriter,
        balance_query: BalanceQuery | None = None,
    ):
        self.context = context
        self.writer = writer
        self.balance_query = balance_query
        self.state = WorkflowState.IDLE
        self.error: Optional[str] = None
        self.result: Optional[CampaignWriteResult] = None
        self.available_balance: Optional[float] = None
        self._balance_loaded = False
        self._listeners: List[RefreshListener] = []

    @property
    def client_id(self) -> str:
        return self.context.client.id

    @property
    def in_flight(self) -> bool:
        return self.state in (WorkflowState.VALIDATING, WorkflowState.SUBMITTING)

    def add_refresh_listener(self, listener: RefreshListener) -> None:
        """Register a collaborator to reload campaigns/transactions after success"""
        self._listeners.append(listener)

    def open(self) -> Optional[float]:
        """
        Load the available balance for the form.

        Returns None when the balance is unknown; the insufficient-funds
        rule is then skipped.
        """
        self.available_balance = self.balance_query(self.client_id) if self.balance_query else None
        self._balance_loaded = True
        return self.available_balance

    def submit(self, form: CampaignInput) -> CampaignWriteResult:
        """
        Validate and persist a campaign.

        Flow:
        1. Load balance if the form was not opened
        2. Validate inputs (first failing rule is reported)
        3. Insert campaign, then ledger debit
        4. Notify refresh listeners

        Raises:
            WorkflowBusyError: Submission already in flight
            CampaignValidationError: Input rule or balance check failed (no writes)
            StoreError: Campaign insert failed
        """
        if self.in_flight:
            raise WorkflowBusyError("Campaign submission already in progress")

        self.error = None
        self.result = None

        if not self._balance_loaded:
            self.open()

        # 1. Validate
        self.state = WorkflowState.VALIDATING
        try:
            campaign = validate_campaign(form, self.available_balance)
        except CampaignValidationError as e:
            self._fail(str(e))
            raise

        # 2. Persist
        self.state = WorkflowState.SUBMITTING
        try:
            result = self.writer.write(self.client_id, campaign)
        except StoreError as e:
            self._fail(str(e))
            raise
        except Exception as e:
            self._fail(str(e) or "Campaign creation failed")
            raise

        self.result = result
        self.state = WorkflowState.SUCCEEDED

        # Balance changed; next submit must re-read it
        self._balance_loaded = False

        # 3. Refresh dependents
        for listener in self._listeners:
            listener(REFRESH_TOPICS)

        return result

    def _fail(self, message: str) -> None:
        self.state = WorkflowState.FAILED
        self.error = message
        logging.info(
            "Campaign submission failed",
            extra={"client_id": self.client_id, "step": "campaign_submit", "reason": message},
        )
