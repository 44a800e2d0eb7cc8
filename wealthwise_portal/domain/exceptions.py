"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class CampaignValidationError(DomainException):
    """Campaign input violates a form rule"""

    pass


class InsufficientFundsError(CampaignValidationError):
    """Investment exceeds the client's available balance"""

    def __init__(self, available: float):
        self.available = available
        super().__init__(f"Insufficient balance. Available: ${available:.2f}")


class AuthError(DomainException):
    """Credentials, session or access token rejected"""

    pass


class IdentityProviderError(AuthError):
    """Identity provider returned an error or is unavailable"""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class StoreError(DomainException):
    """Data store read or write failed"""

    pass


class InvalidRecordError(DomainException):
    """Row returned by the store is malformed"""

    pass


class WorkflowBusyError(DomainException):
    """Campaign submission already in flight"""

    pass


class PartialWriteWarning(UserWarning):
    """Campaign persisted but its ledger debit was not"""

    def __init__(self, campaign_id: str, reason: str):
        self.campaign_id = campaign_id
        self.reason = reason
        super().__init__(f"Campaign {campaign_id} created but transaction failed: {reason}")
