"""Campaign form validation - business rules for new investments"""

import math
import re
from decimal import Decimal
from typing import Optional

from wealthwise_portal.domain.models import CampaignInput, CampaignPreview, ValidatedCampaign
from wealthwise_portal.domain.exceptions import CampaignValidationError, InsufficientFundsError
from wealthwise_portal.utils.money import from_cents, to_cents

# Plain decimal or scientific notation; rejects nan, inf and digit separators
_NUMBER_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")

# Upper bounds keep end dates representable and amounts within BIGINT cents
MAX_DURATION_DAYS = 36_500
MAX_INVESTMENT = 1_000_000_000_000

NAME_REQUIRED = "Campaign name is required"
INVALID_INVESTMENT = "Enter a valid investment amount"
INVALID_DURATION = "Enter a valid duration (days)"
INVALID_ROI = "Enter a valid ROI percentage"


def parse_number(text: str | None) -> Optional[float]:
    """Parse a form field as a finite number, or None when it is not one"""
    if text is None:
        return None
    text = str(text).strip()
    if not _NUMBER_RE.fullmatch(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def parse_integer(text: str | None) -> Optional[int]:
    """
    Parse a form field as a whole number, or None when it is not one.

    Whole-valued decimals such as "30.0" are accepted; "30.5" is not.
    """
    if parse_number(text) is None:
        return None
    value = Decimal(str(text).strip())
    if value != value.to_integral_value():
        return None
    return int(value)


def validate_campaign(
    form: CampaignInput,
    current_balance: float | None = None,
) -> ValidatedCampaign:
    """
    Validate a proposed campaign against the form rules and available funds.

    Rules are checked in order and the first failure wins:
    1. Name (trimmed) must be non-empty
    2. Investment must be a finite number of at least one cent, up to MAX_INVESTMENT
    3. Duration must be a whole number of days > 0, up to MAX_DURATION_DAYS
    4. ROI must be a number > 0
    5. Investment must not exceed the balance, when the balance is known

    Raises:
        CampaignValidationError: On rules 1-4
        InsufficientFundsError: On rule 5
    """
    name = (form.name or "").strip()
    if not name:
        raise CampaignValidationError(NAME_REQUIRED)

    investment = parse_number(form.investment_amount)
    if investment is None or investment > MAX_INVESTMENT or to_cents(investment) <= 0:
        raise CampaignValidationError(INVALID_INVESTMENT)
    investment = from_cents(to_cents(investment))

    duration = parse_integer(form.duration_days)
    if duration is None or duration <= 0 or duration > MAX_DURATION_DAYS:
        raise CampaignValidationError(INVALID_DURATION)

    roi = parse_number(form.roi_percentage)
    if roi is None or roi <= 0:
        raise CampaignValidationError(INVALID_ROI)

    # Compare in whole cents
    if current_balance is not None and to_cents(investment) > to_cents(current_balance):
        raise InsufficientFundsError(current_balance)

    description = (form.description or "").strip() or None

    return ValidatedCampaign(
        name=name,
        investment=investment,
        duration=duration,
        roi=roi,
        description=description,
    )


def daily_roi_amount(investment: float, roi_percentage: float) -> float:
    """Daily return: investment x (roi / 100)"""
    return investment * (roi_percentage / 100)


def preview_campaign(form: CampaignInput) -> CampaignPreview:
    """
    Compute the display-only ROI projection for partially filled inputs.

    Fields that do not parse contribute a 0.00 figure instead of an error.
    """
    investment = parse_number(form.investment_amount)
    roi = parse_number(form.roi_percentage)
    duration = parse_integer(form.duration_days)

    if investment is None or roi is None:
        return CampaignPreview(daily_roi=0.0, projected_total=0.0)

    daily = daily_roi_amount(investment, roi)
    projected = daily * duration if duration is not None else 0.0

    return CampaignPreview(daily_roi=round(daily, 2), projected_total=round(projected, 2))
