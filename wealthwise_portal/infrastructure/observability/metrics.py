"""Prometheus metrics for monitoring campaign submissions, logins and store health"""

from prometheus_client import Counter, Histogram

# Campaign metrics
campaign_submission_counter = Counter(
    "wealthwise_campaign_submissions_total",
    "Campaign creation attempts",
    ["outcome"],  # created | rejected | insufficient_funds | store_error
)

campaign_investment_bucket_counter = Counter(
    "wealthwise_campaign_investment_bucket",
    "Campaign investments by size bucket",
    ["bucket"],  # $0-$100, $100-$1000, $1000-$10000, $10000+
)

partial_write_counter = Counter(
    "wealthwise_partial_ledger_writes_total",
    "Campaigns persisted without their investment transaction",
)

# Store metrics
balance_query_failures_counter = Counter(
    "wealthwise_balance_query_failures_total",
    "Failed current balance lookups",
)

# Auth metrics
login_attempt_counter = Counter(
    "wealthwise_login_attempts_total",
    "Login attempts by method and outcome",
    ["method", "outcome"],  # password | magic_link | token ; success | failure
)

identity_failures_counter = Counter(
    "wealthwise_identity_provider_failures_total",
    "Failed identity provider calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_campaign_submission(outcome: str, investment: float | None = None) -> None:
    """Record submission outcome and, for created campaigns, the investment size"""
    campaign_submission_counter.labels(outcome=outcome).inc()

    if investment is None:
        return

    if investment <= 100:
        bucket = "$0-$100"
    elif investment <= 1_000:
        bucket = "$100-$1000"
    elif investment <= 10_000:
        bucket = "$1000-$10000"
    else:
        bucket = "$10000+"

    campaign_investment_bucket_counter.labels(bucket=bucket).inc()


def record_login(method: str, success: bool) -> None:
    login_attempt_counter.labels(method=method, outcome="success" if success else "failure").inc()
