"""Client access flows - password login, magic links and access-token exchange"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from wealthwise_portal.domain.models import AccessGrant, ClientContext, ClientRecord
from wealthwise_portal.domain.exceptions import AuthError, IdentityProviderError

INVALID_CREDENTIALS = "Invalid email or password. Contact your administrator if you don't have a password."
EMAIL_NOT_CONFIRMED = "Please check your email and click the confirmation link."
LOGIN_FAILED = "Login failed. Please contact your administrator."
EMAIL_NOT_FOUND = "Email not found. Please contact your administrator."
INVALID_ACCESS_LINK = "Invalid or expired access link. Please request a new one."
ACCESS_LINK_FAILED = "Failed to process access link."
MAGIC_LINK_SENT = "Check your email for the login link!"
CONFIRMATION_LINK_SENT = "Check your email for the login confirmation link."

OUTCOME_LINK_SENT = "link_sent"
OUTCOME_SESSION_CACHED = "session_cached"


class IdentityProvider(Protocol):
    async def sign_in_with_password(self, email: str, password: str) -> Any: ...

    async def sign_in_with_otp(self, email: str, redirect_to: str, should_create_user: bool = True) -> None: ...

    async def get_user(self, access_token: str) -> Any: ...

    async def sign_out(self, access_token: str) -> None: ...


class ClientLookup(Protocol):
    def get_by_email(self, email: str) -> Optional[ClientRecord]: ...


class AccessTokenStore(Protocol):
    def find_valid(self, token: str) -> Optional[AccessGrant]: ...

    def mark_used(self, token_id: str) -> bool: ...


class SessionStore(Protocol):
    def store(self, client: ClientRecord) -> str: ...

    def load(self, session_id: str | None) -> Optional[ClientRecord]: ...

    def clear(self, session_id: str | None) -> None: ...


@dataclass(frozen=True)
class PasswordLogin:
    access_token: str
    client: ClientRecord


@dataclass(frozen=True)
class TokenExchange:
    """Result of redeeming a login-link token"""

    outcome: str
    message: str
    client: ClientRecord
    session_id: Optional[str] = None


def map_login_error(provider_message: str) -> str:
    """Translate a provider failure into a fixed, user-safe message"""
    if "Invalid login credentials" in provider_message:
        return INVALID_CREDENTIALS
    if "Email not confirmed" in provider_message:
        return EMAIL_NOT_CONFIRMED
    return LOGIN_FAILED


async def login_with_password(
    identity: IdentityProvider,
    clients: ClientLookup,
    email: str,
    password: str,
) -> PasswordLogin:
    """
    Sign in with email and password.

    Raises:
        AuthError: With a user-safe message; the provider's text is only logged
    """
    try:
        session = await identity.sign_in_with_password(email, password)
    except IdentityProviderError as e:
        logging.warning(f"Login error: {e}")
        raise AuthError(map_login_error(str(e))) from e

    client = clients.get_by_email(session.user.email)
    if client is None:
        raise AuthError(EMAIL_NOT_FOUND)

    return PasswordLogin(access_token=session.access_token, client=client)


async def request_magic_link(
    identity: IdentityProvider,
    clients: ClientLookup,
    email: str,
    redirect_to: str,
) -> str:
    """
    Email a passwordless login link to a known client.

    Raises:
        AuthError: Unknown email, or the provider's message when sending fails
    """
    if clients.get_by_email(email) is None:
        raise AuthError(EMAIL_NOT_FOUND)

    try:
        await identity.sign_in_with_otp(email, redirect_to)
    except IdentityProviderError as e:
        raise AuthError(str(e)) from e

    return MAGIC_LINK_SENT


async def exchange_access_token(
    token: str,
    tokens: AccessTokenStore,
    identity: IdentityProvider,
    sessions: SessionStore,
    redirect_to: str,
) -> TokenExchange:
    """
    Redeem a single-use access token.

    Flow:
    1. Find the token (unused, unexpired)
    2. Consume it; only one concurrent caller can win
    3. Ask the provider to email a confirmation link
    4. If the provider refuses, cache the client locally instead

    Raises:
        AuthError: Token unknown, used, expired, or processing failed
    """
    try:
        grant = tokens.find_valid(token) if token else None
        if grant is None or not tokens.mark_used(grant.token_id):
            raise AuthError(INVALID_ACCESS_LINK)

        try:
            await identity.sign_in_with_otp(grant.client.email, redirect_to, should_create_user=False)
        except IdentityProviderError as e:
            logging.info(f"Confirmation link not sent, caching client session: {e}")
            session_id = sessions.store(grant.client)
            return TokenExchange(
                outcome=OUTCOME_SESSION_CACHED,
                message="",
                client=grant.client,
                session_id=session_id,
            )

        return TokenExchange(outcome=OUTCOME_LINK_SENT, message=CONFIRMATION_LINK_SENT, client=grant.client)

    except AuthError:
        raise
    except Exception as e:
        logging.error(f"Token login error: {e}")
        raise AuthError(ACCESS_LINK_FAILED) from e


async def resolve_client(
    identity: IdentityProvider,
    clients: ClientLookup,
    sessions: SessionStore,
    access_token: str | None = None,
    session_id: str | None = None,
) -> Optional[ClientContext]:
    """
    Work out which client is making the request.

    A provider-verified access token wins; the session cache is consulted
    only when there is no verified identity.
    """
    if access_token:
        try:
            user = await identity.get_user(access_token)
        except IdentityProviderError as e:
            logging.info(f"Access token rejected: {e}")
        else:
            client = clients.get_by_email(user.email)
            if client is not None:
                return ClientContext(client=client, access_token=access_token)

    cached = sessions.load(session_id)
    if cached is not None:
        return ClientContext(client=cached, session_id=session_id)

    return None


async def sign_out(
    identity: IdentityProvider,
    sessions: SessionStore,
    access_token: str | None = None,
    session_id: str | None = None,
) -> None:
    """End the provider session (best effort) and drop any cached client"""
    if access_token:
        try:
            await identity.sign_out(access_token)
        except IdentityProviderError as e:
            logging.warning(f"Sign-out failed at identity provider: {e}")
    sessions.clear(session_id)
