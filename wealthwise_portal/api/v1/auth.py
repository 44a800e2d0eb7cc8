"""Authentication endpoints - password, magic link, access token and sign-out"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wealthwise_portal.api.v1.schemas import (
    ClientSchema,
    LoginRequest,
    LoginResponse,
    MagicLinkRequest,
    MessageResponse,
    TokenExchangeRequest,
    TokenExchangeResponse,
)
from wealthwise_portal.api.dependencies import (
    get_access_token,
    get_identity_client,
    get_request_id,
    get_session_cache,
    get_session_id,
)
from wealthwise_portal.config import get_redirect_url, settings
from wealthwise_portal.domain import access
from wealthwise_portal.domain.exceptions import AuthError
from wealthwise_portal.infrastructure.clients.identity import IdentityClient
from wealthwise_portal.infrastructure.database.repositories import AccessTokenRepository, ClientRepository
from wealthwise_portal.infrastructure.database.session import get_db
from wealthwise_portal.infrastructure.observability.logging import log_login
from wealthwise_portal.infrastructure.observability.metrics import record_login
from wealthwise_portal.infrastructure.session_cache import SESSION_COOKIE, SessionCache

router = APIRouter()

DASHBOARD_PATH = "/dashboard"


@router.post("/auth/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    identity: IdentityClient = Depends(get_identity_client),
):
    """Sign in with email and password provided by an administrator"""
    request_id = get_request_id(request)
    try:
        result = await access.login_with_password(identity, ClientRepository(db), body.email, body.password)
    except AuthError as e:
        record_login("password", success=False)
        log_login(request_id, "password", success=False, reason=str(e))
        raise HTTPException(status_code=401, detail=str(e))
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Client lookup failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Data store unavailable")

    record_login("password", success=True)
    log_login(request_id, "password", success=True)
    return LoginResponse(access_token=result.access_token, client=ClientSchema.from_record(result.client))


@router.post("/auth/magic-link", response_model=MessageResponse)
async def magic_link(
    body: MagicLinkRequest,
    request: Request,
    db: Session = Depends(get_db),
    identity: IdentityClient = Depends(get_identity_client),
):
    """Email a passwordless login link to a registered client"""
    request_id = get_request_id(request)
    try:
        message = await access.request_magic_link(
            identity,
            ClientRepository(db),
            body.email,
            redirect_to=get_redirect_url(DASHBOARD_PATH),
        )
    except AuthError as e:
        record_login("magic_link", success=False)
        log_login(request_id, "magic_link", success=False, reason=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Client lookup failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Data store unavailable")

    record_login("magic_link", success=True)
    return MessageResponse(message=message)


@router.post("/auth/token", response_model=TokenExchangeResponse)
async def redeem_access_token(
    body: TokenExchangeRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    identity: IdentityClient = Depends(get_identity_client),
    sessions: SessionCache = Depends(get_session_cache),
):
    """
    Redeem a single-use login-link token.

    Either a confirmation link is emailed (``link_sent``) or the client is
    cached server-side and the session cookie is set (``session_cached``).
    """
    request_id = get_request_id(request)
    try:
        result = await access.exchange_access_token(
            body.token,
            AccessTokenRepository(db),
            identity,
            sessions,
            redirect_to=get_redirect_url(DASHBOARD_PATH),
        )
    except AuthError as e:
        db.rollback()
        record_login("token", success=False)
        log_login(request_id, "token", success=False, reason=str(e))
        raise HTTPException(status_code=401, detail=str(e))

    record_login("token", success=True)
    log_login(request_id, "token", success=True)

    if result.session_id:
        response.set_cookie(
            SESSION_COOKIE,
            result.session_id,
            max_age=settings.session_ttl_minutes * 60,
            httponly=True,
            samesite="lax",
        )
        return TokenExchangeResponse(
            outcome=result.outcome,
            message=result.message,
            redirect_to=DASHBOARD_PATH,
            session_id=result.session_id,
        )

    return TokenExchangeResponse(outcome=result.outcome, message=result.message)


@router.post("/auth/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    access_token: Optional[str] = Depends(get_access_token),
    session_id: Optional[str] = Depends(get_session_id),
    identity: IdentityClient = Depends(get_identity_client),
    sessions: SessionCache = Depends(get_session_cache),
):
    """Sign out and clear any cached client session"""
    await access.sign_out(identity, sessions, access_token=access_token, session_id=session_id)
    response.delete_cookie(SESSION_COOKIE)
    return MessageResponse(message="Signed out")
