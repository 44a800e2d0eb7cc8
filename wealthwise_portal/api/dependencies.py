"""Dependency injection for FastAPI endpoints"""

from typing import Optional
from fastapi import Cookie, Depends, Header, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wealthwise_portal.domain.access import resolve_client
from wealthwise_portal.domain.exceptions import InvalidRecordError
from wealthwise_portal.domain.models import ClientContext
from wealthwise_portal.infrastructure.clients.identity import IdentityClient
from wealthwise_portal.infrastructure.database.repositories import ClientRepository
from wealthwise_portal.infrastructure.database.session import get_db
from wealthwise_portal.infrastructure.session_cache import SESSION_COOKIE, SessionCache, session_cache


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_identity_client() -> IdentityClient:
    """Provide identity provider client instance"""
    return IdentityClient()


def get_session_cache() -> SessionCache:
    """Provide the process-wide session cache"""
    return session_cache


def get_access_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Bearer token from the Authorization header, if any"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def get_session_id(
    portal_session: Optional[str] = Cookie(None, alias=SESSION_COOKIE),
    x_portal_session: Optional[str] = Header(None),
) -> Optional[str]:
    """Session id from the session cookie or the X-Portal-Session header"""
    return portal_session or x_portal_session


async def get_client_context(
    access_token: Optional[str] = Depends(get_access_token),
    session_id: Optional[str] = Depends(get_session_id),
    db: Session = Depends(get_db),
    identity: IdentityClient = Depends(get_identity_client),
    sessions: SessionCache = Depends(get_session_cache),
) -> ClientContext:
    """Resolve the calling client or reject the request with 401"""
    try:
        context = await resolve_client(
            identity,
            ClientRepository(db),
            sessions,
            access_token=access_token,
            session_id=session_id,
        )
    except (SQLAlchemyError, InvalidRecordError):
        db.rollback()
        raise HTTPException(status_code=503, detail="Data store unavailable")

    if context is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return context
