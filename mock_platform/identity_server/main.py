from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse, Response
from pathlib import Path
from typing import Dict, List, Optional
import json
import os
import uuid

app = FastAPI(title="Mock Identity Provider", version="1.0.0")
# Support both local development and Docker
STUB_DIR = Path("/identity_stub") if os.path.exists("/identity_stub") else Path(__file__).resolve().parents[1] / "identity_stub"

USERS: Dict[str, dict] = {
    user["email"]: user for user in json.loads((STUB_DIR / "users.json").read_text())["users"]
}
SESSIONS: Dict[str, str] = {}  # access token -> email
SENT_LINKS: List[dict] = []


def _error(status: int, **body) -> JSONResponse:
    return JSONResponse(status_code=status, content=body)


def _user_payload(user: dict) -> dict:
    return {"id": user["id"], "email": user["email"]}


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:]
    return None


@app.get("/health")
def health(): return {"status": "ok"}


@app.post("/auth/v1/token")
async def token(request: Request, grant_type: str = "password"):
    if grant_type != "password":
        return _error(400, error="unsupported_grant_type", error_description="Unsupported grant type")
    body = await request.json()
    user = USERS.get(body.get("email", ""))
    if not user or user["password"] != body.get("password"):
        return _error(400, error="invalid_grant", error_description="Invalid login credentials")
    if not user.get("email_confirmed", True):
        return _error(400, error="invalid_grant", error_description="Email not confirmed")

    access_token = f"mock-{uuid.uuid4()}"
    SESSIONS[access_token] = user["email"]
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": 3600,
        "refresh_token": f"refresh-{uuid.uuid4()}",
        "user": _user_payload(user),
    }


@app.post("/auth/v1/otp")
async def otp(request: Request, redirect_to: Optional[str] = None):
    body = await request.json()
    email = body.get("email", "")
    user = USERS.get(email)
    if user is None and not body.get("create_user", True):
        return _error(422, msg="Signups not allowed for otp")
    if user is not None and user.get("otp_blocked"):
        return _error(429, msg="Email rate limit exceeded")

    SENT_LINKS.append({"email": email, "redirect_to": redirect_to})
    return {}


@app.get("/auth/v1/user")
def get_user(authorization: Optional[str] = Header(None)):
    email = SESSIONS.get(_bearer(authorization) or "")
    if email is None:
        return _error(401, msg="invalid JWT: unable to parse or verify signature")
    return _user_payload(USERS[email])


@app.post("/auth/v1/logout")
def logout(authorization: Optional[str] = Header(None)):
    access_token = _bearer(authorization)
    if access_token not in SESSIONS:
        return _error(401, msg="invalid JWT: unable to parse or verify signature")
    del SESSIONS[access_token]
    return Response(status_code=204)
