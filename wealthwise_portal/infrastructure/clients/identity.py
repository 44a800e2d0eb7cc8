"""Identity provider HTTP client for passwords, magic links and sessions"""

import httpx
from dataclasses import dataclass
from typing import Any, Dict, Optional
from wealthwise_portal.domain.exceptions import IdentityProviderError
from wealthwise_portal.config import settings
from wealthwise_portal.infrastructure.observability.metrics import identity_failures_counter


@dataclass
class IdentityUser:
    """User as known to the identity provider"""

    id: str
    email: str


@dataclass
class IdentitySession:
    """Tokens issued on a successful sign-in"""

    access_token: str
    user: IdentityUser
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class IdentityClient:
    """Client for the managed platform's auth API"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.identity_api_base).rstrip("/")
        self.api_key = api_key or settings.identity_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def sign_in_with_password(self, email: str, password: str) -> IdentitySession:
        """
        Exchange email and password for a session.

        Raises:
            IdentityProviderError: On rejected credentials, timeout or invalid response
        """
        data = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        try:
            return IdentitySession(
                access_token=data["access_token"],
                refresh_token=data.get("refresh_token"),
                expires_in=data.get("expires_in"),
                user=_parse_user(data["user"]),
            )
        except (KeyError, TypeError) as e:
            raise IdentityProviderError(f"Invalid session data from identity provider: {e}") from e

    async def sign_in_with_otp(
        self,
        email: str,
        redirect_to: str,
        should_create_user: bool = True,
    ) -> None:
        """
        Email a one-time login link that lands on ``redirect_to``.

        Raises:
            IdentityProviderError: When the provider refuses to send the link
        """
        await self._request(
            "POST",
            "/auth/v1/otp",
            params={"redirect_to": redirect_to},
            json={"email": email, "create_user": should_create_user},
        )

    async def get_user(self, access_token: str) -> IdentityUser:
        """
        Verify an access token and return its user.

        Raises:
            IdentityProviderError: Token invalid or expired
        """
        data = await self._request("GET", "/auth/v1/user", access_token=access_token)
        try:
            return _parse_user(data)
        except (KeyError, TypeError) as e:
            raise IdentityProviderError(f"Invalid user data from identity provider: {e}") from e

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session behind ``access_token``"""
        await self._request("POST", "/auth/v1/logout", access_token=access_token)

    async def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
        access_token: str | None = None,
    ) -> Dict[str, Any]:
        headers = {"apikey": self.api_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    params=params,
                    json=json,
                    headers=headers,
                )
                response.raise_for_status()
                if not response.content:
                    return {}
                return response.json()

            except httpx.TimeoutException as e:
                identity_failures_counter.inc()
                raise IdentityProviderError(f"Identity provider timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                identity_failures_counter.inc()
                raise IdentityProviderError(
                    _error_message(e.response),
                    status_code=e.response.status_code,
                ) from e
            except httpx.RequestError as e:
                identity_failures_counter.inc()
                raise IdentityProviderError(f"Identity provider unavailable: {e}") from e
            except ValueError as e:
                raise IdentityProviderError(f"Invalid response from identity provider: {e}") from e


def _parse_user(data: Dict[str, Any]) -> IdentityUser:
    return IdentityUser(id=str(data["id"]), email=data["email"])


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable error out of an auth API error body"""
    try:
        body = response.json()
    except ValueError:
        return f"Identity provider error: {response.status_code}"
    if isinstance(body, dict):
        for key in ("error_description", "msg", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"Identity provider error: {response.status_code}"
