"""
Authorization gate for the ingestion endpoints.

Every ingestion endpoint requires a bearer token issued by the Supabase auth
service. The token is verified by calling ``GET {SUPABASE_URL}/auth/v1/user``;
the returned e-mail must then be on the configured admin allow-list.

Bootstrap exception: seeding an empty players or tournaments table can be
allowed for an authenticated non-admin, but only when a one-time setup
token is configured and presented in the ``X-Setup-Token`` header. With no
setup token configured the exception is disabled and only admins can write.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

import httpx

from fantasy_tennis.errors import (
    AdminRequired,
    AuthenticationRequired,
    ConfigurationError,
    InvalidToken,
    UpstreamError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: Optional[str]
    is_admin: bool = False
    via_bootstrap: bool = False


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> Optional[AuthUser]: ...


class SupabaseTokenVerifier:
    """Checks a user access token against the Supabase auth service."""

    def __init__(
        self,
        supabase_url: str,
        anon_key: str,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        if not supabase_url:
            raise ConfigurationError("SUPABASE_URL not configured")
        self.user_url = f"{supabase_url.rstrip('/')}/auth/v1/user"
        self.anon_key = anon_key
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def verify(self, token: str) -> Optional[AuthUser]:
        """
        Return the token's user, or None when the auth service rejects it.

        Raises:
            UpstreamError: The auth service could not be reached or failed (5xx)
        """
        try:
            response = await self._client.get(
                self.user_url,
                headers={"Authorization": f"Bearer {token}", "apikey": self.anon_key},
            )
        except httpx.HTTPError as exc:
            logger.error("Auth service unreachable: %s", exc)
            raise UpstreamError("Authentication service unavailable") from exc

        if response.status_code >= 500:
            logger.error("Auth service returned HTTP %d", response.status_code)
            raise UpstreamError("Authentication service unavailable", upstream_status=response.status_code)
        if response.status_code != 200:
            return None
        try:
            data = response.json()
        except ValueError:
            return None
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return AuthUser(id=str(data["id"]), email=data.get("email"))

    async def close(self) -> None:
        await self._client.aclose()


@dataclass(frozen=True)
class BootstrapPolicy:
    """One-time setup token that lets a non-admin seed an empty table."""

    setup_token: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.setup_token)

    def permits(self, presented_token: Optional[str], target_table_empty: bool) -> bool:
        if not self.enabled or not target_table_empty or not presented_token:
            return False
        return hmac.compare_digest(presented_token.encode("utf-8"), self.setup_token.encode("utf-8"))


def extract_bearer_token(authorization_header: Optional[str]) -> Optional[str]:
    if not authorization_header:
        return None
    value = authorization_header.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == "bearer":
        value = rest.strip()
    return value or None


class AuthorizationGate:
    """
    Decides whether a caller may run an ingestion orchestrator.

    Usage:
        gate = AuthorizationGate(verifier, ["admin@example.com"])
        user = await gate.authorize(request.headers.get("Authorization"))
    """

    def __init__(
        self,
        verifier: TokenVerifier,
        admin_emails: Iterable[str],
        bootstrap_policy: Optional[BootstrapPolicy] = None,
    ):
        self.verifier = verifier
        self.admin_emails = frozenset(e.strip().lower() for e in admin_emails if e and e.strip())
        self.bootstrap_policy = bootstrap_policy or BootstrapPolicy()

    def is_admin(self, email: Optional[str]) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails

    async def authorize(
        self,
        authorization_header: Optional[str],
        *,
        target_table_empty: bool = False,
        setup_token: Optional[str] = None,
    ) -> AuthUser:
        """
        Raises:
            AuthenticationRequired: No bearer token (401)
            InvalidToken: The auth service rejected the token (401)
            AdminRequired: Valid user, not an admin, no bootstrap grant (403)
            UpstreamError: The auth service is down (500)
        """
        token = extract_bearer_token(authorization_header)
        if token is None:
            raise AuthenticationRequired()

        user = await self.verifier.verify(token)
        if user is None:
            raise InvalidToken()

        if self.is_admin(user.email):
            return AuthUser(id=user.id, email=user.email, is_admin=True)

        if self.bootstrap_policy.permits(setup_token, target_table_empty):
            logger.warning("Bootstrap write granted to non-admin user %s", user.email)
            return AuthUser(id=user.id, email=user.email, via_bootstrap=True)

        raise AdminRequired()
