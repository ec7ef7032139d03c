# jumboboxd/integrations/identity.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from jose import JWTError, jwt

from jumboboxd.core.errors import Unauthorized, UpstreamError
from jumboboxd.core.settings import settings

log = logging.getLogger(__name__)


@dataclass
class IdentityProfile:
    external_id: str
    email: str
    username: Optional[str] = None


def _primary_email(data: Dict[str, Any]) -> str:
    """Primary address, else the first listed one, else "" (OAuth users may have none)."""
    addresses: List[Dict[str, Any]] = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    for addr in addresses:
        if primary_id and addr.get("id") == primary_id and addr.get("email_address"):
            return addr["email_address"]
    for addr in addresses:
        if addr.get("email_address"):
            return addr["email_address"]
    return ""


class IdentityGateway:
    """
    Third-party identity provider.
    - verify_token: checks a session JWT and returns its subject (external user id)
    - get_user: fetches the provider's profile for an external user id
    """

    def __init__(
        self,
        *,
        api_base: str,
        secret_key: Optional[str],
        jwt_key: Optional[str],
        algorithms: List[str],
        issuer: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.api_base = api_base.rstrip("/")
        self.secret_key = secret_key
        self.jwt_key = jwt_key
        self.algorithms = algorithms
        self.issuer = issuer
        self.timeout = timeout

    def verify_token(self, token: str) -> str:
        if not self.jwt_key:
            log.error("IDENTITY_JWT_KEY is not configured; rejecting token")
            raise Unauthorized("Invalid or expired token")
        try:
            claims = jwt.decode(
                token,
                self.jwt_key,
                algorithms=self.algorithms,
                issuer=self.issuer,
                options={"verify_aud": False},
            )
        except JWTError:
            raise Unauthorized("Invalid or expired token")
        sub = claims.get("sub")
        if not sub:
            raise Unauthorized("Invalid token")
        return str(sub)

    async def get_user(self, external_id: str) -> Optional[IdentityProfile]:
        """Return the profile, or None when the provider has no such user."""
        headers: Dict[str, str] = {}
        if self.secret_key:
            headers["Authorization"] = f"Bearer {self.secret_key}"
        # single path segment; "../x" must not walk to another endpoint
        url = f"{self.api_base}/users/{quote(external_id, safe='')}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            log.warning("identity lookup for %s failed: %r", external_id, e)
            raise UpstreamError("Identity provider unavailable") from e

        if r.status_code == 404:
            return None
        if r.status_code != 200:
            log.warning("identity lookup for %s returned %s", external_id, r.status_code)
            raise UpstreamError("Identity provider unavailable")
        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamError("Identity provider unavailable") from e

        return IdentityProfile(
            external_id=str(data.get("id") or external_id),
            email=_primary_email(data),
            username=data.get("username") or None,
        )


def get_identity_gateway() -> IdentityGateway:
    """FastAPI dependency; override in tests via app.dependency_overrides."""
    return IdentityGateway(
        api_base=settings.identity_api_base,
        secret_key=settings.identity_secret_key,
        jwt_key=settings.identity_jwt_key,
        algorithms=settings.identity_jwt_algorithms,
        issuer=settings.identity_issuer,
        timeout=settings.identity_timeout,
    )
